"""Thin aiohttp helpers shared by every provider client.

Each call opens its own session with a certifi SSL context and a hard total
timeout. Transport errors, timeouts, non-2xx statuses and undecodable bodies
are all normalised to :class:`ProviderUnavailable`.
"""
from __future__ import annotations

import asyncio
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from .errors import ProviderUnavailable

logger = logging.getLogger(__name__)


class HttpStatusError(ProviderUnavailable):
    """Provider answered with a non-2xx status."""

    def __init__(self, provider: str, status: int) -> None:
        super().__init__(provider, f"HTTP {status}")
        self.status = status


async def request_json(
    provider: str,
    method: str,
    url: str,
    *,
    timeout: float,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    json: Any = None,
) -> Any:
    """Perform one HTTP request and return the decoded JSON body."""
    logger.debug("%s: %s %s", provider, method, url)
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    connector = aiohttp.TCPConnector(ssl=ssl_context)

    try:
        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.request(
                method,
                url,
                params=params,
                headers=headers,
                json=json,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                if not 200 <= response.status < 300:
                    raise HttpStatusError(provider, response.status)
                return await response.json(content_type=None)
    except ProviderUnavailable:
        raise
    except asyncio.TimeoutError as e:
        raise ProviderUnavailable(provider, f"timed out after {timeout}s") from e
    except (aiohttp.ClientError, ValueError) as e:
        raise ProviderUnavailable(provider, str(e) or type(e).__name__) from e


async def get_json(provider: str, url: str, *, timeout: float, **kwargs: Any) -> Any:
    return await request_json(provider, "GET", url, timeout=timeout, **kwargs)


async def post_json(provider: str, url: str, *, timeout: float, **kwargs: Any) -> Any:
    return await request_json(provider, "POST", url, timeout=timeout, **kwargs)
