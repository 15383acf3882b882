"""Lightweight endpoint existence check."""

import logging
from typing import Optional

import aiohttp

from contentrouter.core.constants import DEFAULT_VALIDATION_TIMEOUT, UNREACHABLE_STATUS
from contentrouter.utils.http import TRANSPORT_ERRORS, is_http_url, session_scope

logger = logging.getLogger(__name__)


async def validate_endpoint(
    url: str,
    session: Optional[aiohttp.ClientSession] = None,
    timeout: float = DEFAULT_VALIDATION_TIMEOUT,
) -> int:
    """Issue a HEAD request and return the resulting status code.

    Redirects are followed, so the status is the one of the final response.

    Args:
        url: URL to check
        session: Optional aiohttp session; a fresh one is used when omitted
        timeout: Timeout in seconds

    Returns:
        HTTP status code, or 0 if the URL is invalid or the request failed
    """
    if not is_http_url(url):
        logger.warning(f"Cannot validate invalid URL: {url!r}")
        return UNREACHABLE_STATUS

    try:
        timeout_obj = aiohttp.ClientTimeout(total=timeout)
        async with session_scope(session) as active:
            async with active.head(
                url, allow_redirects=True, timeout=timeout_obj
            ) as response:
                status = int(response.status)
    except TRANSPORT_ERRORS as e:
        logger.warning(f"Validation failed for {url}: {e!r}")
        return UNREACHABLE_STATUS

    logger.info(f"Validated {url}: HTTP {status}")
    return status
