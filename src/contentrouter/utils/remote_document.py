"""Fetch the remote JSON document that names the destination URL."""

import logging
from typing import Optional

import aiohttp
from pydantic import ValidationError

from contentrouter.core.constants import DEFAULT_REDIRECT_TIMEOUT
from contentrouter.core.schemas import RemoteContentDocument
from contentrouter.utils.http import TRANSPORT_ERRORS, is_http_url, session_scope

logger = logging.getLogger(__name__)


async def fetch_remote_document_url(
    url: str,
    session: Optional[aiohttp.ClientSession] = None,
    timeout: float = DEFAULT_REDIRECT_TIMEOUT,
) -> Optional[str]:
    """Download the JSON document at ``url`` and return its ``url`` field.

    Args:
        url: Location of the JSON document
        session: Optional aiohttp session; a fresh one is used when omitted
        timeout: Timeout in seconds

    Returns:
        Destination URL, or None on non-200 status, network error, invalid
        JSON, missing field or empty value
    """
    if not is_http_url(url):
        logger.warning(f"Invalid remote document URL: {url!r}")
        return None

    try:
        timeout_obj = aiohttp.ClientTimeout(total=timeout)
        async with session_scope(session) as active:
            async with active.get(url, timeout=timeout_obj) as response:
                if response.status != 200:
                    logger.warning(
                        f"Remote document request failed: HTTP {response.status}"
                    )
                    return None
                body = await response.read()
    except TRANSPORT_ERRORS as e:
        logger.warning(f"Remote document request failed for {url}: {e!r}")
        return None

    try:
        document = RemoteContentDocument.model_validate_json(body)
    except ValidationError as e:
        logger.warning(f"Remote document could not be decoded: {e}")
        return None

    if not document.url:
        logger.warning("Remote document has an empty url")
        return None

    logger.info(f"Remote document parsed: {document.url}")
    return document.url
