"""Redirect chain resolution with pathid capture.

Follows HTTP redirects from a start URL and reports the final URL together
with the last ``pathid`` query parameter seen along the chain.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import aiohttp

from contentrouter.core.constants import DEFAULT_REDIRECT_TIMEOUT
from contentrouter.utils.http import TRANSPORT_ERRORS, is_http_url, session_scope
from contentrouter.utils.url_utils import extract_path_id, has_path_id

logger = logging.getLogger(__name__)


@dataclass
class RedirectResult:
    """Outcome of a resolved redirect chain."""

    final_url: str
    path_id: Optional[str] = None


@dataclass
class RedirectTrace:
    """Accumulates the redirect targets observed while following a chain.

    ``observe`` may be called any number of times before the chain ends; the
    last URL carrying a pathid wins.
    """

    hops: List[str] = field(default_factory=list)
    last_url_with_path_id: Optional[str] = None

    def observe(self, url: str) -> None:
        self.hops.append(url)
        if has_path_id(url):
            self.last_url_with_path_id = url
            logger.debug(f"Redirect with pathid: {url}")

    @property
    def path_id(self) -> Optional[str]:
        return extract_path_id(self.last_url_with_path_id)


def _observe_response(trace: RedirectTrace, response: aiohttp.ClientResponse) -> str:
    """Feed every redirect target of a response into the trace.

    ``response.history`` holds one response per hop; the first one was
    requested with the start URL, every later one with a redirect target.
    """
    for hop in response.history[1:]:
        trace.observe(str(hop.url))

    final_url = str(response.url)
    trace.observe(final_url)

    # A 3xx that was not followed still names the next target
    if 300 <= response.status < 400:
        location = response.headers.get("Location")
        if location and has_path_id(location):
            trace.observe(location)

    return final_url


async def resolve_redirects(
    start_url: str,
    session: Optional[aiohttp.ClientSession] = None,
    timeout: float = DEFAULT_REDIRECT_TIMEOUT,
    trace: Optional[RedirectTrace] = None,
) -> Optional[RedirectResult]:
    """Follow redirects from ``start_url``.

    Args:
        start_url: URL to start from
        session: Optional aiohttp session; a fresh one is used when omitted
        timeout: Request and response timeout in seconds
        trace: Optional accumulator to inspect the chain afterwards

    Returns:
        RedirectResult, or None when the URL is invalid or the request failed
    """
    if not is_http_url(start_url):
        logger.warning(f"Cannot resolve invalid URL: {start_url!r}")
        return None

    trace = trace if trace is not None else RedirectTrace()
    logger.info(f"Resolving redirects from {start_url}")

    try:
        timeout_obj = aiohttp.ClientTimeout(total=timeout, sock_read=timeout)
        async with session_scope(session) as active:
            async with active.get(
                start_url, allow_redirects=True, timeout=timeout_obj
            ) as response:
                final_url = _observe_response(trace, response)
    except TRANSPORT_ERRORS as e:
        logger.warning(f"Redirect resolution failed for {start_url}: {e!r}")
        return None

    path_id = trace.path_id
    if path_id:
        logger.info(f"Resolved {start_url} -> {final_url} (pathid {path_id})")
    else:
        logger.info(f"Resolved {start_url} -> {final_url} (no pathid)")
    return RedirectResult(final_url=final_url, path_id=path_id)
