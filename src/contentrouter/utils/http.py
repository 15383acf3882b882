"""Shared aiohttp helpers for the network collaborators."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from urllib.parse import urlsplit

import aiohttp

# Errors that mean "no usable HTTP result" for every collaborator
TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, ValueError)


def is_http_url(url: Optional[str]) -> bool:
    """Check that a string is an absolute http(s) URL."""
    if not url:
        return False
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


@asynccontextmanager
async def session_scope(
    session: Optional[aiohttp.ClientSession] = None,
) -> AsyncIterator[aiohttp.ClientSession]:
    """Yield the given session, or a fresh one that is closed on exit.

    A fresh session has its own in-memory cookie jar, so nothing leaks
    between calls.
    """
    if session is not None:
        yield session
        return

    async with aiohttp.ClientSession() as owned:
        yield owned
