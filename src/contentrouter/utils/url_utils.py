"""URL helpers for pathid handling and coarse same-site checks."""

from typing import List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from contentrouter.core.constants import PATH_ID_PARAM


def _query_pairs(url: str) -> Optional[List[Tuple[str, str]]]:
    try:
        return parse_qsl(urlsplit(url).query, keep_blank_values=True)
    except ValueError:
        return None


def _is_path_id(name: str) -> bool:
    return name.lower() == PATH_ID_PARAM


def has_path_id(url: Optional[str]) -> bool:
    """Check whether a URL carries a pathid query parameter (any case)."""
    if not url:
        return False
    pairs = _query_pairs(url)
    return bool(pairs) and any(_is_path_id(name) for name, _ in pairs)


def extract_path_id(url: Optional[str]) -> Optional[str]:
    """Return the value of the first pathid parameter, or None.

    Parameter names are matched case-insensitively. An empty value counts
    as missing.
    """
    if not url:
        return None
    for name, value in _query_pairs(url) or []:
        if _is_path_id(name):
            return value or None
    return None


def strip_path_id(url: str) -> str:
    """Remove every pathid parameter from a URL.

    The query string is dropped entirely when nothing else remains. URLs
    without a pathid, and URLs that cannot be parsed, are returned unchanged,
    which makes the function idempotent.

    Args:
        url: URL to clean

    Returns:
        URL string without pathid
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return url

    pairs = parse_qsl(parts.query, keep_blank_values=True)
    kept = [(name, value) for name, value in pairs if not _is_path_id(name)]
    if len(kept) == len(pairs):
        return url

    return urlunsplit(
        (parts.scheme, parts.netloc, parts.path, urlencode(kept), parts.fragment)
    )


def append_path_id(url: str, path_id: str) -> Optional[str]:
    """Add ``pathid=<path_id>`` to a URL, keeping its existing parameters.

    Returns:
        The new URL, or None if ``url`` is not an absolute URL
    """
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None

    pairs = parse_qsl(parts.query, keep_blank_values=True)
    pairs.append((PATH_ID_PARAM, path_id))
    return urlunsplit(
        (parts.scheme, parts.netloc, parts.path, urlencode(pairs), parts.fragment)
    )


def host_of(value: Optional[str]) -> Optional[str]:
    """Return the lowercase host of a URL, or the value itself if it is a bare host."""
    if not value:
        return None
    candidate = value.strip()
    if "://" in candidate:
        try:
            candidate = urlsplit(candidate).hostname or ""
        except ValueError:
            return None
    return candidate.lower() or None


def base_domain(host: str) -> str:
    """Last two dot-separated labels of a host, or the whole host if shorter."""
    parts = host.lower().split(".")
    if len(parts) >= 2:
        return ".".join(parts[-2:])
    return host.lower()


def same_base_domain(first: str, second: str) -> bool:
    """Compare the base domains of two hosts or URLs.

    Examples:
        same_base_domain("a.example.com", "b.example.com") -> True
        same_base_domain("example.com", "example.org") -> False
    """
    first_host = host_of(first)
    second_host = host_of(second)
    if first_host is None or second_host is None:
        return first_host == second_host
    return base_domain(first_host) == base_domain(second_host)


def is_saving_allowed(candidate_url: str, source_url: str) -> bool:
    """Check whether a resolved URL may replace the cached destination.

    Saving is refused when the candidate lives on the same base domain as the
    configured source, since that means the chain bounced back to the source
    site. URLs without a host are always allowed.
    """
    candidate_host = host_of(candidate_url)
    source_host = host_of(source_url)
    if candidate_host is None or source_host is None:
        return True
    return base_domain(candidate_host) != base_domain(source_host)


def contains_owner_identifier(url: str, owner_identifier: str) -> bool:
    """Substring check for the owner identifier; empty identifiers never match."""
    if not owner_identifier:
        return False
    return owner_identifier in url
