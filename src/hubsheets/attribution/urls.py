"""URL helpers for attribution: query-parameter extraction and hostname lookup.

Both helpers only accept absolute URLs (scheme + host). Relative paths,
malformed input and None are treated as carrying no data; they never raise.
"""

from __future__ import annotations

from urllib.parse import SplitResult, parse_qsl, urlsplit

import structlog

from src.hubsheets.core.exceptions import UrlParseError

logger = structlog.get_logger(__name__)


def _split_absolute(url: str) -> SplitResult:
    try:
        parts = urlsplit(url)
    except ValueError as exc:  # e.g. unbalanced IPv6 brackets
        raise UrlParseError(f"Malformed URL: {url!r}") from exc
    if not parts.scheme or not parts.netloc:
        raise UrlParseError(f"Not an absolute URL: {url!r}")
    return parts


def parse_url_params(url: str | None) -> dict[str, str]:
    """Return the query parameters of ``url`` as a flat dict.

    Repeated keys keep their last value, blank values are kept as "".
    Returns an empty dict for None, relative or malformed URLs.
    """
    if not url:
        return {}
    try:
        parts = _split_absolute(url)
    except UrlParseError:
        logger.debug("attribution.url_unparseable", url=url)
        return {}
    return dict(parse_qsl(parts.query, keep_blank_values=True))


def hostname_of(url: str | None) -> str | None:
    """Return the host part of an absolute URL without port or credentials.

    Case is preserved so lookups stay exact. None for unusable input.
    """
    if not url:
        return None
    try:
        parts = _split_absolute(url)
    except UrlParseError:
        return None

    host = parts.netloc.rpartition("@")[2]
    if host.startswith("["):
        return host[: host.find("]") + 1]
    return host.partition(":")[0]
