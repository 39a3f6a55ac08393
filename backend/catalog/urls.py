"""URL helpers for upstream requests and pagination pointers."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

_REPEATED_SLASHES = re.compile(r"/{2,}")
_QUERY_PAIR = re.compile(r"^[^/?#=&]+=")


def collapse_slashes(url: str) -> str:
    """Fold ``//`` runs in the path; the scheme separator is left alone."""

    parts = urlsplit(url)
    return urlunsplit(parts._replace(path=_REPEATED_SLASHES.sub("/", parts.path)))


def join_url(base: str, path: str) -> str:
    return collapse_slashes(f"{base.rstrip('/')}/{path.lstrip('/')}")


def with_query(url: str, params: Mapping[str, Any]) -> str:
    parts = urlsplit(url)
    query = urlencode([(key, str(value)) for key, value in params.items() if value is not None])
    return urlunsplit(parts._replace(query=query))


def with_page(url: str, page: int) -> str:
    parts = urlsplit(url)
    pairs = [(key, value) for key, value in parse_qsl(parts.query, keep_blank_values=True) if key != "page"]
    pairs.append(("page", str(page)))
    return urlunsplit(parts._replace(query=urlencode(pairs)))


def _is_absolute(value: str) -> bool:
    parts = urlsplit(value)
    return parts.scheme in {"http", "https"} and bool(parts.netloc)


def resolve_next_page(current_url: str, next_page: Any) -> str | None:
    """Turn a ``pagination.next_page`` value into a fully-qualified request URL.

    Accepted forms: a full URL, a relative URL (resolved against the current
    request), a bare query string (``page=2&...``, continuing the current
    endpoint) or a page number. Anything else yields None, which callers
    treat as the end of pagination.
    """

    if next_page is None or isinstance(next_page, bool):
        return None
    if isinstance(next_page, int):
        return with_page(current_url, next_page) if next_page > 0 else None
    if not isinstance(next_page, str):
        return None

    value = next_page.strip()
    if not value:
        return None
    if value.isdigit():
        return with_page(current_url, int(value)) if int(value) > 0 else None
    if _is_absolute(value):
        return collapse_slashes(value)
    if "://" in value:
        return None

    if value.startswith("?") or _QUERY_PAIR.match(value):
        pairs = parse_qsl(value.lstrip("?"), keep_blank_values=True)
        if not pairs:
            return None
        parts = urlsplit(current_url)
        return collapse_slashes(urlunsplit(parts._replace(query=urlencode(pairs), fragment="")))

    if "/" in value or "=" in value:
        return collapse_slashes(urljoin(current_url, value))
    return None
