"""Follow the ticketing API's ``pagination.next_page`` chain to exhaustion."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import httpx
from loguru import logger

from app.core.config import settings

from .cache import ResponseCache
from .cancellation import CancellationToken, FetchCancelled
from .client import TicketingClient
from .normalize import normalize_event
from .urls import collapse_slashes, resolve_next_page

T = TypeVar("T")

ITEM_KEYS = ("events", "results", "items", "tickets", "categories")


def extract_items(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ITEM_KEYS:
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return []


def next_page_pointer(payload: Any) -> Any:
    if not isinstance(payload, dict):
        return None
    pagination = payload.get("pagination")
    if not isinstance(pagination, dict):
        return None
    return pagination.get("next_page")


class PaginatingFetcher:
    """Fetch every page of one request chain, serving pages from the cache when fresh.

    Pages are fetched strictly in sequence. A transport failure or non-OK
    response ends the chain but keeps the pages already collected; a fired
    cancellation token discards everything by raising ``FetchCancelled``.
    """

    def __init__(
        self,
        client: TicketingClient,
        cache: ResponseCache,
        *,
        max_pages: int | None = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self.max_pages = max_pages or settings.max_pages

    async def _load_page(self, url: str, token: CancellationToken) -> Any | None:
        try:
            return await token.guard(self._client.get_json(url))
        except FetchCancelled:
            raise
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Non-OK response {} for {}; ending chain", exc.response.status_code, url
            )
        except httpx.HTTPError as exc:
            logger.warning("Transport failure for {}: {}; ending chain", url, exc)
        except ValueError as exc:
            logger.warning("Unreadable payload from {}: {}; ending chain", url, exc)
        return None

    async def fetch_all_pages(
        self,
        request_url: str,
        token: CancellationToken,
        *,
        parse: Callable[[dict[str, Any]], T | None] = normalize_event,
        use_cache: bool = True,
    ) -> list[T]:
        """Collect and parse every page of one chain.

        With ``use_cache=False`` pages are always fetched and never stored,
        for data such as ticket stock that must be current on every call.
        """

        collected: list[Any] = []
        url: str | None = collapse_slashes(request_url)
        visited: set[str] = set()
        pages = 0

        while url is not None:
            if pages >= self.max_pages:
                logger.warning("Stopped pagination at the {}-page cap for {}", self.max_pages, request_url)
                break
            token.raise_if_cancelled()
            visited.add(url)

            payload = self._cache.get(url) if use_cache else None
            from_cache = payload is not None
            if from_cache:
                logger.debug("Serving cached page {}", url)
            else:
                payload = await self._load_page(url, token)
                if payload is None:
                    break

            page_items = extract_items(payload)
            if not page_items:
                break
            if use_cache and not from_cache:
                self._cache.set(url, payload)
            collected.extend(page_items)
            pages += 1

            pointer = next_page_pointer(payload)
            next_url = resolve_next_page(url, pointer)
            if next_url is None:
                if pointer not in (None, ""):
                    logger.warning("Ignoring malformed next_page {!r} from {}", pointer, url)
                break
            if next_url in visited:
                logger.warning("Pagination cycle at {}; stopping", next_url)
                break
            url = next_url

        token.raise_if_cancelled()
        logger.info("Fetched {} page(s), {} item(s) for {}", pages, len(collected), request_url)

        records: list[T] = []
        for raw in collected:
            record = parse(raw)
            if record is not None:
                records.append(record)
        return records

