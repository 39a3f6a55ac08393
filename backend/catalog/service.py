from __future__ import annotations

import asyncio
from functools import partial
from typing import Any

from loguru import logger

from app.core.config import settings
from app.domain import FilterSpec, TicketCategorySection

from .aggregator import EventAggregator, FetchOutcome
from .cache import ResponseCache, TTLCache
from .cancellation import CancellationToken
from .client import TicketingClient
from .derive import group_tickets, ticket_sections
from .fetcher import PaginatingFetcher
from .normalize import category_names, normalize_ticket
from .planner import FanOutPlanner


def _raw_item(raw: Any) -> dict[str, Any] | None:
    return raw if isinstance(raw, dict) else None


class CatalogService:
    """Entry point for event browsing and ticket views backed by the ticketing API."""

    def __init__(
        self,
        client: TicketingClient | None = None,
        *,
        cache: ResponseCache | None = None,
        planner: FanOutPlanner | None = None,
        session_ttl_seconds: float | None = None,
        sessions: TTLCache | None = None,
    ) -> None:
        self.client = client or TicketingClient()
        self.cache = cache if cache is not None else TTLCache(settings.cache_ttl_seconds)
        self.fetcher = PaginatingFetcher(self.client, self.cache)
        self.planner = planner or FanOutPlanner(self.client)
        if sessions is None:
            sessions = TTLCache(
                session_ttl_seconds or settings.session_ttl_seconds,
                max_entries=settings.max_sessions,
            )
        self._sessions = sessions

    def new_aggregator(self) -> EventAggregator:
        return EventAggregator(self.fetcher, self.planner)

    def aggregator_for(self, session_id: str | None) -> EventAggregator:
        """Return the aggregator of a filter session, creating it on first use."""

        if not session_id:
            return self.new_aggregator()
        aggregator = self._sessions.get(session_id)
        if aggregator is None:
            logger.debug("Opening filter session {}", session_id)
            aggregator = self.new_aggregator()
        self._sessions.set(session_id, aggregator)
        return aggregator

    async def fetch_events(
        self,
        filters: FilterSpec,
        *,
        team_id: str = "",
        show_all: bool = False,
        session_id: str | None = None,
    ) -> tuple[FetchOutcome, EventAggregator]:
        aggregator = self.aggregator_for(session_id)
        outcome = await aggregator.run(filters, team_id=team_id, show_all=show_all)
        return outcome, aggregator

    async def event_tickets(self, event_id: str) -> list[TicketCategorySection]:
        """Fetch available tickets and categories of one event, grouped per category."""

        token = CancellationToken()
        tickets, categories = await asyncio.gather(
            self.fetcher.fetch_all_pages(
                self.client.tickets_url(event_id),
                token,
                parse=partial(normalize_ticket, event_id=event_id),
                use_cache=False,
            ),
            self.fetcher.fetch_all_pages(
                self.client.categories_url(event_id), token, parse=_raw_item, use_cache=False
            ),
        )
        groups = group_tickets(tickets)
        sections = ticket_sections(groups, category_names(categories))
        logger.info(
            "Event {}: {} ticket(s) in {} group(s), {} section(s)",
            event_id,
            len(tickets),
            len(groups),
            len(sections),
        )
        return sections

    async def aclose(self) -> None:
        await self.client.aclose()
