from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from app.domain import EventRecord, FilterSpec

from .cancellation import CancellationToken, FetchCancelled
from .derive import aggregate_facets
from .fetcher import PaginatingFetcher
from .filters import apply_filters, dedupe_events, sort_by_start_date
from .planner import FanOutPlanner


@dataclass(slots=True)
class FetchOutcome:
    events: list[EventRecord] = field(default_factory=list)
    cancelled: bool = False


class EventAggregator:
    """Run the planned chains concurrently and commit only the newest call's result.

    State (``events``, ``facets``, ``loading``, ``error``) belongs to whichever
    call started last. Starting a call cancels the previous call's token, and
    a generation counter keeps a late finisher from overwriting newer state.
    """

    def __init__(self, fetcher: PaginatingFetcher, planner: FanOutPlanner) -> None:
        self._fetcher = fetcher
        self._planner = planner
        self.events: list[EventRecord] = []
        self.facets: dict[str, Any] = aggregate_facets([])
        self.loading = False
        self.error: Exception | None = None
        self._generation = 0
        self._token: CancellationToken | None = None

    def cancel(self) -> None:
        if self._token is not None:
            self._token.cancel()

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def run(
        self, filters: FilterSpec, *, team_id: str = "", show_all: bool = False
    ) -> FetchOutcome:
        self.cancel()
        token = CancellationToken()
        self._token = token
        self._generation += 1
        generation = self._generation
        self.loading = True
        self.error = None

        plans = self._planner.plan(filters, team_id=team_id, show_all=show_all)
        logger.info("Fetching events over {} chain(s): {}", len(plans), [plan.label for plan in plans])

        try:
            chains = await asyncio.gather(
                *(self._fetcher.fetch_all_pages(plan.url, token) for plan in plans)
            )
        except FetchCancelled:
            logger.debug("Event fetch #{} cancelled; discarding", generation)
            if self._is_current(generation):
                self.loading = False
            return FetchOutcome(cancelled=True)
        except Exception as exc:
            logger.error("Event fetch #{} failed: {}", generation, exc)
            if self._is_current(generation):
                self.error = exc
                self.loading = False
            raise

        if token.cancelled or not self._is_current(generation):
            logger.debug("Event fetch #{} finished after being cancelled", generation)
            if self._is_current(generation):
                self.loading = False
            return FetchOutcome(cancelled=True)

        merged = dedupe_events(event for chain in chains for event in chain)
        result = sort_by_start_date(apply_filters(merged, filters))
        logger.info(
            "Event fetch #{} merged {} event(s), {} after filters", generation, len(merged), len(result)
        )

        self.events = result
        self.facets = aggregate_facets(result)
        self.loading = False
        return FetchOutcome(events=result)

    async def fetch_events(
        self, filters: FilterSpec, team_id: str = "", show_all: bool = False
    ) -> list[EventRecord]:
        """Return the filtered, sorted events; a superseded call returns ``[]``."""

        outcome = await self.run(filters, team_id=team_id, show_all=show_all)
        return outcome.events
