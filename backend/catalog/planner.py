"""Split a multi-valued filter into single-valued upstream request chains.

The ticketing API takes one value per parameter per request, so each
combination the filter asks for becomes its own paginated chain.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from app.core.config import settings
from app.domain import FilterSpec

from .client import TicketingClient
from .countries import normalize_to_iso3


@dataclass(slots=True, frozen=True)
class RequestPlan:
    label: str
    params: dict[str, Any]
    url: str


def _unique(values: Sequence[str], *, transform: Callable[[str], str | None] | None = None) -> list[str]:
    seen: list[str] = []
    for value in values:
        text = (value or "").strip()
        if not text:
            continue
        if transform is not None:
            text = transform(text) or ""
            if not text:
                continue
        if text not in seen:
            seen.append(text)
    return seen


class FanOutPlanner:
    def __init__(
        self,
        client: TicketingClient,
        *,
        popular_sports: Sequence[str] | None = None,
        page_size: int | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._client = client
        self.popular_sports = list(
            popular_sports if popular_sports is not None else settings.default_popular_sports
        )
        self.page_size = page_size or settings.ticketing_page_size
        self._today = today

    def _shared_params(self, filters: FilterSpec, team_id: str) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if team_id.strip():
            params["team_id"] = team_id.strip()
        if filters.free_text_query.strip():
            params["event_name"] = filters.free_text_query.strip()
        if filters.date_from.strip():
            params["date_start"] = f"ge:{filters.date_from.strip()}"
        if filters.date_to.strip():
            params["date_stop"] = f"le:{filters.date_to.strip()}"
        if filters.popular_only:
            params["popular_events"] = True
        return params

    def _build(
        self,
        label: str,
        chain: dict[str, Any],
        shared: dict[str, Any],
        *,
        hide_past: bool,
    ) -> RequestPlan:
        params = {**chain, **shared}
        if hide_past and "sport_type" in params and "date_stop" not in params and "date_start" not in params:
            params["date_stop"] = f"ge:{self._today().isoformat()}"
        params["page_size"] = self.page_size
        params["page"] = 1
        return RequestPlan(label=label, params=params, url=self._client.events_url(params))

    def plan(self, filters: FilterSpec, *, team_id: str = "", show_all: bool = False) -> list[RequestPlan]:
        """Return one request per chain, applying the first matching rule."""

        sports = _unique(filters.sport_type)
        tournaments = _unique(filters.tournament_id)
        countries = _unique(filters.country_code, transform=normalize_to_iso3)
        shared = self._shared_params(filters, team_id)
        hide_past = not show_all

        if not filters.has_upstream_filters(team_id):
            chains = [
                (f"popular:{sport}", {"sport_type": sport}) for sport in self.popular_sports
            ]
        elif sports and countries:
            chains = [
                (f"sport:{sport}/country:{country}", {"sport_type": sport, "country": country})
                for sport in sports
                for country in countries
            ]
        elif sports:
            chains = [(f"sport:{sport}", {"sport_type": sport}) for sport in sports]
        elif tournaments:
            chains = [
                (f"tournament:{tournament}", {"tournament_id": tournament})
                for tournament in tournaments
            ]
        elif countries:
            chains = [(f"country:{country}", {"country": country}) for country in countries]
        else:
            chains = [("single", {})]

        return [self._build(label, chain, shared, hide_past=hide_past) for label, chain in chains]
