"""Typed domain records shared by slug resolution, aggregation, and the API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

PRICE_FLOOR = 0.0
PRICE_CEILING = 10000.0


class EventStatus(str, Enum):
    """Derived sale status; independent of the upstream's raw vocabulary."""

    ON_SALE = "on_sale"
    COMING_SOON = "coming_soon"
    SALES_CLOSED = "sales_closed"
    NOT_CONFIRMED = "not_confirmed"


@dataclass(slots=True, frozen=True)
class SportRecord:
    id: str
    image_path: str | None = None


@dataclass(slots=True, frozen=True)
class TournamentRecord:
    id: str
    slug: str | None = None
    sport_type: str | None = None
    official_name: str | None = None
    image_path: str | None = None
    updated_at: datetime | None = None


@dataclass(slots=True, frozen=True)
class EventRecord:
    """Snapshot of one event; only ``id`` is guaranteed unique."""

    id: str
    slug: str | None = None
    name: str | None = None
    date_start: datetime | None = None
    date_stop: datetime | None = None
    tournament_id: str | None = None
    tournament_name: str | None = None
    venue_id: str | None = None
    venue_name: str | None = None
    city: str | None = None
    country: str | None = None
    sport_type: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    ticket_count: int | None = None
    raw_status: str | None = None
    is_popular: bool | None = None
    image_path: str | None = None
    updated_at: datetime | None = None
    raw_data: dict[str, Any] | None = field(default=None, compare=False, hash=False)


@dataclass(slots=True, frozen=True)
class TicketRecord:
    ticket_id: str
    event_id: str
    category_id: str
    sub_category: str
    price: float
    stock: int


@dataclass(slots=True, frozen=True)
class TicketGroup:
    """Tickets sharing ``(event_id, category_id, sub_category)``."""

    event_id: str
    category_id: str
    sub_category: str
    min_price: float
    max_price: float
    total_stock: int
    label: str
    tickets: tuple[TicketRecord, ...] = ()


@dataclass(slots=True, frozen=True)
class TicketCategorySection:
    category_id: str
    name: str
    groups: tuple[TicketGroup, ...] = ()


@dataclass(slots=True)
class FilterSpec:
    """Browse filters; list fields are OR'd internally and AND'd across fields."""

    sport_type: list[str] = field(default_factory=list)
    tournament_id: list[str] = field(default_factory=list)
    country_code: list[str] = field(default_factory=list)
    city: list[str] = field(default_factory=list)
    venue: list[str] = field(default_factory=list)
    date_from: str = ""
    date_to: str = ""
    price_min: float = PRICE_FLOOR
    price_max: float = PRICE_CEILING
    free_text_query: str = ""
    popular_only: bool = False
    event_status: list[str] = field(default_factory=list)

    @property
    def has_price_bounds(self) -> bool:
        return self.price_min > PRICE_FLOOR or self.price_max < PRICE_CEILING

    def has_upstream_filters(self, team_id: str = "") -> bool:
        """True when any dimension the upstream API can narrow by is set."""

        return bool(
            self.sport_type
            or self.tournament_id
            or self.country_code
            or team_id.strip()
            or self.free_text_query.strip()
            or self.date_from.strip()
            or self.date_to.strip()
        )
