from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from app.domain import EventRecord, EventStatus
from app.services.paths import create_event_slug, sport_path
from catalog.countries import iso3_to_iso2
from catalog.derive import event_status, normalize_price


class Sport(BaseModel):
    id: str
    image_path: str | None = None

    model_config = {"from_attributes": True}


class Tournament(BaseModel):
    id: str
    slug: str | None = None
    sport_type: str | None = None
    official_name: str | None = None
    image_path: str | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class EventBase(BaseModel):
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

    @field_validator("min_price", "max_price", mode="before")
    @classmethod
    def _coerce_numeric(cls, value: Any) -> float | None:
        if value is None:
            return None
        return float(value)


class Event(EventBase):
    status: EventStatus | None = None
    display_price: float | None = None
    event_slug: str | None = None
    sport_path: str | None = None
    country_iso2: str | None = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_record(cls, record: EventRecord) -> "Event":
        """Serialize a record with its derived status, display price and link fields."""

        event = cls.model_validate(record)
        event.status = event_status(record)
        event.display_price = normalize_price(record.min_price)
        event.event_slug = (record.slug or "").lower() or create_event_slug(record.name, record.id)
        event.sport_path = sport_path(record.sport_type)
        event.country_iso2 = iso3_to_iso2(record.country)
        return event


class EventList(BaseModel):
    total: int
    items: list[Event]
    facets: dict[str, Any] = Field(default_factory=dict)
    cancelled: bool = False


class Ticket(BaseModel):
    ticket_id: str
    event_id: str
    category_id: str
    sub_category: str
    price: float
    stock: int

    model_config = {"from_attributes": True}


class TicketGroup(BaseModel):
    event_id: str
    category_id: str
    sub_category: str
    min_price: float
    max_price: float
    total_stock: int
    label: str
    tickets: list[Ticket] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class TicketSection(BaseModel):
    category_id: str
    name: str
    groups: list[TicketGroup] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class EventTickets(BaseModel):
    event_id: str
    sections: list[TicketSection] = Field(default_factory=list)


class TournamentResolution(BaseModel):
    sport: Sport | None = None
    tournament: Tournament
    canonical_path: str


class EventResolution(BaseModel):
    sport: Sport | None = None
    tournament: Tournament
    event: Event
    canonical_path: str
