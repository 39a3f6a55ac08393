"""Client-side filters the upstream API cannot express, plus merge helpers."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from app.domain import PRICE_CEILING, PRICE_FLOOR, EventRecord, FilterSpec

from .countries import normalize_to_iso3
from .derive import event_price, event_status


def parse_csv(value: str | Iterable[str] | None) -> list[str]:
    """Split a comma-separated parameter, dropping blanks and repeats."""

    if value is None:
        return []
    raw_parts: Iterable[str] = value.split(",") if isinstance(value, str) else value
    parts: list[str] = []
    for part in raw_parts:
        for piece in str(part).split(","):
            text = piece.strip()
            if text and text not in parts:
                parts.append(text)
    return parts


def _parse_bound(value: Any, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def build_filter_spec(
    *,
    sport_type: str | Iterable[str] | None = None,
    tournament_id: str | Iterable[str] | None = None,
    country: str | Iterable[str] | None = None,
    city: str | Iterable[str] | None = None,
    venue: str | Iterable[str] | None = None,
    event_status: str | Iterable[str] | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    price_min: Any = None,
    price_max: Any = None,
    query: str | None = None,
    popular_events: bool | None = None,
) -> FilterSpec:
    return FilterSpec(
        sport_type=[value.lower() for value in parse_csv(sport_type)],
        tournament_id=parse_csv(tournament_id),
        country_code=[value.upper() for value in parse_csv(country)],
        city=parse_csv(city),
        venue=parse_csv(venue),
        date_from=(date_from or "").strip(),
        date_to=(date_to or "").strip(),
        price_min=_parse_bound(price_min, PRICE_FLOOR),
        price_max=_parse_bound(price_max, PRICE_CEILING),
        free_text_query=(query or "").strip(),
        popular_only=bool(popular_events),
        event_status=[value.lower() for value in parse_csv(event_status)],
    )


def dedupe_events(events: Iterable[EventRecord]) -> list[EventRecord]:
    """Keep the first occurrence of every event id."""

    seen: set[str] = set()
    unique: list[EventRecord] = []
    for event in events:
        if event.id in seen:
            continue
        seen.add(event.id)
        unique.append(event)
    return unique


def _start_key(event: EventRecord) -> tuple[bool, float]:
    start: datetime | None = event.date_start
    if start is None:
        return (True, 0.0)
    return (False, start.timestamp())


def sort_by_start_date(events: Iterable[EventRecord]) -> list[EventRecord]:
    """Ascending start date; undated events go last in their incoming order."""

    return sorted(events, key=_start_key)


def matches_filters(event: EventRecord, spec: FilterSpec) -> bool:
    if spec.sport_type:
        wanted = {value.strip().lower() for value in spec.sport_type}
        if (event.sport_type or "").strip().lower() not in wanted:
            return False

    if spec.tournament_id:
        if (event.tournament_id or "") not in {value.strip() for value in spec.tournament_id}:
            return False

    if spec.country_code:
        wanted_countries = {
            normalize_to_iso3(value) or value.strip().upper() for value in spec.country_code
        }
        if normalize_to_iso3(event.country) not in wanted_countries:
            return False

    if spec.has_price_bounds:
        price = event_price(event)
        if price < spec.price_min or price > spec.price_max:
            return False

    if spec.city:
        if (event.city or "").strip() not in {value.strip() for value in spec.city}:
            return False

    if spec.venue:
        if (event.venue_name or "").strip() not in {value.strip() for value in spec.venue}:
            return False

    if spec.event_status:
        if event_status(event).value not in {value.strip().lower() for value in spec.event_status}:
            return False

    if spec.popular_only and event.is_popular is not True:
        return False

    return True


def apply_filters(events: Iterable[EventRecord], spec: FilterSpec) -> list[EventRecord]:
    return [event for event in events if matches_filters(event, spec)]
