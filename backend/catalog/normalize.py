from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from dateutil import parser as date_parser

from app.domain import EventRecord, TicketRecord


def _first(raw: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return None


def _parse_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = date_parser.isoparse(str(value))
        except (ValueError, TypeError, OverflowError):
            return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _parse_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        float_val = _parse_float(value)
        if float_val is None:
            return None
        return int(round(float_val))


def _parse_bool(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes"}
    return bool(value)


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_event(raw: dict[str, Any]) -> EventRecord | None:
    """Build an ``EventRecord`` from an upstream item; None when it has no id."""

    if not isinstance(raw, dict):
        return None
    event_id = _as_text(_first(raw, "event_id", "id"))
    if event_id is None:
        return None

    status = _as_text(raw.get("event_status"))
    return EventRecord(
        id=event_id,
        slug=_as_text(raw.get("slug")),
        name=_as_text(_first(raw, "event_name", "name")),
        date_start=_parse_datetime(_first(raw, "date_start", "date_start_main_event")),
        date_stop=_parse_datetime(_first(raw, "date_stop", "date_stop_main_event")),
        tournament_id=_as_text(raw.get("tournament_id")),
        tournament_name=_as_text(_first(raw, "tournament_name", "tournament")),
        venue_id=_as_text(raw.get("venue_id")),
        venue_name=_as_text(_first(raw, "venue_name", "venue")),
        city=_as_text(raw.get("city")),
        country=_as_text(_first(raw, "iso_country", "country")),
        sport_type=_as_text(raw.get("sport_type")),
        min_price=_parse_float(_first(raw, "min_ticket_price_eur", "min_price_eur")),
        max_price=_parse_float(_first(raw, "max_ticket_price_eur", "max_price_eur")),
        ticket_count=_parse_int(raw.get("number_of_tickets")),
        raw_status=status.lower() if status else None,
        is_popular=_parse_bool(raw.get("is_popular")),
        image_path=_as_text(raw.get("image")),
        updated_at=_parse_datetime(_first(raw, "updated_at", "updated")),
        raw_data=raw,
    )


def _raw_ticket_price(raw: dict[str, Any]) -> float:
    local_rates = raw.get("local_rates")
    if isinstance(local_rates, dict):
        for key in ("net_rate_eur", "face_value_eur"):
            value = _parse_float(local_rates.get(key))
            if value:
                return value
    value = _parse_float(_first(raw, "net_rate", "face_value", "sales_price", "price", "amount"))
    return value or 0.0


def normalize_ticket(raw: dict[str, Any], *, event_id: str | None = None) -> TicketRecord | None:
    """Build a ``TicketRecord``; the price keeps its upstream unit."""

    if not isinstance(raw, dict):
        return None
    ticket_id = _as_text(_first(raw, "ticket_id", "id"))
    if ticket_id is None:
        return None

    category = raw.get("category")
    category_id = _as_text(raw.get("category_id"))
    if category_id is None and isinstance(category, dict):
        category_id = _as_text(category.get("id"))

    return TicketRecord(
        ticket_id=ticket_id,
        event_id=_as_text(raw.get("event_id")) or event_id or "",
        category_id=category_id or "unknown",
        sub_category=_as_text(_first(raw, "sub_category", "subCategory")) or "regular",
        price=_raw_ticket_price(raw),
        stock=_parse_int(_first(raw, "stock", "quantity")) or 0,
    )


def category_names(raw_categories: list[dict[str, Any]]) -> dict[str, str]:
    """Map category id to its display name, skipping unnamed categories."""

    names: dict[str, str] = {}
    for raw in raw_categories:
        if not isinstance(raw, dict):
            continue
        category_id = _as_text(_first(raw, "category_id", "id"))
        name = _as_text(_first(raw, "category_name", "official_name", "name", "slug"))
        if category_id is None or name is None or name.lower() == "category":
            continue
        names[category_id] = name
    return names
