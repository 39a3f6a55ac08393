"""Pure derivations over catalog records: sale status, prices, ticket groups, facets.

Nothing here performs I/O. Every place that displays or filters a price goes
through ``normalize_price`` so that filtering and display agree.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from app.domain import EventRecord, EventStatus, TicketCategorySection, TicketGroup, TicketRecord

SALES_CLOSED_STATUSES = frozenset({"soldout", "closed"})
NOT_CONFIRMED_STATUSES = frozenset({"cancelled", "postponed"})

MINOR_UNIT_THRESHOLD = 1000

PRICE_BUCKETS: tuple[tuple[str, float | None], ...] = (
    ("0-99", 100),
    ("100-199", 200),
    ("200-499", 500),
    ("500-999", 1000),
    ("1000+", None),
)


def derive_status(raw_status: str | None, ticket_count: int | None) -> EventStatus:
    """Map an upstream status plus stock to the storefront's sale status.

    Buyable inventory always reads as on sale, even when the upstream flags
    the event as ``notstarted`` or ``nosale``.
    """

    status = (raw_status or "").strip().lower()
    if status in SALES_CLOSED_STATUSES:
        return EventStatus.SALES_CLOSED
    if status in NOT_CONFIRMED_STATUSES:
        return EventStatus.NOT_CONFIRMED
    if (ticket_count or 0) > 0:
        return EventStatus.ON_SALE
    return EventStatus.COMING_SOON


def event_status(event: EventRecord) -> EventStatus:
    return derive_status(event.raw_status, event.ticket_count)


def normalize_price(value: float | None) -> float | None:
    """Read ``value`` as minor units when above 1000, else as major units.

    The upstream payload carries no unit flag, so this is a heuristic.
    ``1000`` itself is read as major units; real prices near the boundary
    are ambiguous.
    """

    if value is None:
        return None
    value = float(value)
    return value / 100 if value > MINOR_UNIT_THRESHOLD else value


def event_price(event: EventRecord) -> float:
    return normalize_price(event.min_price) or 0.0


def price_bucket(price: float) -> str | None:
    if price <= 0:
        return None
    for label, upper in PRICE_BUCKETS:
        if upper is None or price < upper:
            return label
    return None


def day_weight(sub_category: str) -> int:
    """Race/match-day ordering: Friday, Saturday, Sunday, weekend, then the rest."""

    lowered = (sub_category or "").lower()
    if "fri" in lowered:
        return 1
    if "sat" in lowered:
        return 2
    if "sun" in lowered:
        return 3
    if "weekend" in lowered:
        return 4
    return 9


def format_ticket_type(sub_category: str) -> str:
    raw = (sub_category or "").lower()
    has_fri, has_sat, has_sun = "fri" in raw, "sat" in raw, "sun" in raw
    if "weekend" in raw or (has_fri and has_sat and has_sun):
        return "Friday-Sunday"
    if has_sat and has_sun and not has_fri:
        return "Saturday-Sunday"
    if has_fri and not has_sat and not has_sun:
        return "Friday"
    if has_sat and not has_fri and not has_sun:
        return "Saturday"
    if has_sun and not has_fri and not has_sat:
        return "Sunday"
    return " ".join(word.capitalize() for word in (sub_category or "").replace("_", " ").split())


def group_tickets(tickets: Iterable[TicketRecord]) -> list[TicketGroup]:
    """Group tickets by ``(event_id, category_id, sub_category)``.

    Categories appear cheapest first. Inside a category, groups follow the
    race-day convention of ``day_weight`` and then ascending ``min_price``;
    this ordering is a product convention, not a general sort.
    """

    members: dict[tuple[str, str, str], list[TicketRecord]] = {}
    for ticket in tickets:
        members.setdefault((ticket.event_id, ticket.category_id, ticket.sub_category), []).append(
            ticket
        )

    groups: list[TicketGroup] = []
    for (event_id, category_id, sub_category), grouped in members.items():
        prices = [normalize_price(ticket.price) or 0.0 for ticket in grouped]
        groups.append(
            TicketGroup(
                event_id=event_id,
                category_id=category_id,
                sub_category=sub_category,
                min_price=min(prices),
                max_price=max(prices),
                total_stock=sum(ticket.stock for ticket in grouped),
                label=format_ticket_type(sub_category),
                tickets=tuple(grouped),
            )
        )

    groups.sort(key=lambda group: group.min_price)
    by_category: dict[tuple[str, str], list[TicketGroup]] = {}
    for group in groups:
        by_category.setdefault((group.event_id, group.category_id), []).append(group)

    ordered: list[TicketGroup] = []
    for category_groups in by_category.values():
        ordered.extend(
            sorted(category_groups, key=lambda group: (day_weight(group.sub_category), group.min_price))
        )
    return ordered


def ticket_sections(
    groups: Sequence[TicketGroup], category_names: Mapping[str, str]
) -> list[TicketCategorySection]:
    """Bundle ordered groups per category, dropping categories with no name."""

    sections: dict[str, list[TicketGroup]] = {}
    for group in groups:
        if group.category_id not in category_names:
            continue
        sections.setdefault(group.category_id, []).append(group)
    return [
        TicketCategorySection(
            category_id=category_id, name=category_names[category_id], groups=tuple(members)
        )
        for category_id, members in sections.items()
    ]


def aggregate_facets(events: Iterable[EventRecord]) -> dict[str, Any]:
    """Count events per filterable dimension for the browse sidebar."""

    sports: Counter[str] = Counter()
    countries: Counter[str] = Counter()
    cities: Counter[str] = Counter()
    venues: Counter[str] = Counter()
    statuses: Counter[str] = Counter()
    price_ranges: dict[str, int] = {label: 0 for label, _ in PRICE_BUCKETS}
    tournaments: dict[str, dict[str, Any]] = {}

    for event in events:
        if event.sport_type:
            sports[event.sport_type.lower()] += 1
        if event.country:
            countries[event.country.upper()] += 1
        if event.city:
            cities[event.city] += 1
        if event.venue_name:
            venues[event.venue_name] += 1
        if event.tournament_id:
            entry = tournaments.setdefault(
                event.tournament_id,
                {"id": event.tournament_id, "name": event.tournament_id, "count": 0},
            )
            entry["count"] += 1
            if event.tournament_name:
                entry["name"] = event.tournament_name
        statuses[event_status(event).value] += 1
        bucket = price_bucket(event_price(event))
        if bucket is not None:
            price_ranges[bucket] += 1

    return {
        "sports": dict(sports),
        "countries": dict(countries),
        "cities": dict(cities),
        "venues": dict(venues),
        "tournaments": list(tournaments.values()),
        "statuses": dict(statuses),
        "price_ranges": price_ranges,
    }
