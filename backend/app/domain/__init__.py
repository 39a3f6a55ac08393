"""Domain records for the sports ticket catalog."""

from .models import (
    PRICE_CEILING,
    PRICE_FLOOR,
    EventRecord,
    EventStatus,
    FilterSpec,
    SportRecord,
    TicketCategorySection,
    TicketGroup,
    TicketRecord,
    TournamentRecord,
)

__all__ = [
    "PRICE_CEILING",
    "PRICE_FLOOR",
    "EventRecord",
    "EventStatus",
    "FilterSpec",
    "SportRecord",
    "TicketCategorySection",
    "TicketGroup",
    "TicketRecord",
    "TournamentRecord",
]
