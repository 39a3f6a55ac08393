"""Upstream side of the catalog: fetching, fan-out, filtering and derivations."""

from .aggregator import EventAggregator, FetchOutcome
from .cache import CacheEntry, ResponseCache, TTLCache
from .cancellation import CancellationToken, FetchCancelled
from .client import TicketingClient
from .fetcher import PaginatingFetcher
from .planner import FanOutPlanner, RequestPlan
from .service import CatalogService

__all__ = [
    "CacheEntry",
    "CancellationToken",
    "CatalogService",
    "EventAggregator",
    "FanOutPlanner",
    "FetchCancelled",
    "FetchOutcome",
    "PaginatingFetcher",
    "RequestPlan",
    "ResponseCache",
    "TTLCache",
    "TicketingClient",
]
