"""Repository abstractions for database interactions."""

from .catalog_repository import CatalogRepository, slug_statement
from .types import MatchTier, SlugQuery, sport_type_candidates

__all__ = [
    "CatalogRepository",
    "MatchTier",
    "SlugQuery",
    "slug_statement",
    "sport_type_candidates",
]
