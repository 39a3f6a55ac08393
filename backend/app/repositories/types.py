"""Shared repository query types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MatchTier(str, Enum):
    """Slug matching tiers, ordered from strictest to most permissive."""

    EXACT = "exact"
    STARTS_WITH = "starts_with"
    CONTAINS = "contains"
    GLOBAL_EXACT = "global_exact"

    @property
    def uses_sport_filter(self) -> bool:
        return self is not MatchTier.GLOBAL_EXACT


def sport_type_candidates(*values: str | None) -> tuple[str, ...]:
    """Spellings a sport type may be stored under, e.g. ``formula-1`` → ``formula1``.

    Each value is lowercased and trimmed, then expanded with its hyphen-free
    and hyphens-as-spaces variants. Order is stable and duplicates dropped.
    """

    candidates: dict[str, None] = {}
    for value in values:
        if not value:
            continue
        normalized = value.lower().strip()
        if not normalized:
            continue
        candidates.setdefault(normalized, None)
        candidates.setdefault(normalized.replace("-", ""), None)
        candidates.setdefault(normalized.replace("-", " "), None)
    return tuple(candidates)


@dataclass(slots=True, frozen=True)
class SlugQuery:
    slug: str
    sport_types: tuple[str, ...] = ()
    tournament_id: str | None = None

    @classmethod
    def build(
        cls,
        slug: str,
        sport_slug: str | None,
        sport_type: str | None,
        *,
        tournament_id: str | None = None,
    ) -> "SlugQuery":
        return cls(
            slug=slug.lower().strip(),
            sport_types=sport_type_candidates(sport_type, sport_slug),
            tournament_id=tournament_id,
        )


__all__ = ["MatchTier", "SlugQuery", "sport_type_candidates"]
