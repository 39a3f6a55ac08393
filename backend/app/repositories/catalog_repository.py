"""Read-only lookups against the sports, tournaments and events tables."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from app.models import Event, Sport, Tournament

from .types import MatchTier, SlugQuery


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def slug_statement(model: Any, tier: MatchTier, query: SlugQuery) -> Select:
    """Build the SELECT for one matching tier over ``Tournament`` or ``Event``."""

    slug_column = func.lower(model.slug)
    statement = select(model)

    if query.tournament_id is not None and model is Event:
        statement = statement.where(model.tournament_id == query.tournament_id)

    if tier in (MatchTier.EXACT, MatchTier.GLOBAL_EXACT):
        statement = statement.where(slug_column == query.slug)
    elif tier is MatchTier.STARTS_WITH:
        statement = statement.where(
            slug_column.like(f"{_escape_like(query.slug)}%", escape="\\")
        )
    else:
        statement = statement.where(
            slug_column.like(f"%{_escape_like(query.slug)}%", escape="\\")
        )

    if tier.uses_sport_filter:
        statement = statement.where(func.lower(model.sport_type).in_(query.sport_types))

    return statement.order_by(model.updated_at.desc().nulls_last()).limit(1)


class CatalogRepository:
    """Encapsulate catalog read queries used by slug resolution."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_sport(self, candidates: tuple[str, ...], sport_slug: str) -> Sport | None:
        if candidates:
            sport = self._session.execute(
                select(Sport).where(func.lower(Sport.sport_id).in_(candidates)).limit(1)
            ).scalar_one_or_none()
            if sport is not None:
                return sport

        prefix = sport_slug.lower().strip()
        if not prefix:
            return None
        return self._session.execute(
            select(Sport)
            .where(func.lower(Sport.sport_id).like(f"{_escape_like(prefix)}%", escape="\\"))
            .order_by(Sport.sport_id)
            .limit(1)
        ).scalar_one_or_none()

    def find_tournament(self, tier: MatchTier, query: SlugQuery) -> Tournament | None:
        if tier.uses_sport_filter and not query.sport_types:
            return None
        return self._session.execute(
            slug_statement(Tournament, tier, query)
        ).scalar_one_or_none()

    def find_event(self, tier: MatchTier, query: SlugQuery) -> Event | None:
        if tier.uses_sport_filter and not query.sport_types:
            return None
        return self._session.execute(slug_statement(Event, tier, query)).scalar_one_or_none()

    def get_tournament(self, tournament_id: str) -> Tournament | None:
        return self._session.get(Tournament, tournament_id)

    def get_event(self, event_id: str) -> Event | None:
        return self._session.execute(
            select(Event).where(func.lower(Event.event_id) == event_id.lower()).limit(1)
        ).scalar_one_or_none()
