"""Resolve sport/tournament/event path segments into canonical catalog records.

Upstream slugs are neither unique nor consistently present, and sport types
drift in spelling (``formula1`` / ``formula-1`` / ``formula 1``). Every lookup
therefore runs an ordered cascade of matching tiers, each more permissive
than the last, and stops at the first hit. When the record found carries a
different slug than the one requested, callers redirect to the canonical
path instead of rendering under the requested one.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain import EventRecord, SportRecord, TournamentRecord
from app.models import Event, Sport, Tournament
from app.repositories import CatalogRepository, MatchTier, SlugQuery, sport_type_candidates

from .paths import (
    build_event_path,
    build_tournament_path,
    extract_event_id_from_slug,
    resolve_sport_type_from_slug,
)

T = TypeVar("T")

SLUG_CASCADE: tuple[MatchTier, ...] = (
    MatchTier.EXACT,
    MatchTier.STARTS_WITH,
    MatchTier.CONTAINS,
    MatchTier.GLOBAL_EXACT,
)


@dataclass(slots=True, frozen=True)
class Resolution(Generic[T]):
    record: T
    tier: MatchTier


def run_cascade(
    lookup: Callable[[MatchTier, SlugQuery], T | None],
    query: SlugQuery,
    *,
    tiers: Sequence[MatchTier] = SLUG_CASCADE,
    label: str = "record",
) -> Resolution[T] | None:
    """Try each tier in order; a datastore error only costs that tier."""

    for tier in tiers:
        try:
            found = lookup(tier, query)
        except SQLAlchemyError as exc:
            logger.warning(
                "{} lookup failed at tier {} for slug {!r}: {}", label, tier.value, query.slug, exc
            )
            continue
        if found is not None:
            logger.debug("{} slug {!r} matched at tier {}", label, query.slug, tier.value)
            return Resolution(record=found, tier=tier)
    return None


def to_sport_record(row: Sport) -> SportRecord:
    return SportRecord(id=row.sport_id.lower(), image_path=row.image)


def to_tournament_record(row: Tournament) -> TournamentRecord:
    return TournamentRecord(
        id=row.tournament_id,
        slug=row.slug,
        sport_type=row.sport_type,
        official_name=row.official_name,
        image_path=row.image,
        updated_at=row.updated_at,
    )


def to_event_record(row: Event) -> EventRecord:
    return EventRecord(
        id=row.event_id,
        slug=row.slug,
        name=row.event_name,
        date_start=row.date_start,
        date_stop=row.date_stop,
        tournament_id=row.tournament_id,
        tournament_name=row.tournament_name,
        venue_id=row.venue_id,
        venue_name=row.venue_name,
        city=row.city,
        country=row.iso_country,
        sport_type=row.sport_type,
        min_price=float(row.min_ticket_price_eur) if row.min_ticket_price_eur is not None else None,
        max_price=float(row.max_ticket_price_eur) if row.max_ticket_price_eur is not None else None,
        ticket_count=row.number_of_tickets,
        raw_status=row.event_status,
        is_popular=row.is_popular,
        image_path=row.image,
        updated_at=row.updated_at,
    )


def _canonical(record_slug: str | None, requested: str) -> str:
    return record_slug.lower() if record_slug else requested


@dataclass(slots=True, frozen=True)
class TournamentContext:
    tournament: TournamentRecord
    sport: SportRecord | None
    sport_slug: str
    requested_tournament_slug: str

    @property
    def canonical_tournament_slug(self) -> str:
        return _canonical(self.tournament.slug, self.requested_tournament_slug)

    @property
    def canonical_path(self) -> str:
        return build_tournament_path(self.sport_slug, self.canonical_tournament_slug)

    @property
    def redirect_path(self) -> str | None:
        if self.canonical_tournament_slug != self.requested_tournament_slug:
            return self.canonical_path
        return None


@dataclass(slots=True, frozen=True)
class EventContext:
    event: EventRecord
    tournament: TournamentRecord
    sport: SportRecord | None
    sport_slug: str
    requested_tournament_slug: str
    requested_event_slug: str

    @property
    def canonical_tournament_slug(self) -> str:
        return _canonical(self.tournament.slug, self.requested_tournament_slug)

    @property
    def canonical_event_slug(self) -> str:
        return _canonical(self.event.slug, self.requested_event_slug)

    @property
    def canonical_path(self) -> str:
        return build_event_path(
            self.sport_slug, self.canonical_tournament_slug, self.canonical_event_slug
        )

    @property
    def redirect_path(self) -> str | None:
        """Canonical path when the request used a non-canonical slug, else None."""

        if (
            self.canonical_tournament_slug != self.requested_tournament_slug
            or self.canonical_event_slug != self.requested_event_slug
        ):
            return self.canonical_path
        return None


class SlugResolver:
    """Tiered slug lookups over the relational catalog."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._repo = CatalogRepository(session)

    def _guarded(
        self, lookup: Callable[[MatchTier, SlugQuery], T | None]
    ) -> Callable[[MatchTier, SlugQuery], T | None]:
        def wrapper(tier: MatchTier, query: SlugQuery) -> T | None:
            try:
                return lookup(tier, query)
            except SQLAlchemyError:
                self._session.rollback()
                raise

        return wrapper

    def resolve_sport(self, sport_slug: str, sport_type: str) -> SportRecord | None:
        try:
            row = self._repo.find_sport(sport_type_candidates(sport_type, sport_slug), sport_slug)
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.warning("Sport lookup failed for {!r}: {}", sport_slug, exc)
            return None
        return to_sport_record(row) if row is not None else None

    def resolve_tournament(
        self, sport_slug: str, sport_type: str, tournament_slug: str
    ) -> TournamentRecord | None:
        query = SlugQuery.build(tournament_slug, sport_slug, sport_type)
        found = run_cascade(self._guarded(self._repo.find_tournament), query, label="Tournament")
        return to_tournament_record(found.record) if found else None

    def resolve_event(
        self,
        sport_type: str,
        sport_slug: str,
        tournament: TournamentRecord,
        event_slug: str,
    ) -> EventRecord | None:
        query = SlugQuery.build(event_slug, sport_slug, sport_type, tournament_id=tournament.id)
        found = run_cascade(self._guarded(self._repo.find_event), query, label="Event")
        return to_event_record(found.record) if found else None

    def resolve_event_loose(
        self, sport_slug: str, sport_type: str, event_slug: str
    ) -> EventRecord | None:
        query = SlugQuery.build(event_slug, sport_slug, sport_type)
        found = run_cascade(self._guarded(self._repo.find_event), query, label="Event (loose)")
        return to_event_record(found.record) if found else None

    def resolve_event_by_id(self, event_id: str) -> EventRecord | None:
        try:
            row = self._repo.get_event(event_id)
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.warning("Event lookup by id {} failed: {}", event_id, exc)
            return None
        return to_event_record(row) if row is not None else None

    def resolve_tournament_by_id(self, tournament_id: str) -> TournamentRecord | None:
        try:
            row = self._repo.get_tournament(tournament_id)
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.warning("Tournament lookup by id {} failed: {}", tournament_id, exc)
            return None
        return to_tournament_record(row) if row is not None else None

    def resolve_tournament_context(
        self, sport_slug: str, tournament_slug: str
    ) -> TournamentContext | None:
        sport_slug = sport_slug.lower()
        tournament_slug = tournament_slug.lower()
        sport_type = resolve_sport_type_from_slug(sport_slug) or sport_slug.replace("-", "")

        tournament = self.resolve_tournament(sport_slug, sport_type, tournament_slug)
        if tournament is None:
            return None
        return TournamentContext(
            tournament=tournament,
            sport=self.resolve_sport(sport_slug, sport_type),
            sport_slug=sport_slug,
            requested_tournament_slug=tournament_slug,
        )

    def resolve_event_context(
        self, sport_slug: str, tournament_slug: str, event_slug: str
    ) -> EventContext | None:
        """Resolve a three-segment event path.

        The event is looked up inside the resolved tournament first, then
        across all events of the sport, then by id for ``event-<id>`` slugs
        generated for unnamed events. When only the loose lookups succeed
        the tournament is recovered from the event's ``tournament_id``.
        Returns None when no event or no tournament context is found.
        """

        sport_slug = sport_slug.lower()
        tournament_slug = tournament_slug.lower()
        event_slug = event_slug.lower()
        sport_type = resolve_sport_type_from_slug(sport_slug) or sport_slug.replace("-", "")

        sport = self.resolve_sport(sport_slug, sport_type)
        tournament = self.resolve_tournament(sport_slug, sport_type, tournament_slug)

        event: EventRecord | None = None
        if tournament is not None:
            event = self.resolve_event(sport_type, sport_slug, tournament, event_slug)

        if event is None:
            event = self.resolve_event_loose(sport_slug, sport_type, event_slug)
            if event is None:
                event_id = extract_event_id_from_slug(event_slug)
                if event_id:
                    event = self.resolve_event_by_id(event_id)
            if event is None:
                return None
            if tournament is None and event.tournament_id:
                tournament = self.resolve_tournament_by_id(event.tournament_id)

        if tournament is None:
            return None

        return EventContext(
            event=event,
            tournament=tournament,
            sport=sport,
            sport_slug=sport_slug,
            requested_tournament_slug=tournament_slug,
            requested_event_slug=event_slug,
        )
