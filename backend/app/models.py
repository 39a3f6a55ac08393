from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class Sport(Base):
    __tablename__ = "sports"

    sport_id: Mapped[str] = mapped_column(String, primary_key=True)
    image: Mapped[str | None] = mapped_column(String, nullable=True)


class Tournament(Base):
    __tablename__ = "tournaments"
    __table_args__ = (Index("ix_tournaments_slug_sport_type", "slug", "sport_type"),)

    tournament_id: Mapped[str] = mapped_column(String, primary_key=True)
    slug: Mapped[str | None] = mapped_column(String, nullable=True)
    sport_type: Mapped[str | None] = mapped_column(String, nullable=True)
    official_name: Mapped[str | None] = mapped_column(String, nullable=True)
    season: Mapped[str | None] = mapped_column(String, nullable=True)
    image: Mapped[str | None] = mapped_column(String, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        Index("ix_events_slug_sport_type", "slug", "sport_type"),
        Index("ix_events_tournament_id", "tournament_id"),
    )

    event_id: Mapped[str] = mapped_column(String, primary_key=True)
    event_name: Mapped[str | None] = mapped_column(String, nullable=True)
    slug: Mapped[str | None] = mapped_column(String, nullable=True)
    date_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    date_stop: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    event_status: Mapped[str | None] = mapped_column(String, nullable=True)
    tournament_id: Mapped[str | None] = mapped_column(String, nullable=True)
    tournament_name: Mapped[str | None] = mapped_column(String, nullable=True)
    venue_id: Mapped[str | None] = mapped_column(String, nullable=True)
    venue_name: Mapped[str | None] = mapped_column(String, nullable=True)
    city: Mapped[str | None] = mapped_column(String, nullable=True)
    iso_country: Mapped[str | None] = mapped_column(String(3), nullable=True)
    sport_type: Mapped[str | None] = mapped_column(String, nullable=True)
    min_ticket_price_eur: Mapped[float | None] = mapped_column(Numeric(12, 2), nullable=True)
    max_ticket_price_eur: Mapped[float | None] = mapped_column(Numeric(12, 2), nullable=True)
    number_of_tickets: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_popular: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    hometeam_name: Mapped[str | None] = mapped_column(String, nullable=True)
    visiting_name: Mapped[str | None] = mapped_column(String, nullable=True)
    event_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image: Mapped[str | None] = mapped_column(String, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
