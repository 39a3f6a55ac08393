from __future__ import annotations

import json
import sys
from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import httpx
import pytest
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.db import Base, create_catalog_engine, create_session_factory, init_db
from app.models import Event, Sport, Tournament
from catalog import TicketingClient

BASE_URL = "https://tickets.test/v1/"


@pytest.fixture
def sample_event_payload() -> dict[str, object]:
    path = Path(__file__).parent / "data" / "sample_event.json"
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def test_settings(tmp_path, monkeypatch) -> Settings:
    settings = Settings(
        database_url=f"sqlite:///{tmp_path/'storefront.db'}",
        ticketing_base_url=BASE_URL,
        default_popular_sports="formula1,football,tennis,motogp",
        cache_ttl_seconds=60,
    )
    monkeypatch.setattr("app.core.config.get_settings", lambda: settings)
    monkeypatch.setattr("app.core.config.settings", settings)
    return settings


@pytest.fixture
def db_session() -> Iterator[Session]:
    engine = create_catalog_engine("sqlite://")
    init_db(engine)
    session = create_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def seeded_catalog(db_session: Session) -> Session:
    """Sports, tournaments and events with the slug drift seen in the live feed."""

    older = datetime(2025, 1, 1, tzinfo=timezone.utc)
    newer = datetime(2025, 6, 1, tzinfo=timezone.utc)
    db_session.add_all(
        [
            Sport(sport_id="formula1"),
            Sport(sport_id="motogp"),
            Tournament(
                tournament_id="t-f1-2025",
                slug="formula-1-2025",
                sport_type="formula-1",
                official_name="Formula 1 2025",
                updated_at=older,
            ),
            Tournament(
                tournament_id="t-f1-2026",
                slug="formula-1-2026",
                sport_type="Formula1",
                official_name="Formula 1 2026",
                updated_at=newer,
            ),
            Tournament(
                tournament_id="t-motogp",
                slug="motogp-world-championship",
                sport_type="motogp",
                official_name="MotoGP World Championship",
                updated_at=newer,
            ),
            Tournament(
                tournament_id="t-stray",
                slug="misfiled-cup",
                sport_type="curling",
                official_name="Misfiled Cup",
                updated_at=older,
            ),
            Event(
                event_id="e-monza",
                event_name="Italian Grand Prix 2026",
                slug="italian-grand-prix-2026",
                sport_type="formula1",
                tournament_id="t-f1-2026",
                updated_at=newer,
            ),
            Event(
                event_id="e-spa",
                event_name="Belgian Grand Prix 2025",
                slug="belgian-grand-prix-2025",
                sport_type="formula 1",
                tournament_id="t-f1-2025",
                updated_at=older,
            ),
            Event(
                event_id="e-mugello",
                event_name="Italian MotoGP",
                slug="italian-motogp-2026",
                sport_type="motogp",
                tournament_id="t-motogp",
                updated_at=newer,
            ),
        ]
    )
    db_session.commit()
    return db_session


@pytest.fixture
def make_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], TicketingClient]:
    """Build a ticketing client whose requests are answered by ``handler``."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> TicketingClient:
        return TicketingClient(
            base_url=BASE_URL,
            api_key="test-key",
            transport=httpx.MockTransport(handler),
        )

    return factory
