from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.domain import EventRecord, TicketCategorySection, TicketGroup, TicketRecord
from app.main import _catalog_service, _slug_resolver, app
from app.services.slug_resolver import SlugResolver
from catalog.aggregator import FetchOutcome


@pytest.fixture
def client():
    """Test client that cleans up dependency overrides after each test."""
    yield TestClient(app)
    app.dependency_overrides.clear()


def _catalog_mock(outcome: FetchOutcome, facets: dict | None = None) -> MagicMock:
    aggregator = MagicMock()
    aggregator.facets = facets or {}
    service = MagicMock()
    service.fetch_events = AsyncMock(return_value=(outcome, aggregator))
    return service


def test_healthcheck(client):
    """Verify the healthcheck endpoint returns a successful response."""
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_list_events_parses_filters(client):
    """Verify /events turns query parameters into a filter and serializes events."""
    event = EventRecord(
        id="E1",
        name="Italian Grand Prix",
        sport_type="formula1",
        min_price=18900,
        ticket_count=4,
        raw_status="notstarted",
        date_start=datetime(2026, 9, 6, 13, 0, tzinfo=timezone.utc),
    )
    service = _catalog_mock(FetchOutcome(events=[event]), facets={"sports": {"formula1": 1}})
    app.dependency_overrides[_catalog_service] = lambda: service

    response = client.get(
        "/events",
        params={
            "sport_type": "formula1,motogp",
            "country": "IT",
            "price_min": "50",
            "team": "team-9",
            "origin": "allevents",
            "session": "tab-1",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["cancelled"] is False
    assert body["facets"] == {"sports": {"formula1": 1}}
    item = body["items"][0]
    assert item["id"] == "E1"
    assert item["status"] == "on_sale"
    assert item["display_price"] == 189.0

    filters = service.fetch_events.call_args.args[0]
    assert filters.sport_type == ["formula1", "motogp"]
    assert filters.country_code == ["IT"]
    assert filters.price_min == 50
    kwargs = service.fetch_events.call_args.kwargs
    assert kwargs == {"team_id": "team-9", "show_all": True, "session_id": "tab-1"}


def test_list_events_reports_cancellation(client):
    """Verify a superseded call answers with an empty, cancelled payload."""
    service = _catalog_mock(FetchOutcome(cancelled=True))
    app.dependency_overrides[_catalog_service] = lambda: service

    response = client.get("/events", params={"session": "tab-1"})
    assert response.status_code == 200
    assert response.json() == {"total": 0, "items": [], "facets": {}, "cancelled": True}


def test_list_events_upstream_failure(client):
    """Verify unexpected aggregation failures map to 502."""
    service = MagicMock()
    service.fetch_events = AsyncMock(side_effect=RuntimeError("boom"))
    app.dependency_overrides[_catalog_service] = lambda: service

    response = client.get("/events")
    assert response.status_code == 502


def test_event_tickets(client):
    """Verify /events/{event_id}/tickets returns grouped sections."""
    ticket = TicketRecord(
        ticket_id="T1", event_id="E1", category_id="C1", sub_category="fri", price=19000, stock=2
    )
    group = TicketGroup(
        event_id="E1",
        category_id="C1",
        sub_category="fri",
        min_price=190.0,
        max_price=190.0,
        total_stock=2,
        label="Friday",
        tickets=(ticket,),
    )
    service = MagicMock()
    service.event_tickets = AsyncMock(
        return_value=[TicketCategorySection(category_id="C1", name="Main Grandstand", groups=(group,))]
    )
    app.dependency_overrides[_catalog_service] = lambda: service

    response = client.get("/events/E1/tickets")
    assert response.status_code == 200
    body = response.json()
    assert body["event_id"] == "E1"
    assert body["sections"][0]["name"] == "Main Grandstand"
    assert body["sections"][0]["groups"][0]["label"] == "Friday"
    assert body["sections"][0]["groups"][0]["tickets"][0]["ticket_id"] == "T1"
    service.event_tickets.assert_awaited_once_with("E1")


def test_resolve_event_canonical_path(client, seeded_catalog):
    """Verify a canonical event path resolves without redirecting."""
    app.dependency_overrides[_slug_resolver] = lambda: SlugResolver(seeded_catalog)

    response = client.get("/catalog/formula-1/formula-1-2026/italian-grand-prix-2026")
    assert response.status_code == 200
    body = response.json()
    assert body["event"]["id"] == "e-monza"
    assert body["tournament"]["id"] == "t-f1-2026"
    assert body["sport"]["id"] == "formula1"
    assert body["canonical_path"] == "/formula-1/formula-1-2026/italian-grand-prix-2026"


def test_resolve_event_redirects_fuzzy_slug(client, seeded_catalog):
    """Verify a fuzzy match redirects to the canonical path."""
    app.dependency_overrides[_slug_resolver] = lambda: SlugResolver(seeded_catalog)

    response = client.get("/catalog/formula-1/formula-1/italian-grand", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/catalog/formula-1/formula-1-2026/italian-grand-prix-2026"


def test_resolve_tournament_redirect_and_miss(client, seeded_catalog):
    """Verify tournament paths redirect when fuzzy and 404 on a total miss."""
    app.dependency_overrides[_slug_resolver] = lambda: SlugResolver(seeded_catalog)

    redirect = client.get("/catalog/motogp/motogp-world", follow_redirects=False)
    assert redirect.status_code == 307
    assert redirect.headers["location"] == "/catalog/motogp/motogp-world-championship"

    ok = client.get("/catalog/motogp/motogp-world-championship")
    assert ok.status_code == 200
    assert ok.json()["tournament"]["official_name"] == "MotoGP World Championship"

    missing = client.get("/catalog/motogp/no-such-cup")
    assert missing.status_code == 404
