from __future__ import annotations

import asyncio
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from app.domain import FilterSpec
from catalog.aggregator import EventAggregator
from catalog.cache import TTLCache
from catalog.fetcher import PaginatingFetcher
from catalog.planner import FanOutPlanner, RequestPlan


def _event(event_id: str, **fields: object) -> dict[str, object]:
    return {"event_id": event_id, "event_name": f"Event {event_id}", **fields}


def _aggregator(make_client, handler) -> tuple[EventAggregator, object]:
    client = make_client(handler)
    fetcher = PaginatingFetcher(client, TTLCache(60))
    planner = FanOutPlanner(
        client,
        popular_sports=["formula1", "football", "tennis", "motogp"],
        page_size=1,
        today=lambda: date(2026, 1, 1),
    )
    return EventAggregator(fetcher, planner), client


@pytest.mark.asyncio
async def test_default_sports_end_to_end_for_motogp(make_client):
    motogp_pages = {
        "1": {
            "events": [_event("M2", sport_type="motogp", date_start="2026-09-06T12:00:00Z")],
            "pagination": {"next_page": 2},
        },
        "2": {
            "events": [_event("M1", sport_type="motogp", date_start="2026-03-01T12:00:00Z")],
            "pagination": {"next_page": 3},
        },
        "3": {"events": []},
    }
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        if request.url.params.get("sport_type") != "motogp":
            return httpx.Response(200, json={"events": []})
        return httpx.Response(200, json=motogp_pages[request.url.params["page"]])

    aggregator, client = _aggregator(make_client, handler)
    events = await aggregator.fetch_events(FilterSpec())

    assert [event.id for event in events] == ["M1", "M2"]
    assert aggregator.events == events
    assert aggregator.loading is False
    assert aggregator.error is None
    assert aggregator.facets["sports"] == {"motogp": 2}
    assert sum("sport_type=motogp" in url for url in requested) == 3
    await client.aclose()


@pytest.mark.asyncio
async def test_duplicate_ids_across_chains_are_merged(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"events": [_event("E1", sport_type="formula1", iso_country="ITA")]}
        )

    aggregator, client = _aggregator(make_client, handler)
    events = await aggregator.fetch_events(
        FilterSpec(sport_type=["formula1"], country_code=["ITA", "ESP"])
    )

    assert [event.id for event in events] == ["E1"]
    await client.aclose()


@pytest.mark.asyncio
async def test_results_are_post_filtered_and_sorted(make_client):
    payload = {
        "events": [
            _event("late", sport_type="Tennis", city="Paris", date_start="2026-06-01T10:00:00Z"),
            _event("undated", sport_type="tennis", city="Paris"),
            _event("early", sport_type="TENNIS", city="Paris", date_start="2026-05-01T10:00:00Z"),
            _event("elsewhere", sport_type="tennis", city="London", date_start="2026-04-01T10:00:00Z"),
        ]
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    aggregator, client = _aggregator(make_client, handler)
    events = await aggregator.fetch_events(FilterSpec(sport_type=["tennis"], city=["Paris"]))

    assert [event.id for event in events] == ["early", "late", "undated"]
    await client.aclose()


@pytest.mark.asyncio
async def test_newer_call_supersedes_in_flight_call(make_client):
    gate = asyncio.Event()
    football_started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        sport = request.url.params.get("sport_type")
        if sport == "football":
            football_started.set()
            await gate.wait()
            return httpx.Response(200, json={"events": [_event("A1", sport_type="football")]})
        return httpx.Response(200, json={"events": [_event("B1", sport_type="tennis")]})

    aggregator, client = _aggregator(make_client, handler)

    call_a = asyncio.ensure_future(aggregator.run(FilterSpec(sport_type=["football"])))
    await football_started.wait()
    outcome_b = await aggregator.run(FilterSpec(sport_type=["tennis"]))
    gate.set()
    outcome_a = await call_a

    assert outcome_a.cancelled is True
    assert outcome_a.events == []
    assert outcome_b.cancelled is False
    assert [event.id for event in outcome_b.events] == ["B1"]
    assert [event.id for event in aggregator.events] == ["B1"]
    await client.aclose()


@pytest.mark.asyncio
async def test_superseded_call_resolves_to_empty_list(make_client):
    gate = asyncio.Event()
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await gate.wait()
        return httpx.Response(200, json={"events": [_event("A1", sport_type="football")]})

    aggregator, client = _aggregator(make_client, handler)
    call = asyncio.ensure_future(aggregator.fetch_events(FilterSpec(sport_type=["football"])))
    await started.wait()
    aggregator.cancel()

    assert await call == []
    assert aggregator.events == []
    await client.aclose()


@pytest.mark.asyncio
async def test_unexpected_failure_is_recorded_and_raised():
    fetcher = MagicMock()
    fetcher.fetch_all_pages = AsyncMock(side_effect=RuntimeError("boom"))
    planner = MagicMock()
    planner.plan.return_value = [RequestPlan(label="single", params={}, url="https://tickets.test/v1/events")]
    aggregator = EventAggregator(fetcher, planner)

    with pytest.raises(RuntimeError):
        await aggregator.fetch_events(FilterSpec(free_text_query="x"))

    assert isinstance(aggregator.error, RuntimeError)
    assert aggregator.loading is False


@pytest.mark.asyncio
async def test_transport_failure_keeps_earlier_pages_and_sibling_chains(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        sport = request.url.params.get("sport_type")
        if sport == "football":
            if request.url.params["page"] == "2":
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(
                200,
                json={
                    "events": [_event("A1", sport_type="football", date_start="2026-02-01T12:00:00Z")],
                    "pagination": {"next_page": 2},
                },
            )
        return httpx.Response(
            200,
            json={"events": [_event("B1", sport_type="tennis", date_start="2026-03-01T12:00:00Z")]},
        )

    aggregator, client = _aggregator(make_client, handler)
    events = await aggregator.fetch_events(FilterSpec(sport_type=["football", "tennis"]))

    assert [event.id for event in events] == ["A1", "B1"]
    assert aggregator.error is None
    assert aggregator.loading is False
    await client.aclose()


@pytest.mark.asyncio
async def test_failed_first_page_yields_nothing_for_that_chain_only(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("sport_type") == "football":
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"events": [_event("B1", sport_type="tennis")]})

    aggregator, client = _aggregator(make_client, handler)
    events = await aggregator.fetch_events(FilterSpec(sport_type=["football", "tennis"]))

    assert [event.id for event in events] == ["B1"]
    assert aggregator.error is None
    await client.aclose()


@pytest.mark.asyncio
async def test_cancel_without_new_call_clears_loading(make_client):
    gate = asyncio.Event()
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await gate.wait()
        return httpx.Response(200, json={"events": [_event("A1", sport_type="football")]})

    aggregator, client = _aggregator(make_client, handler)
    call = asyncio.ensure_future(aggregator.run(FilterSpec(sport_type=["football"])))
    await started.wait()
    assert aggregator.loading is True

    aggregator.cancel()
    outcome = await call

    assert outcome.cancelled is True
    assert aggregator.loading is False
    assert aggregator.events == []
    gate.set()
    await client.aclose()
