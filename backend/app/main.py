from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import RedirectResponse
from loguru import logger

from catalog import CatalogService
from catalog.filters import build_filter_spec

from . import schemas
from .core.config import settings
from .db import get_db, init_db
from .domain import FilterSpec
from .services.slug_resolver import SlugResolver

app = FastAPI(title="Sports Ticket Catalog API", version="0.1.0", debug=settings.debug)


@lru_cache
def get_catalog_service() -> CatalogService:
    return CatalogService()


@app.on_event("startup")
def on_startup() -> None:
    """Initialize database connections when the API boots."""

    init_db()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    if get_catalog_service.cache_info().currsize:
        await get_catalog_service().aclose()
        get_catalog_service.cache_clear()


@app.get("/healthz", tags=["system"])
def healthcheck() -> dict[str, str]:
    """Basic readiness probe consumed by infrastructure monitors."""

    return {"status": "ok"}


def _filter_spec(
    *,
    sport_type: Annotated[str | None, Query(description="Comma-separated sport types", example="formula1,motogp")] = None,
    tournament_id: Annotated[str | None, Query(description="Comma-separated tournament ids")] = None,
    country: Annotated[str | None, Query(description="Comma-separated ISO-2 or ISO-3 country codes")] = None,
    city: Annotated[str | None, Query(description="Comma-separated city names")] = None,
    venue: Annotated[str | None, Query(description="Comma-separated venue names")] = None,
    event_status: Annotated[
        str | None,
        Query(description="Comma-separated derived statuses", example="on_sale,coming_soon"),
    ] = None,
    date_from: Annotated[str | None, Query(description="Earliest start date (YYYY-MM-DD)")] = None,
    date_to: Annotated[str | None, Query(description="Latest stop date (YYYY-MM-DD)")] = None,
    price_min: Annotated[float | None, Query(ge=0, description="Minimum price in EUR")] = None,
    price_max: Annotated[float | None, Query(ge=0, description="Maximum price in EUR")] = None,
    query: Annotated[str | None, Query(description="Free-text event name search")] = None,
    popular_events: Annotated[bool, Query(description="Only popular events")] = False,
) -> FilterSpec:
    """Normalize the browse filter query parameters."""

    return build_filter_spec(
        sport_type=sport_type,
        tournament_id=tournament_id,
        country=country,
        city=city,
        venue=venue,
        event_status=event_status,
        date_from=date_from,
        date_to=date_to,
        price_min=price_min,
        price_max=price_max,
        query=query,
        popular_events=popular_events,
    )


def _catalog_service() -> CatalogService:
    """Provide the process-wide catalog service."""

    return get_catalog_service()


def _slug_resolver(db=Depends(get_db)) -> SlugResolver:
    """Provide the slug resolver wired with a SQLAlchemy session."""

    return SlugResolver(db)


@app.get("/events", response_model=schemas.EventList, tags=["events"])
async def list_events(
    *,
    filters: FilterSpec = Depends(_filter_spec),
    team: Annotated[str | None, Query(description="Team id")] = None,
    team_id: Annotated[str | None, Query(description="Team id (alias of team)")] = None,
    origin: Annotated[str | None, Query(description="'allevents' includes past events")] = None,
    session: Annotated[str | None, Query(description="Filter session; newer calls supersede older ones")] = None,
    service: CatalogService = Depends(_catalog_service),
):
    """Fan out to the ticketing API, merge, filter and sort matching events."""

    try:
        outcome, aggregator = await service.fetch_events(
            filters,
            team_id=team_id or team or "",
            show_all=(origin or "").lower() == "allevents",
            session_id=session,
        )
    except Exception as exc:
        logger.error("Event listing failed: {}", exc)
        raise HTTPException(status_code=502, detail="Upstream catalog unavailable") from exc

    if outcome.cancelled:
        return schemas.EventList(total=0, items=[], facets={}, cancelled=True)
    return schemas.EventList(
        total=len(outcome.events),
        items=[schemas.Event.from_record(event) for event in outcome.events],
        facets=aggregator.facets,
    )


@app.get("/events/{event_id}/tickets", response_model=schemas.EventTickets, tags=["events"])
async def event_tickets(event_id: str, service: CatalogService = Depends(_catalog_service)):
    """Available tickets of one event, grouped per category and ticket type."""

    sections = await service.event_tickets(event_id)
    return schemas.EventTickets(
        event_id=event_id,
        sections=[schemas.TicketSection.model_validate(section) for section in sections],
    )


@app.get(
    "/catalog/{sport}/{tournament}",
    response_model=schemas.TournamentResolution,
    tags=["catalog"],
)
def resolve_tournament(
    sport: str, tournament: str, resolver: SlugResolver = Depends(_slug_resolver)
):
    """Resolve a tournament path, redirecting to its canonical slug when needed."""

    context = resolver.resolve_tournament_context(sport, tournament)
    if context is None:
        raise HTTPException(status_code=404, detail="Tournament not found")
    if context.redirect_path is not None:
        return RedirectResponse(url=f"/catalog{context.redirect_path}", status_code=307)
    return schemas.TournamentResolution(
        sport=schemas.Sport.model_validate(context.sport) if context.sport else None,
        tournament=schemas.Tournament.model_validate(context.tournament),
        canonical_path=context.canonical_path,
    )


@app.get(
    "/catalog/{sport}/{tournament}/{event}",
    response_model=schemas.EventResolution,
    tags=["catalog"],
)
def resolve_event(
    sport: str,
    tournament: str,
    event: str,
    resolver: SlugResolver = Depends(_slug_resolver),
):
    """Resolve an event path, redirecting to its canonical slugs when needed."""

    context = resolver.resolve_event_context(sport, tournament, event)
    if context is None:
        raise HTTPException(status_code=404, detail="Event not found")
    if context.redirect_path is not None:
        return RedirectResponse(url=f"/catalog{context.redirect_path}", status_code=307)
    return schemas.EventResolution(
        sport=schemas.Sport.model_validate(context.sport) if context.sport else None,
        tournament=schemas.Tournament.model_validate(context.tournament),
        event=schemas.Event.from_record(context.event),
        canonical_path=context.canonical_path,
    )
