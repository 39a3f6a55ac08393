from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import httpx
from loguru import logger

from app.core.config import settings

from .urls import join_url, with_query

ALLOWED_EVENT_PARAMS = {
    "sport_type",
    "tournament_id",
    "country",
    "team_id",
    "event_name",
    "date_start",
    "date_stop",
    "popular_events",
    "page_size",
    "page",
}


class TicketingClient:
    """Thin async wrapper around the ticketing API's list endpoints."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        events_path: str | None = None,
        tickets_path: str | None = None,
        categories_path: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.ticketing_api_root
        self.events_path = events_path or settings.ticketing_events_path
        self.tickets_path = tickets_path or settings.ticketing_tickets_path
        self.categories_path = categories_path or settings.ticketing_categories_path

        headers = {"Accept": "application/json"}
        key = api_key if api_key is not None else settings.ticketing_api_key
        if key:
            headers["X-Api-Key"] = key

        client_kwargs: dict[str, Any] = {"headers": headers}
        timeout = timeout if timeout is not None else settings.request_timeout
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        if transport is not None:
            client_kwargs["transport"] = transport
        self.client = httpx.AsyncClient(**client_kwargs)

    @staticmethod
    def _serialize_param(value: Any) -> str | None:
        if value is None:
            return None
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            parts = [
                serialized
                for serialized in (TicketingClient._serialize_param(item) for item in value)
                if serialized is not None
            ]
            return ",".join(parts) if parts else None
        text = str(value).strip()
        return text or None

    def events_url(self, params: Mapping[str, Any]) -> str:
        serialized: dict[str, str] = {}
        for key, value in params.items():
            if key not in ALLOWED_EVENT_PARAMS:
                continue
            param = self._serialize_param(value)
            if param is not None:
                serialized[key] = param
        dropped = sorted(set(params) - ALLOWED_EVENT_PARAMS)
        if dropped:
            logger.warning("Dropped unsupported ticketing query params: {}", ", ".join(dropped))
        return with_query(join_url(self.base_url, self.events_path), serialized)

    def tickets_url(self, event_id: str, *, page_size: int | None = None) -> str:
        return with_query(
            join_url(self.base_url, self.tickets_path),
            {
                "event_id": event_id,
                "ticket_status": "available",
                "stock": "gt:0",
                "page_size": page_size or settings.ticket_page_size,
                "page": 1,
            },
        )

    def categories_url(self, event_id: str) -> str:
        return with_query(join_url(self.base_url, self.categories_path), {"event_id": event_id})

    async def get_json(self, url: str) -> Any:
        logger.info("Ticketing GET {}", url)
        response = await self.client.get(url)
        response.raise_for_status()
        return response.json()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "TicketingClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
