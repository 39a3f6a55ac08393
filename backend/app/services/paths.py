"""Sport route mapping, slug helpers and canonical path builders."""

from __future__ import annotations

import re

SPORT_PATHS: dict[str, str] = {
    "formula1": "/formula-1",
    "football": "/football",
    "motogp": "/motogp",
    "tennis": "/tennis",
}

PATH_TO_SPORT: dict[str, str] = {path: sport for sport, path in SPORT_PATHS.items()}

_EVENT_ID_SLUG = re.compile(r"^event-([a-z0-9-]+)$", re.IGNORECASE)


def sport_path(sport_type: str | None) -> str | None:
    if not sport_type:
        return None
    normalized = sport_type.lower()
    return SPORT_PATHS.get(normalized, f"/{normalized}")


def resolve_sport_type_from_slug(slug: str | None) -> str | None:
    """Map a route slug such as ``formula-1`` to the sport id ``formula1``."""

    if not slug:
        return None
    normalized = slug.lower().lstrip("/")
    as_path = f"/{normalized}"
    if as_path in PATH_TO_SPORT:
        return PATH_TO_SPORT[as_path]
    if normalized in SPORT_PATHS:
        return normalized
    return normalized.replace("-", "") or None


def build_sport_path(sport_slug: str) -> str:
    return f"/{sport_slug.strip('/').lower()}"


def build_tournament_path(sport_slug: str, tournament_slug: str) -> str:
    return f"{build_sport_path(sport_slug)}/{tournament_slug.lower()}"


def build_event_path(sport_slug: str, tournament_slug: str, event_slug: str) -> str:
    return f"{build_tournament_path(sport_slug, tournament_slug)}/{event_slug.lower()}"


def create_slug(text: str | None) -> str:
    if not text:
        return ""
    slug = str(text).lower().strip()
    slug = re.sub(r"[\s_]+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def create_event_slug(name: str | None, event_id: str | None = None) -> str:
    """Slug from the event name, or ``event-<id>`` when the name yields too little."""

    slug = create_slug(name or "event")
    if len(slug) < 3:
        slug = f"event-{event_id or ''}"
    return slug


def extract_event_id_from_slug(slug: str) -> str | None:
    match = _EVENT_ID_SLUG.match(slug)
    return match.group(1) if match else None
