"""
HTML routes for the Nostr Event Restore Service.

GET /                   Landing page with the lookup form
GET /npub/?q=<npub>     Results page (form submission)
GET /npub/{npub}        Results page (direct link)

A results request runs decode -> archive query -> profile fetch -> render,
in that order. Decoding fails before any I/O happens.
"""

import logging
from dataclasses import dataclass, field
from itertools import groupby
from pathlib import Path

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from .archive_store import ArchivedEvent, ArchiveStore
from .config import Settings
from .errors import TemplateRenderError
from .identifier import npub_to_hex
from .relay_client import Profile, ProfileFetcher

logger = logging.getLogger(__name__)

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

# Contact lists can be re-published from the browser
RESTORABLE_KIND = 3


@dataclass
class KindGroup:
    """A run of consecutive events that share a kind."""

    kind: int
    events: list[ArchivedEvent] = field(default_factory=list)


def group_by_kind(events: list[ArchivedEvent]) -> list[KindGroup]:
    """Split already-sorted events into runs of equal kind.

    A new group starts whenever the kind differs from the previous event,
    so the input order is preserved exactly.
    """
    return [KindGroup(kind=kind, events=list(run)) for kind, run in groupby(events, lambda e: e.kind)]


# --- Dependencies ---


def get_archive_store(request: Request) -> ArchiveStore:
    """Get archive store from app state."""
    return request.app.state.archive_store


def get_profile_fetcher(request: Request) -> ProfileFetcher:
    """Get profile fetcher from app state."""
    return request.app.state.profile_fetcher


def get_settings(request: Request) -> Settings:
    """Get settings from app state."""
    return request.app.state.settings


def render(request: Request, name: str, context: dict) -> HTMLResponse:
    """Render a template, converting any rendering failure to TemplateRenderError."""
    try:
        return templates.TemplateResponse(request, name, context)
    except Exception as e:
        logger.error(f"Failed to render {name}: {e}", exc_info=True)
        raise TemplateRenderError(f"failed to render {name}", template=name) from e


# --- Pages ---


@router.get("/", response_class=HTMLResponse)
async def home(request: Request):
    """Landing page with service introduction and search form."""
    return render(request, "index.html", {})


@router.get("/npub/", response_class=HTMLResponse)
async def npub_search(
    request: Request,
    q: str = Query("", description="npub identifier"),
    store: ArchiveStore = Depends(get_archive_store),
    fetcher: ProfileFetcher = Depends(get_profile_fetcher),
    settings: Settings = Depends(get_settings),
):
    """Results page for an npub submitted through the search form."""
    return await _render_events(request, q, store, fetcher, settings)


@router.get("/npub/{identifier}", response_class=HTMLResponse)
async def npub_events(
    request: Request,
    identifier: str,
    store: ArchiveStore = Depends(get_archive_store),
    fetcher: ProfileFetcher = Depends(get_profile_fetcher),
    settings: Settings = Depends(get_settings),
):
    """Results page for an npub given in the path."""
    return await _render_events(request, identifier, store, fetcher, settings)


async def _render_events(
    request: Request,
    npub: str,
    store: ArchiveStore,
    fetcher: ProfileFetcher,
    settings: Settings,
) -> HTMLResponse:
    npub = npub.strip()
    hex_pubkey = npub_to_hex(npub)

    events = await store.events_by_pubkey(hex_pubkey)
    profile: Profile = await fetcher.fetch_profile(hex_pubkey)

    logger.info(f"Serving {len(events)} archived events for {hex_pubkey}")

    return render(
        request,
        "events.html",
        {
            "npub": npub,
            "hex_pubkey": hex_pubkey,
            "profile": profile,
            "event_count": len(events),
            "groups": group_by_kind(events),
            "restorable_kind": RESTORABLE_KIND,
            "restore_relays": settings.restore_relays,
        },
    )
