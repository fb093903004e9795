"""
Nostr Event Restore Service.

Look up archived Nostr events by npub, show them grouped by kind next to
the author's current relay profile, and let the viewer re-publish a
contact list from the browser with their NIP-07 extension.

Usage:
    DATABASE_URL=postgresql://... python -m nostr_restore

Or with uvicorn directly:
    uvicorn --factory nostr_restore.app:create_app --port 8080
"""

from .app import create_app

__all__ = ["create_app"]
