"""
Best-effort profile lookup against public Nostr relays.

The results page shows the author's kind 0 metadata when a relay has it.
Relays are tried one after another; the first one that returns a parsable
profile wins and the rest are skipped.

Invariants:
    - fetch_profile never raises; with no answer it returns an empty Profile
    - Each relay gets one subscription bounded by a single timeout
    - Relays are never retried within a request
    - Nothing is cached or shared between requests

Wire messages (NIP-01):
    client -> relay: ["REQ", sub_id, filter], ["CLOSE", sub_id]
    relay -> client: ["EVENT", sub_id, event], ["EOSE", sub_id],
                     ["CLOSED", sub_id, reason], ["NOTICE", message]
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from collections.abc import Callable, Sequence
from typing import Any
from urllib.parse import urlparse

import aiohttp
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

logger = logging.getLogger(__name__)

PROFILE_KIND = 0


class Profile(BaseModel):
    """Display metadata from a kind 0 event's content."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    display_name: str | None = None
    about: str | None = None
    picture: str | None = None
    nip05: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _strings_only(cls, value: Any) -> str | None:
        if isinstance(value, str) and value.strip():
            return value
        return None

    @property
    def display(self) -> str | None:
        """Name to show in the page header."""
        return self.name or self.display_name

    @property
    def picture_url(self) -> str | None:
        """Picture URL if it is plain http(s), else None."""
        if not self.picture:
            return None
        if urlparse(self.picture).scheme.lower() not in ("http", "https"):
            return None
        return self.picture

    @property
    def is_empty(self) -> bool:
        return not any((self.name, self.display_name, self.about, self.picture, self.nip05))


class ProfileFetcher:
    """Looks up kind 0 profiles across an ordered list of relays.

    Example:
        >>> fetcher = ProfileFetcher(["wss://relay.damus.io"], timeout=5.0)
        >>> profile = await fetcher.fetch_profile("3bf0c63f...")
        >>> profile.display
        'jack'
    """

    def __init__(
        self,
        relays: Sequence[str],
        timeout: float = 5.0,
        session_factory: Callable[[], aiohttp.ClientSession] = aiohttp.ClientSession,
    ) -> None:
        self.relays = list(relays)
        self.timeout = timeout
        self._session_factory = session_factory

    async def fetch_profile(self, pubkey: str) -> Profile:
        """Fetch the latest profile for a public key.

        Args:
            pubkey: Hex public key

        Returns:
            The first profile any relay returns, or an empty Profile
        """
        async with self._session_factory() as session:
            for relay_url in self.relays:
                try:
                    profile = await asyncio.wait_for(
                        self._query_relay(session, relay_url, pubkey),
                        timeout=self.timeout,
                    )
                except asyncio.TimeoutError:
                    logger.warning(f"Relay {relay_url} timed out after {self.timeout}s")
                    continue
                except (aiohttp.ClientError, OSError) as e:
                    logger.warning(f"Failed to query relay {relay_url}: {e}")
                    continue

                if profile is not None:
                    logger.debug(f"Profile for {pubkey} found on {relay_url}")
                    return profile

        logger.info(f"No profile found for {pubkey}")
        return Profile()

    async def _query_relay(
        self,
        session: aiohttp.ClientSession,
        relay_url: str,
        pubkey: str,
    ) -> Profile | None:
        """Run one profile subscription against a relay.

        Returns:
            Parsed profile, or None if the subscription ended without one
        """
        sub_id = uuid.uuid4().hex[:16]
        request = [
            "REQ",
            sub_id,
            {"authors": [pubkey], "kinds": [PROFILE_KIND], "limit": 1},
        ]

        async with session.ws_connect(relay_url) as ws:
            await ws.send_json(request)

            async for msg in ws:
                if msg.type == aiohttp.WSMsgType.ERROR:
                    logger.warning(f"Websocket error from {relay_url}: {ws.exception()}")
                    return None
                if msg.type != aiohttp.WSMsgType.TEXT:
                    continue

                try:
                    message = json.loads(msg.data)
                except json.JSONDecodeError:
                    logger.debug(f"Ignoring non-JSON frame from {relay_url}")
                    continue
                if not isinstance(message, list) or not message:
                    continue

                label = message[0]
                if label == "EVENT" and len(message) >= 3 and message[1] == sub_id:
                    profile = self._parse_profile_event(message[2], pubkey, relay_url)
                    if profile is not None:
                        await ws.send_json(["CLOSE", sub_id])
                        return profile
                elif label in ("EOSE", "CLOSED") and len(message) >= 2 and message[1] == sub_id:
                    return None
                elif label == "NOTICE":
                    logger.debug(f"Notice from {relay_url}: {message[1:]}")

        return None

    @staticmethod
    def _parse_profile_event(event: Any, pubkey: str, relay_url: str) -> Profile | None:
        if not isinstance(event, dict):
            return None
        if event.get("kind") != PROFILE_KIND or event.get("pubkey") != pubkey:
            return None

        content = event.get("content")
        if not isinstance(content, str):
            logger.warning(f"Profile event from {relay_url} has no content")
            return None
        try:
            return Profile.model_validate_json(content)
        except ValidationError as e:
            logger.warning(f"Failed to parse profile from {relay_url}: {e.error_count()} errors")
            return None
