"""
Read-only access to the archived event table.

The archive is a PostgreSQL table filled by a separate backup process.
This service only ever reads from it.

Invariants:
    - Queries bind the public key as a parameter, never by string formatting
    - Results for one author are ordered by kind ascending, then newest first
    - Any driver failure surfaces as ArchiveUnavailableError
    - One connection pool per process, opened at startup, never reassigned

Table schema:
    event_backup:
        - id TEXT (event id)
        - pubkey TEXT (hex author key)
        - created_at BIGINT (Unix seconds)
        - event_kind INTEGER
        - event_data TEXT or JSONB (full serialized event)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import psycopg
from psycopg_pool import AsyncConnectionPool

from .errors import ArchiveUnavailableError

logger = logging.getLogger(__name__)

EVENTS_BY_PUBKEY_QUERY = (
    "SELECT id, pubkey, created_at, event_kind, event_data "
    "FROM event_backup "
    "WHERE pubkey = %s "
    "ORDER BY event_kind ASC, created_at DESC"
)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class ArchivedEvent:
    """An event row from the archive.

    Attributes:
        id: Event identifier
        pubkey: Author public key (hex)
        created_at: Creation timestamp (Unix seconds)
        kind: Event kind
        event_data: Full serialized event (JSON text)
    """

    id: str
    pubkey: str
    created_at: int
    kind: int
    event_data: str

    @property
    def formatted_date(self) -> str:
        """Creation time as ``YYYY-MM-DD HH:MM:SS`` in UTC.

        Timestamps outside the datetime range (e.g. milliseconds) are shown
        as the raw integer.
        """
        try:
            return datetime.fromtimestamp(self.created_at, tz=timezone.utc).strftime(DATE_FORMAT)
        except (ValueError, OverflowError, OSError):
            return str(self.created_at)

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> ArchivedEvent:
        event_id, pubkey, created_at, kind, event_data = row
        if not isinstance(event_data, str):
            # json/jsonb columns come back already decoded
            if isinstance(event_data, (bytes, bytearray, memoryview)):
                event_data = bytes(event_data).decode("utf-8", errors="replace")
            else:
                event_data = json.dumps(event_data, separators=(",", ":"), ensure_ascii=False)
        return cls(
            id=str(event_id),
            pubkey=str(pubkey),
            created_at=int(created_at),
            kind=int(kind),
            event_data=event_data,
        )


class ArchiveStore:
    """Read-only store over the ``event_backup`` table.

    Example:
        >>> store = await ArchiveStore.connect("postgresql://localhost/nostr")
        >>> events = await store.events_by_pubkey("3bf0c63f...")
        >>> await store.close()
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    @classmethod
    async def connect(
        cls,
        database_url: str,
        min_size: int = 1,
        max_size: int = 10,
        timeout: float = 10.0,
    ) -> ArchiveStore:
        """Open a connection pool for the archive database.

        The pool connects in the background; an unreachable database shows
        up as ArchiveUnavailableError on the first query rather than at
        startup.
        """
        pool = AsyncConnectionPool(
            database_url,
            min_size=min_size,
            max_size=max_size,
            timeout=timeout,
            kwargs={"autocommit": True},
            open=False,
        )
        await pool.open(wait=False)
        logger.info(f"Archive connection pool opened (min={min_size}, max={max_size})")
        return cls(pool)

    async def close(self) -> None:
        """Close the connection pool."""
        await self._pool.close()
        logger.info("Archive connection pool closed")

    async def events_by_pubkey(self, pubkey: str) -> list[ArchivedEvent]:
        """Get all archived events authored by a public key.

        Args:
            pubkey: Hex public key

        Returns:
            Events ordered by kind ascending, then created_at descending.
            Empty if the author has no archived events.

        Raises:
            ArchiveUnavailableError: If the database query fails
        """
        try:
            async with self._pool.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(EVENTS_BY_PUBKEY_QUERY, (pubkey,))
                    rows = await cur.fetchall()
        except psycopg.Error as e:
            logger.error(f"Archive query failed for {pubkey}: {e}")
            raise ArchiveUnavailableError("archive query failed", cause=e) from e

        try:
            events = [ArchivedEvent.from_row(row) for row in rows]
        except (TypeError, ValueError) as e:
            logger.error(f"Malformed archive row for {pubkey}: {e}")
            raise ArchiveUnavailableError("archive returned a malformed row", cause=e) from e

        logger.debug(f"Found {len(events)} archived events for {pubkey}")
        return events

    async def ping(self) -> bool:
        """Check that the archive answers a trivial query."""
        try:
            async with self._pool.connection() as conn:
                await conn.execute("SELECT 1")
        except psycopg.Error as e:
            logger.warning(f"Archive health check failed: {e}")
            return False
        return True
