"""
Entry storage implementation for the MoodCheck journal.

This module provides an in-memory entry store that supports per-owner
snapshot streaming to multiple subscribers. It backs the HTTP service and
doubles as an in-process entry store client for the view-model.
"""

import asyncio
import logging
import time
import uuid
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager

from .errors import EntryNotFoundError, InvalidEntryError
from .models import Mood, MoodEntry

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[list[MoodEntry]], None]
ErrorCallback = Callable[[str], None]


class EntryStore:
    """
    In-memory mood entry storage with real-time streaming capabilities.

    Writes bump a per-owner version counter and wake every subscriber through
    a shared condition; subscribers only emit when their owner's version
    moved. All operations are coordinated through asyncio primitives.
    """

    def __init__(self) -> None:
        self._entries: dict[str, MoodEntry] = {}
        self._condition = asyncio.Condition()
        self._versions: dict[str, int] = {}
        self._watchers: set[asyncio.Task[None]] = set()

    async def add(self, mood: str, note: str, owner_id: str) -> MoodEntry:
        """
        Create a new entry and notify the owner's subscribers.

        Args:
            mood: Emoji token of the mood
            note: Free-text note
            owner_id: Identifier of the creating user

        Returns:
            The stored entry with its assigned id and server timestamp
        """
        try:
            token = Mood(mood).value
        except ValueError as e:
            raise InvalidEntryError(f"Unknown mood {mood!r}") from e
        if not owner_id:
            raise InvalidEntryError("An entry needs an owner")

        async with self._condition:
            entry = MoodEntry(
                id=uuid.uuid4().hex,
                mood=token,
                note=note,
                timestamp=time.time(),
                owner_id=owner_id,
            )
            self._entries[entry.id] = entry
            self._bump(owner_id)
            return entry

    async def delete(self, entry_id: str) -> None:
        """
        Remove an entry and notify its owner's subscribers.

        Raises:
            EntryNotFoundError: If no entry has this id
        """
        async with self._condition:
            entry = self._entries.pop(entry_id, None)
            if entry is None:
                raise EntryNotFoundError(f"No entry with id {entry_id!r}")
            self._bump(entry.owner_id)

    async def query(self, owner_id: str) -> list[MoodEntry]:
        """Return the owner's entries in insertion order."""
        async with self._condition:
            return self._snapshot(owner_id)

    @asynccontextmanager
    async def stream(
        self, owner_id: str
    ) -> AsyncGenerator[AsyncGenerator[list[MoodEntry], None], None]:
        """
        Stream snapshots of one owner's entries.

        This context manager yields an async generator that produces the
        owner's current entries immediately, then again after every write
        that touches them.

        Yields:
            An async generator of entry lists
        """

        async def snapshot_generator() -> AsyncGenerator[list[MoodEntry], None]:
            async with self._condition:
                last_seen_version = self._versions.get(owner_id, 0)
                snapshot = self._snapshot(owner_id)
            yield snapshot

            while True:
                async with self._condition:
                    await self._condition.wait_for(
                        lambda: self._versions.get(owner_id, 0) > last_seen_version
                    )
                    last_seen_version = self._versions[owner_id]
                    snapshot = self._snapshot(owner_id)
                yield snapshot

        generator = snapshot_generator()
        try:
            yield generator
        finally:
            await generator.aclose()

    def subscribe(
        self,
        owner_id: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Callable[[], None]:
        """
        Register callbacks for the owner's snapshots.

        Must be called from a running event loop. The returned function
        cancels the registration.
        """

        async def watch() -> None:
            try:
                async with self.stream(owner_id) as snapshots:
                    async for snapshot in snapshots:
                        on_snapshot(snapshot)
            except Exception as e:
                logger.exception("Entry subscription for %s failed", owner_id)
                on_error(str(e) or type(e).__name__)

        task = asyncio.get_running_loop().create_task(watch())
        self._watchers.add(task)
        task.add_done_callback(self._watchers.discard)

        def unsubscribe() -> None:
            task.cancel()

        return unsubscribe

    def _bump(self, owner_id: str) -> None:
        self._versions[owner_id] = self._versions.get(owner_id, 0) + 1
        self._condition.notify_all()

    def _snapshot(self, owner_id: str) -> list[MoodEntry]:
        return [entry for entry in self._entries.values() if entry.owner_id == owner_id]
