"""
HTTP client for a remote MoodCheck entry store.

RemoteEntryStore speaks to the service in moodcheck.server and offers the
same add/delete/subscribe surface as the in-process EntryStore, so the
view-model can run against either.
"""

import asyncio
import json
import logging
from collections.abc import Callable
from typing import TypeVar

import httpx
from httpx_sse import ServerSentEvent, aconnect_sse
from pydantic import BaseModel, ValidationError

from .errors import EntryNotFoundError, InvalidEntryError, StoreError
from .models import EntrySnapshot, MoodEntry

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"


class RemoteEntryStore:
    """Entry store client backed by the MoodCheck HTTP API."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._watchers: set[asyncio.Task[None]] = set()

    async def add(self, mood: str, note: str, owner_id: str) -> MoodEntry:
        payload = {"mood": mood, "note": note, "owner_id": owner_id}
        async with self._client() as client:
            response = await self._send(client.post("/entries", json=payload))
        return _decode(MoodEntry, response)

    async def delete(self, entry_id: str) -> None:
        async with self._client() as client:
            await self._send(client.delete(f"/entries/{entry_id}"))

    async def query(self, owner_id: str) -> list[MoodEntry]:
        async with self._client() as client:
            response = await self._send(
                client.get("/entries", params={"owner_id": owner_id})
            )
        return _decode(EntrySnapshot, response).entries

    def subscribe(
        self,
        owner_id: str,
        on_snapshot: Callable[[list[MoodEntry]], None],
        on_error: Callable[[str], None],
    ) -> Callable[[], None]:
        """
        Follow the owner's snapshots over Server-Sent Events.

        Must be called from a running event loop. Connection and decoding
        failures end the subscription and are reported through on_error.
        """
        task = asyncio.get_running_loop().create_task(
            self._watch(owner_id, on_snapshot, on_error)
        )
        self._watchers.add(task)
        task.add_done_callback(self._watchers.discard)

        def unsubscribe() -> None:
            task.cancel()

        return unsubscribe

    # MARK: - Private Helpers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url, timeout=self._timeout, transport=self._transport
        )

    async def _send(self, request) -> httpx.Response:
        """Await a request and translate transport/HTTP failures into StoreError."""
        try:
            response = await request
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            detail = _error_detail(e.response)
            if status == 404:
                raise EntryNotFoundError(detail) from e
            if status == 422:
                raise InvalidEntryError(detail) from e
            raise StoreError(f"HTTP {status}: {detail}") from e
        except httpx.HTTPError as e:
            raise StoreError(f"Could not reach {self.base_url}: {e}") from e
        return response

    async def _watch(
        self,
        owner_id: str,
        on_snapshot: Callable[[list[MoodEntry]], None],
        on_error: Callable[[str], None],
    ) -> None:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=None, transport=self._transport
            ) as client:
                async with aconnect_sse(
                    client, "GET", "/entries/stream", params={"owner_id": owner_id}
                ) as event_source:
                    event_source.response.raise_for_status()
                    error_reported = False
                    async for sse in event_source.aiter_sse():
                        if not _handle_sse_event(sse, on_snapshot, on_error):
                            error_reported = True
            # An error event already told the user why the stream ended.
            if not error_reported:
                on_error("Entry stream closed by server")
        except httpx.HTTPError as e:
            logger.error("Entry stream from %s failed: %s", self.base_url, e)
            on_error(str(e) or type(e).__name__)


ModelT = TypeVar("ModelT", bound=BaseModel)


def _decode(model: type[ModelT], response: httpx.Response) -> ModelT:
    """Parse a response body, reporting undecodable payloads as StoreError."""
    try:
        return model.model_validate(response.json())
    except (json.JSONDecodeError, ValidationError) as e:
        raise StoreError(f"Unexpected response from {response.url}: {e}") from e


def _error_detail(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except (json.JSONDecodeError, AttributeError):
        detail = None
    return str(detail) if detail else response.reason_phrase


def _handle_sse_event(
    sse: ServerSentEvent,
    on_snapshot: Callable[[list[MoodEntry]], None],
    on_error: Callable[[str], None],
) -> bool:
    """Handle a single SSE event. Returns False if it was reported as an error."""
    if sse.event == "error":
        try:
            message = json.loads(sse.data).get("error", "Unknown error")
        except json.JSONDecodeError:
            message = sse.data or "Unknown error"
        on_error(message)
        return False

    try:
        snapshot = EntrySnapshot.model_validate_json(sse.data)
    except ValidationError as e:
        logger.warning("Could not parse snapshot: %s - %s", sse.data, e)
        on_error("Received a malformed snapshot")
        return False

    on_snapshot(snapshot.entries)
    return True
