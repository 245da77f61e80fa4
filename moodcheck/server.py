"""
FastAPI server hosting the MoodCheck entry store.

This module implements the HTTP API endpoints for creating, listing and
deleting mood entries, and a Server-Sent Events endpoint that streams a
user's entry snapshots as they change.
"""

import json
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, Response
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from .config import configure_logging, get_settings
from .errors import EntryNotFoundError, InvalidEntryError
from .models import EntrySnapshot, MoodEntry
from .store import EntryStore

logger = logging.getLogger(__name__)


# API Request/Response Schemas
class EntryCreate(BaseModel):
    """Payload for entry creation requests."""

    mood: str = Field(..., description="Emoji token of the mood")
    note: str = Field("", description="Free-text note")
    owner_id: str = Field(..., min_length=1, description="Owning user id")


def create_app(entry_store: EntryStore) -> FastAPI:
    """
    Create a FastAPI application with the given entry store.

    Args:
        entry_store: The EntryStore instance to use for the application

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Lifespan context manager for FastAPI application."""
        logger.info("Entry store service starting")
        yield
        logger.info("Entry store service stopping")

    app = FastAPI(
        title="MoodCheck",
        description="Per-user mood entry store with live SSE snapshots",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.get("/")
    async def root() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "moodcheck"}

    @app.get("/entries")
    async def list_entries(owner_id: str = Query(..., min_length=1)) -> EntrySnapshot:
        """
        List one user's entries.

        Entries are returned unordered; clients sort by timestamp.
        """
        entries = await entry_store.query(owner_id)
        return EntrySnapshot(entries=entries)

    @app.post("/entries", status_code=201)
    async def create_entry(payload: EntryCreate) -> MoodEntry:
        """
        Create an entry and notify the owner's subscribers.

        Args:
            payload: The entry creation payload

        Returns:
            The stored entry with its id and server timestamp
        """
        try:
            return await entry_store.add(
                mood=payload.mood, note=payload.note, owner_id=payload.owner_id
            )
        except InvalidEntryError as e:
            raise HTTPException(status_code=422, detail=str(e))
        except Exception as e:
            logger.exception("Failed to create entry")
            raise HTTPException(
                status_code=500, detail=f"Failed to create entry: {str(e)}"
            )

    @app.delete("/entries/{entry_id}", status_code=204)
    async def delete_entry(entry_id: str) -> Response:
        """Delete an entry by id."""
        try:
            await entry_store.delete(entry_id)
        except EntryNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return Response(status_code=204)

    @app.get("/entries/stream")
    async def stream_entries(
        owner_id: str = Query(..., min_length=1),
    ) -> StreamingResponse:
        """
        Stream a user's entry snapshots via Server-Sent Events.

        The current snapshot is sent immediately upon connection, then a new
        one after every write affecting the user's entries.

        Returns:
            StreamingResponse with text/event-stream content type
        """

        async def event_generator() -> AsyncGenerator[str, None]:
            """Generate SSE events for entry snapshots."""
            try:
                async with entry_store.stream(owner_id) as snapshots:
                    async for entries in snapshots:
                        data = EntrySnapshot(entries=entries).model_dump_json()
                        yield f"data: {data}\n\n"
            except Exception as e:
                logger.exception("Snapshot stream for %s failed", owner_id)
                error_data = json.dumps({"error": str(e)})
                yield f"event: error\ndata: {error_data}\n\n"

        return StreamingResponse(
            event_generator(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Headers": "*",
            },
        )

    return app


app = create_app(EntryStore())


def main() -> None:
    """Main entry point for the server."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "moodcheck.server:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
