"""
View-model for the MoodCheck journal.

MoodViewModel owns a single ViewState and is the only thing that mutates it.
Collaborator callbacks (identity changes, entry snapshots, subscription
errors, the suggestion timer) never touch the state directly: they post
events onto a queue, and one update loop applies them in order.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from .auth import AuthClient
from .errors import AuthError, StoreError
from .insights import generate_insights, suggestion_for
from .models import Identity, Mood, MoodEntry, Stats
from .stats import compute_stats, sort_entries

logger = logging.getLogger(__name__)

SUGGESTION_SECONDS = 10.0

ConfirmCallback = Callable[[str], bool | Awaitable[bool]]
AlertCallback = Callable[[str], None]


class EntryStoreClient(Protocol):
    """What the view-model needs from an entry store."""

    async def add(self, mood: str, note: str, owner_id: str) -> MoodEntry: ...

    async def delete(self, entry_id: str) -> None: ...

    def subscribe(
        self,
        owner_id: str,
        on_snapshot: Callable[[list[MoodEntry]], None],
        on_error: Callable[[str], None],
    ) -> Callable[[], None]: ...


class SessionPhase(str, Enum):
    RESOLVING = "resolving"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


# MARK: - Events


@dataclass(frozen=True)
class IdentityChanged:
    identity: Identity | None


@dataclass(frozen=True)
class EntriesSnapshot:
    generation: int
    entries: list[MoodEntry]


@dataclass(frozen=True)
class EntriesFailed:
    generation: int
    message: str


@dataclass(frozen=True)
class SuggestionExpired:
    token: int


Event = IdentityChanged | EntriesSnapshot | EntriesFailed | SuggestionExpired


# MARK: - State


@dataclass
class ViewState:
    """Everything the presentation layer renders."""

    phase: SessionPhase = SessionPhase.RESOLVING
    user: Identity | None = None
    entries: list[MoodEntry] = field(default_factory=list)
    entries_loading: bool = False
    error: str | None = None
    draft_mood: Mood | None = None
    draft_note: str = ""
    is_submitting: bool = False
    suggestion: str | None = None
    notices: list[str] = field(default_factory=list)

    @property
    def loading(self) -> bool:
        return self.phase is SessionPhase.RESOLVING

    @property
    def can_submit(self) -> bool:
        return (
            self.phase is SessionPhase.AUTHENTICATED
            and self.draft_mood is not None
            and not self.is_submitting
        )

    @property
    def stats(self) -> Stats | None:
        return compute_stats(self.entries)

    @property
    def insights(self) -> list[str]:
        return list(generate_insights(self.entries))


def _deny(message: str) -> bool:
    return False


class MoodViewModel:
    """
    Session, synchronization and check-in logic behind the journal views.

    Args:
        auth: Identity provider
        store: Entry store client
        confirm: Yes/no prompt used before deleting; denies by default
        alert: Receives blocking user-facing notices; by default they are
            appended to state.notices
        suggestion_seconds: How long a post-check-in suggestion stays visible
    """

    def __init__(
        self,
        auth: AuthClient,
        store: EntryStoreClient,
        *,
        confirm: ConfirmCallback = _deny,
        alert: AlertCallback | None = None,
        suggestion_seconds: float = SUGGESTION_SECONDS,
    ) -> None:
        self.state = ViewState()
        self._auth = auth
        self._store = store
        self._confirm = confirm
        self._alert = alert or self.state.notices.append
        self._suggestion_seconds = suggestion_seconds

        self._events: asyncio.Queue[Event] = asyncio.Queue()
        self._unsubscribe_identity: Callable[[], None] | None = None
        self._unsubscribe_entries: Callable[[], None] | None = None
        self._generation = 0
        self._suggestion_token = 0
        self._suggestion_timer: asyncio.TimerHandle | None = None

    # MARK: - Lifecycle

    def start(self) -> None:
        """Subscribe to identity changes. The first notification ends RESOLVING."""
        if self._unsubscribe_identity is None:
            self._unsubscribe_identity = self._auth.subscribe(
                lambda identity: self._post(IdentityChanged(identity))
            )

    def close(self) -> None:
        """Tear down every subscription and pending timer."""
        if self._unsubscribe_identity is not None:
            self._unsubscribe_identity()
            self._unsubscribe_identity = None
        self._stop_entries()
        self._cancel_suggestion_timer()

    # MARK: - Update loop

    def dispatch(self, event: Event) -> None:
        """Apply one event to the state."""
        if isinstance(event, IdentityChanged):
            self._apply_identity(event.identity)
        elif isinstance(event, EntriesSnapshot):
            self._apply_snapshot(event)
        elif isinstance(event, EntriesFailed):
            self._apply_failure(event)
        elif isinstance(event, SuggestionExpired):
            if event.token == self._suggestion_token:
                self.state.suggestion = None
                self._suggestion_timer = None

    def pump(self) -> int:
        """Apply every event already queued without waiting. Returns the count."""
        applied = 0
        while True:
            try:
                event = self._events.get_nowait()
            except asyncio.QueueEmpty:
                return applied
            self.dispatch(event)
            applied += 1

    async def run(self, on_update: Callable[[ViewState], None] | None = None) -> None:
        """Apply events forever, calling on_update after each one."""
        while True:
            self.dispatch(await self._events.get())
            if on_update is not None:
                on_update(self.state)

    async def run_until(self, predicate: Callable[[ViewState], bool]) -> ViewState:
        """Apply events until predicate(state) holds."""
        self.pump()
        while not predicate(self.state):
            self.dispatch(await self._events.get())
        return self.state

    def _post(self, event: Event) -> None:
        self._events.put_nowait(event)

    # MARK: - Session

    async def sign_in(self) -> bool:
        try:
            await self._auth.sign_in()
        except AuthError as e:
            logger.warning("Sign-in failed: %s", e)
            self._alert(f"Sign-in failed: {e}")
            return False
        return True

    async def sign_out(self) -> bool:
        try:
            await self._auth.sign_out()
        except AuthError as e:
            logger.warning("Sign-out failed: %s", e)
            self._alert(f"Sign-out failed: {e}")
            return False
        return True

    def _apply_identity(self, identity: Identity | None) -> None:
        state = self.state

        if identity is None:
            self._stop_entries()
            state.phase = SessionPhase.UNAUTHENTICATED
            state.user = None
            state.entries = []
            state.entries_loading = False
            state.error = None
            state.draft_mood = None
            state.draft_note = ""
            return

        if state.user is not None and state.user.uid == identity.uid:
            state.user = identity
            return

        self._stop_entries()
        state.phase = SessionPhase.AUTHENTICATED
        state.user = identity
        state.entries = []
        state.error = None
        self._start_entries(identity.uid)

    # MARK: - Entry synchronization

    def _start_entries(self, owner_id: str) -> None:
        self._generation += 1
        generation = self._generation
        self.state.entries_loading = True
        self._unsubscribe_entries = self._store.subscribe(
            owner_id,
            lambda entries: self._post(EntriesSnapshot(generation, list(entries))),
            lambda message: self._post(EntriesFailed(generation, message)),
        )

    def _stop_entries(self) -> None:
        if self._unsubscribe_entries is None:
            return
        unsubscribe, self._unsubscribe_entries = self._unsubscribe_entries, None
        # Anything still queued from this subscription is now stale.
        self._generation += 1
        unsubscribe()

    def _apply_snapshot(self, event: EntriesSnapshot) -> None:
        if event.generation != self._generation:
            logger.debug("Dropping snapshot from a closed subscription")
            return
        self.state.entries = sort_entries(event.entries)
        self.state.entries_loading = False
        self.state.error = None

    def _apply_failure(self, event: EntriesFailed) -> None:
        if event.generation != self._generation:
            return
        logger.error("Entry subscription error: %s", event.message)
        self.state.entries_loading = False
        self.state.error = event.message

    # MARK: - Check-in

    def select_mood(self, mood: Mood | None) -> None:
        self.state.draft_mood = mood

    def set_note(self, note: str) -> None:
        self.state.draft_note = note

    async def submit(self) -> bool:
        """
        Save the drafted check-in.

        Does nothing without a selected mood, a signed-in user, or while a
        previous submission is in flight. On failure the draft is kept so the
        user can retry.

        Returns:
            True if an entry was written
        """
        state = self.state
        if state.draft_mood is None or state.user is None or state.is_submitting:
            return False

        mood = state.draft_mood
        state.is_submitting = True
        try:
            await self._store.add(mood.value, state.draft_note.strip(), state.user.uid)
        except StoreError as e:
            logger.error("Error adding entry: %s", e)
            self._alert("Failed to save mood. Please try again.")
            return False
        finally:
            state.is_submitting = False

        state.draft_mood = None
        state.draft_note = ""
        self._show_suggestion(suggestion_for(mood))
        return True

    def _show_suggestion(self, text: str) -> None:
        self._cancel_suggestion_timer()
        self._suggestion_token += 1
        self.state.suggestion = text
        self._suggestion_timer = asyncio.get_running_loop().call_later(
            self._suggestion_seconds,
            self._post,
            SuggestionExpired(self._suggestion_token),
        )

    def _cancel_suggestion_timer(self) -> None:
        if self._suggestion_timer is not None:
            self._suggestion_timer.cancel()
            self._suggestion_timer = None

    # MARK: - Deletion

    async def delete_entry(self, entry_id: str) -> bool:
        """
        Delete an entry after the user confirms.

        The entry stays in state.entries until a snapshot without it arrives.

        Returns:
            True if the store accepted the delete
        """
        answer = self._confirm("Delete this entry?")
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            return False

        try:
            await self._store.delete(entry_id)
        except StoreError as e:
            logger.error("Error deleting entry %s: %s", entry_id, e)
            self._alert("Failed to delete entry. Please try again.")
            return False
        return True
