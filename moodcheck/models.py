"""
Shared data models for the MoodCheck journal.

This module defines the core domain models used across multiple layers
of the application (store, view-model, API, CLI).
"""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Score used for tokens outside the Mood table (e.g. written by an older client).
UNKNOWN_MOOD_SCORE = 3


class Mood(str, Enum):
    """The five moods a check-in can record, stored as their emoji token."""

    ANGRY = "😡"
    SAD = "😔"
    NEUTRAL = "😐"
    GOOD = "🙂"
    GREAT = "🤩"

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def score(self) -> int:
        return _MOOD_SCORES[self]

    @classmethod
    def from_score(cls, score: int) -> "Mood":
        return _SCORE_MOODS[score]

    @classmethod
    def parse(cls, value: str) -> "Mood":
        """Resolve an emoji token or a case-insensitive label to a Mood."""
        text = value.strip()
        for mood in cls:
            if text == mood.value or text.lower() == mood.name.lower():
                return mood
        raise ValueError(f"Unknown mood {value!r}")


_MOOD_SCORES: dict[Mood, int] = {
    Mood.ANGRY: 1,
    Mood.SAD: 2,
    Mood.NEUTRAL: 3,
    Mood.GOOD: 4,
    Mood.GREAT: 5,
}
_SCORE_MOODS: dict[int, Mood] = {score: mood for mood, score in _MOOD_SCORES.items()}

if set(_MOOD_SCORES) != set(Mood) or sorted(_SCORE_MOODS) != [1, 2, 3, 4, 5]:
    raise RuntimeError("Mood score table must map every mood onto 1..5 exactly once")


def mood_score(token: str) -> int:
    """
    Map a stored mood token to its 1-5 score.

    Tokens outside the Mood table score UNKNOWN_MOOD_SCORE rather than
    failing, so one bad document cannot break the stats of a whole history.
    """
    try:
        return Mood(token).score
    except ValueError:
        return UNKNOWN_MOOD_SCORE


class MoodEntry(BaseModel):
    """A single mood check-in as held by the entry store."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Store-assigned entry identifier")
    mood: str = Field(..., description="Emoji token of the recorded mood")
    note: str = Field("", description="Free-text note, possibly empty")
    timestamp: float | None = Field(
        None, description="Unix timestamp assigned by the store"
    )
    owner_id: str = Field(..., description="Identifier of the owning user")


class EntrySnapshot(BaseModel):
    """Full set of entries owned by one user at a point in time."""

    entries: list[MoodEntry] = Field(default_factory=list)


class Identity(BaseModel):
    """An authenticated user."""

    model_config = ConfigDict(frozen=True)

    uid: str
    display_name: str


class Trend(str, Enum):
    """Most recent check-ins compared with the older ones in the window."""

    IMPROVING = "📈"
    DECLINING = "📉"
    FLAT = "➡️"


class StatsColor(str, Enum):
    POSITIVE = "#4caf50"
    CAUTION = "#ffc107"
    NEGATIVE = "#f44336"


class Stats(BaseModel):
    """Aggregate view of the most recent check-ins."""

    average: float
    color: StatsColor
    best: Mood
    worst: Mood
    trend: Trend
    count: int

    @property
    def average_label(self) -> str:
        return str(Decimal(self.average).quantize(Decimal("0.1"), ROUND_HALF_UP))
