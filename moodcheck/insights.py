"""
Heuristic observations and post-check-in suggestions.
"""

from collections.abc import Iterator, Sequence
from datetime import datetime

from .models import Mood, MoodEntry, mood_score

INSIGHT_WINDOW = 10
PATTERN_SHARE = 0.6
IMPROVEMENT_THRESHOLD = 0.5
LOW_MOOD_SCORE = 2

MORNING_HOURS = range(5, 11)
EVENING_HOURS = range(17, 23)

MORNING_INSIGHT = "🌅 You mostly check in during the morning. Early reflection suits you."
EVENING_INSIGHT = "🌙 Evenings seem to be when you reflect most."
IMPROVEMENT_INSIGHT = "📈 Your last few check-ins are noticeably brighter than the ones before."
HARD_STREAK_INSIGHT = (
    "💙 The last two check-ins have been tough. Be gentle with yourself today."
)

SUGGESTIONS = {
    Mood.SAD: "Try a slow breath: in for 4, hold for 4, out for 6. Repeat three times.",
    Mood.ANGRY: "Pick one small win you can finish in the next five minutes.",
    Mood.GOOD: "Nice! Take a moment to notice what went well today.",
    Mood.GREAT: "Nice! Take a moment to notice what went well today.",
}
CENTERING_SUGGESTION = "Take a minute to center yourself: notice five things around you."


def _local_hour(timestamp: float | None) -> int:
    if timestamp is None:
        return 12
    return datetime.fromtimestamp(timestamp).hour


def generate_insights(entries: Sequence[MoodEntry]) -> Iterator[str]:
    """
    Yield observations about the most recent INSIGHT_WINDOW entries.

    Each heuristic is checked independently, so several insights can be
    produced for the same history. Nothing is yielded for fewer than two
    entries.

    Args:
        entries: Entries sorted newest first
    """
    sample = entries[:INSIGHT_WINDOW]
    if len(sample) < 2:
        return

    hours = [_local_hour(entry.timestamp) for entry in sample]
    morning = sum(1 for hour in hours if hour in MORNING_HOURS)
    evening = sum(1 for hour in hours if hour in EVENING_HOURS)

    if morning / len(sample) > PATTERN_SHARE:
        yield MORNING_INSIGHT
    if evening / len(sample) > PATTERN_SHARE:
        yield EVENING_INSIGHT

    scores = [mood_score(entry.mood) for entry in sample]

    if len(scores) >= 6:
        last3 = sum(scores[0:3]) / 3
        prev3 = sum(scores[3:6]) / 3
        if last3 - prev3 >= IMPROVEMENT_THRESHOLD:
            yield IMPROVEMENT_INSIGHT

    if scores[0] <= LOW_MOOD_SCORE and scores[1] <= LOW_MOOD_SCORE:
        yield HARD_STREAK_INSIGHT


def suggestion_for(mood: Mood) -> str:
    """Short prompt shown right after a check-in is saved."""
    return SUGGESTIONS.get(mood, CENTERING_SUGGESTION)
