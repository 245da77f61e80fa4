"""
Aggregate statistics over a user's most recent check-ins.

All functions here expect the entry list in recency order (newest first),
as produced by sort_entries().
"""

import math
from collections.abc import Iterable, Sequence

from .models import Mood, MoodEntry, Stats, StatsColor, Trend, mood_score

RECENT_WINDOW = 7
TREND_THRESHOLD = 0.2


def sort_entries(entries: Iterable[MoodEntry]) -> list[MoodEntry]:
    """
    Order entries newest first.

    Entries still waiting for their server timestamp sort as time zero, i.e.
    last. Ties keep their incoming relative order.
    """
    return sorted(entries, key=lambda entry: entry.timestamp or 0.0, reverse=True)


def _mean(values: Sequence[int]) -> float:
    return sum(values) / len(values)


def compute_trend(scores: Sequence[int]) -> Trend:
    """
    Compare the newest scores ("front") against the older remainder ("back").

    The front slice holds min(3, ceil(n / 2)) scores. Because scores are in
    recency order, a positive front - back difference means the user is
    doing better lately.
    """
    split = min(3, math.ceil(len(scores) / 2))
    front = scores[:split]
    back = scores[split:]

    front_avg = _mean(front)
    back_avg = _mean(back) if back else front_avg
    diff = front_avg - back_avg

    if diff >= TREND_THRESHOLD:
        return Trend.IMPROVING
    if diff <= -TREND_THRESHOLD:
        return Trend.DECLINING
    return Trend.FLAT


def color_for(average: float) -> StatsColor:
    if average >= 4:
        return StatsColor.POSITIVE
    if average >= 2.5:
        return StatsColor.CAUTION
    return StatsColor.NEGATIVE


def compute_stats(entries: Sequence[MoodEntry]) -> Stats | None:
    """
    Summarise the most recent RECENT_WINDOW entries.

    Args:
        entries: Entries sorted newest first

    Returns:
        Stats for the window, or None when there are no entries
    """
    if not entries:
        return None

    scores = [mood_score(entry.mood) for entry in entries[:RECENT_WINDOW]]
    average = _mean(scores)

    return Stats(
        average=average,
        color=color_for(average),
        best=Mood.from_score(max(scores)),
        worst=Mood.from_score(min(scores)),
        trend=compute_trend(scores),
        count=len(scores),
    )
