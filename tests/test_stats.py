"""
Tests for the statistics computed over recent check-ins.
"""

from moodcheck.models import Mood, MoodEntry, StatsColor, Trend, mood_score
from moodcheck.stats import compute_stats, compute_trend, sort_entries

SCORE_MOODS = {1: Mood.ANGRY, 2: Mood.SAD, 3: Mood.NEUTRAL, 4: Mood.GOOD, 5: Mood.GREAT}


def _entries(scores: list[int]) -> list[MoodEntry]:
    """Build entries in recency order from a list of scores."""
    return [
        MoodEntry(
            id=f"e{i}",
            mood=SCORE_MOODS[score].value,
            timestamp=1_700_000_000.0 - i * 3600,
            owner_id="u1",
        )
        for i, score in enumerate(scores)
    ]


class TestMoodScores:
    """Test the fixed mood table."""

    def test_scores_follow_table(self):
        """Test every mood maps to its fixed score and back."""
        assert [mood.score for mood in Mood] == [1, 2, 3, 4, 5]
        for mood in Mood:
            assert Mood.from_score(mood.score) is mood

    def test_unknown_token_scores_neutral(self):
        """Test tokens outside the table fall back to the neutral score."""
        assert mood_score("🦄") == 3
        assert mood_score(Mood.ANGRY.value) == 1

    def test_parse_accepts_emoji_and_label(self):
        """Test moods can be parsed from their emoji or label."""
        assert Mood.parse("🤩") is Mood.GREAT
        assert Mood.parse(" Sad ") is Mood.SAD


class TestSortEntries:
    """Test recency ordering."""

    def test_newest_first_with_missing_timestamps_last(self):
        """Test entries without a timestamp sort after everything else."""
        entries = [
            MoodEntry(id="old", mood="😐", timestamp=100.0, owner_id="u1"),
            MoodEntry(id="pending", mood="😐", timestamp=None, owner_id="u1"),
            MoodEntry(id="new", mood="😐", timestamp=200.0, owner_id="u1"),
        ]
        assert [e.id for e in sort_entries(entries)] == ["new", "old", "pending"]

    def test_stable_and_idempotent(self):
        """Test ties keep their relative order and resorting changes nothing."""
        entries = [
            MoodEntry(id="a", mood="😐", timestamp=100.0, owner_id="u1"),
            MoodEntry(id="b", mood="😐", timestamp=100.0, owner_id="u1"),
            MoodEntry(id="c", mood="😐", timestamp=None, owner_id="u1"),
            MoodEntry(id="d", mood="😐", timestamp=None, owner_id="u1"),
        ]
        once = sort_entries(entries)
        assert [e.id for e in once] == ["a", "b", "c", "d"]
        assert sort_entries(once) == once


class TestComputeStats:
    """Test aggregate stats over the recent window."""

    def test_empty_list_has_no_stats(self):
        """Test that no entries means no stats."""
        assert compute_stats([]) is None

    def test_all_great(self):
        """Test a week of great moods."""
        stats = compute_stats(_entries([5] * 7))
        assert stats is not None
        assert stats.average_label == "5.0"
        assert stats.color is StatsColor.POSITIVE
        assert stats.best is Mood.GREAT
        assert stats.worst is Mood.GREAT
        assert stats.trend is Trend.FLAT
        assert stats.count == 7

    def test_only_recent_seven_count(self):
        """Test entries beyond the seventh are ignored."""
        stats = compute_stats(_entries([1] * 7 + [5, 5, 5]))
        assert stats.count == 7
        assert stats.best is Mood.ANGRY
        assert stats.color is StatsColor.NEGATIVE

    def test_recent_better_is_improving(self):
        """Test newer entries scoring higher than older ones reads as improving."""
        stats = compute_stats(_entries([5, 5, 5, 1, 1, 1, 1]))
        assert stats.trend is Trend.IMPROVING
        assert stats.best is Mood.GREAT
        assert stats.worst is Mood.ANGRY

    def test_recent_worse_is_declining(self):
        """Test newer entries scoring lower than older ones reads as declining."""
        stats = compute_stats(_entries([1, 1, 1, 5, 5, 5, 5]))
        assert stats.trend is Trend.DECLINING

    def test_average_rounds_half_up(self):
        """Test the displayed average rounds halves up."""
        stats = compute_stats(_entries([4, 3, 3, 3]))
        assert stats.average == 3.25
        assert stats.average_label == "3.3"

    def test_color_buckets(self):
        """Test the average is bucketed into three colors."""
        assert compute_stats(_entries([4, 4])).color is StatsColor.POSITIVE
        assert compute_stats(_entries([3, 2])).color is StatsColor.CAUTION
        assert compute_stats(_entries([2, 2])).color is StatsColor.NEGATIVE

    def test_unknown_tokens_count_as_neutral(self):
        """Test unrecognized moods contribute the neutral score."""
        entries = [MoodEntry(id="x", mood="🦄", timestamp=1.0, owner_id="u1")]
        stats = compute_stats(entries)
        assert stats.average == 3.0
        assert stats.best is Mood.NEUTRAL


class TestComputeTrend:
    """Test the front/back split for small windows."""

    def test_single_entry_is_flat(self):
        """Test one score compares against itself."""
        assert compute_trend([5]) is Trend.FLAT

    def test_three_entries_split_two_one(self):
        """Test n=3 compares the two newest against the oldest."""
        assert compute_trend([4, 4, 3]) is Trend.IMPROVING
        assert compute_trend([3, 4, 4]) is Trend.DECLINING

    def test_four_entries_split_two_two(self):
        """Test n=4 compares two against two."""
        assert compute_trend([2, 2, 4, 4]) is Trend.DECLINING

    def test_small_difference_is_flat(self):
        """Test differences under the threshold read as flat."""
        assert compute_trend([4, 3, 4, 4, 4, 3, 3]) is Trend.FLAT
