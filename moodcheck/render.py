"""
Text renderers for the journal views.

Every function here is a pure function of the data it is given; none of
them read or change view-model state on their own.
"""

from datetime import datetime

from .models import Mood, MoodEntry, Stats
from .viewmodel import SessionPhase, ViewState


def format_timestamp(timestamp: float | None) -> str:
    if timestamp is None:
        return "Just now"
    return datetime.fromtimestamp(timestamp).strftime("%b %d, %H:%M")


def render_header(state: ViewState) -> str:
    if state.user is None:
        return "MoodCheck"
    return f"MoodCheck · signed in as {state.user.display_name}"


def render_mood_form(state: ViewState) -> str:
    lines = []
    if state.user is not None:
        lines.append(f"Welcome, {state.user.display_name}!")

    choices = []
    for mood in Mood:
        marker = "*" if state.draft_mood is mood else " "
        choices.append(f"[{marker}{mood.value} {mood.label}]")
    lines.append(" ".join(choices))

    if state.draft_note:
        lines.append(f"Note: {state.draft_note}")
    if state.is_submitting:
        lines.append("[ Saving... ]")
    elif state.can_submit:
        lines.append("[ Check In ]")
    else:
        lines.append("[ Check In ] (disabled)")

    if state.suggestion:
        lines.append(f"> {state.suggestion}")
    return "\n".join(line for line in lines if line)


def render_stats(stats: Stats | None) -> str:
    if stats is None:
        return ""
    return "\n".join(
        [
            f"WEEKLY TREND (LAST {stats.count})",
            f"  Average: {stats.average_label}",
            f"  Best:    {stats.best.value}",
            f"  Worst:   {stats.worst.value}",
            f"  Trend:   {stats.trend.value}",
        ]
    )


def render_insights(insights: list[str]) -> str:
    if not insights:
        return ""
    return "\n".join(["💡 INSIGHTS", *(f"  • {insight}" for insight in insights)])


def render_entry(entry: MoodEntry) -> str:
    line = f"{entry.mood}  {format_timestamp(entry.timestamp)}  [{entry.id}]"
    if entry.note:
        line += f"\n    {entry.note}"
    return line


def render_entry_list(state: ViewState) -> str:
    lines = ["Your Recent Entries"]
    if state.error:
        lines.append(f"Error loading data: {state.error}")

    if state.loading or state.entries_loading:
        lines.append("Loading history...")
    elif not state.entries:
        lines.append("No entries yet. Start tracking!")
    else:
        lines.extend(render_entry(entry) for entry in state.entries)
    return "\n".join(lines)


def render_dashboard(state: ViewState) -> str:
    """Compose all views for the current state."""
    if state.phase is SessionPhase.RESOLVING:
        return "Loading..."
    if state.phase is SessionPhase.UNAUTHENTICATED:
        return "\n\n".join([render_header(state), "Sign in to start tracking."])

    sections = [
        render_header(state),
        render_mood_form(state),
        render_stats(state.stats),
        render_insights(state.insights),
        render_entry_list(state),
    ]
    return "\n\n".join(section for section in sections if section)
