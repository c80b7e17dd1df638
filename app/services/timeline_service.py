from collections.abc import Sequence

from app.core.errors import EmptyTimelineError
from app.models.composition import Timeline, TimelineEntry


def compute_timeline(durations: Sequence[float]) -> Timeline:
    """Lay per-verse audio durations end to end.

    Each entry starts exactly where the previous one ended, so the overlay
    windows derived from the timeline never overlap or leave gaps.
    """
    if not durations:
        raise EmptyTimelineError("Cannot build a timeline without verses")

    entries: list[TimelineEntry] = []
    cursor = 0.0
    for index, duration in enumerate(durations):
        duration = float(duration)
        if duration < 0:
            raise ValueError(f"Negative duration for verse {index}: {duration}")
        end = cursor + duration
        entries.append(TimelineEntry(verse_index=index, start_seconds=cursor, end_seconds=end))
        cursor = end

    return Timeline(entries=tuple(entries), total_duration=cursor)
