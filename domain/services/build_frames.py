from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import List

from domain.models import HOURS_IN_DAY, ColumnSize, Event, Frame


def hours_into_day(moment: datetime) -> float:
    return (
        moment.hour
        + moment.minute / 60.0
        + moment.second / 3600.0
        + moment.microsecond / 3_600_000_000.0
    )


def event_hours(event: Event) -> tuple[float, float]:
    start_hour = hours_into_day(event.start)
    if event.end.date() > event.start.date():
        # Runs past midnight: stop at the bottom of the column.
        return start_hour, HOURS_IN_DAY
    return start_hour, hours_into_day(event.end)


def build_frame(event: Event, column: ColumnSize) -> Frame:
    start_hour, end_hour = event_hours(event)
    hour_height = column.hour_height
    return Frame(
        event_id=event.event_id,
        x=0.0,
        y=hour_height * start_hour,
        width=column.width,
        height=hour_height * (end_hour - start_hour),
    )


def build_frames(events: Mapping[int, Event] | Iterable[Event], column: ColumnSize) -> List[Frame]:
    values = events.values() if isinstance(events, Mapping) else events
    return [build_frame(event, column) for event in values]
