from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Set

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

HOURS_IN_DAY = 24.0
PLACEMENT_TOLERANCE = 1e-12
SORT_DIGITS = 9


def is_close(a: float, b: float) -> bool:
    return math.isclose(a, b, rel_tol=PLACEMENT_TOLERANCE, abs_tol=PLACEMENT_TOLERANCE)


def sort_value(value: float) -> float:
    return round(value, SORT_DIGITS)


class Event(BaseModel):
    event_id: int = Field(..., validation_alias=AliasChoices("event_id", "id"))
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def ensure_end_not_before_start(self) -> Event:
        if self.end < self.start:
            msg = f"Event {self.event_id} ends before it starts"
            raise ValueError(msg)
        return self


class EventBatch(BaseModel):
    events: List[Event] = Field(default_factory=list)

    @field_validator("events", mode="after")
    @classmethod
    def ensure_unique_event_ids(cls, events: List[Event]) -> List[Event]:
        seen: Set[int] = set()
        for event in events:
            if event.event_id in seen:
                msg = f"Duplicate event id found: {event.event_id}"
                raise ValueError(msg)
            seen.add(event.event_id)
        return events

    def by_id(self) -> Dict[int, Event]:
        return {event.event_id: event for event in self.events}


@dataclass(frozen=True)
class ColumnSize:
    width: float
    height: float

    @property
    def hour_height(self) -> float:
        return self.height / HOURS_IN_DAY


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True, eq=False)
class Placement:
    """Candidate horizontal placement of a frame.

    Equality tolerates floating point noise from repeated division. Any
    rounding of the coordinates would split some tolerance-equal pairs, so
    all placements share one hash and sets fall back to equality.
    """

    x: float
    width: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Placement):
            return NotImplemented
        return is_close(self.x, other.x) and is_close(self.width, other.width)

    def __hash__(self) -> int:
        return hash(Placement)

    def overlaps(self, other: Placement) -> bool:
        return horizontal_overlap(self.x, self.x2, other.x, other.x2)


def horizontal_overlap(a_x: float, a_x2: float, b_x: float, b_x2: float) -> bool:
    # Half-open ranges; a shared boundary is not an overlap.
    a_before_b = a_x2 < b_x or is_close(a_x2, b_x)
    b_before_a = b_x2 < a_x or is_close(b_x2, a_x)
    return not (a_before_b or b_before_a)


@dataclass(eq=False)
class Frame:
    event_id: int
    x: float
    y: float
    width: float
    height: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Frame):
            return NotImplemented
        return self.event_id == other.event_id

    def __hash__(self) -> int:
        return hash(self.event_id)

    def apply(self, placement: Placement) -> None:
        self.x = placement.x
        self.width = placement.width

    def placement(self) -> Placement:
        return Placement(self.x, self.width)

    def overlaps(self, other: Frame) -> bool:
        return horizontal_overlap(self.x, self.x2, other.x, other.x2)

    def to_rect(self) -> Rect:
        return Rect(x=self.x, y=self.y, width=self.width, height=self.height)


class SolveOutcome(str, Enum):
    NO_COLLISIONS = "no_collisions"
    SOLVED = "solved"
    EXHAUSTED = "exhausted"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class LayoutSolution:
    outcome: SolveOutcome
    frames: Dict[int, Rect] = field(default_factory=dict)

    @property
    def is_cancelled(self) -> bool:
        return self.outcome is SolveOutcome.CANCELLED

    def as_result(self) -> Optional[Dict[int, Rect]]:
        if self.is_cancelled:
            return None
        return dict(self.frames)

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.value,
            "frames": {str(event_id): rect.to_dict() for event_id, rect in self.frames.items()},
        }
