from __future__ import annotations

from datetime import datetime

import pytest
from pydantic import ValidationError

from domain.models import (
    EventBatch,
    Event,
    Frame,
    LayoutSolution,
    Placement,
    Rect,
    SolveOutcome,
)


def test_placements_within_tolerance_compare_and_hash_equal() -> None:
    noisy = Placement(x=0.1 + 0.2, width=100 - 2 * (100 / 3))
    exact = Placement(x=0.3, width=100 / 3)

    assert noisy == exact
    assert hash(noisy) == hash(exact)
    assert len({noisy, exact}) == 1


def test_placements_straddling_a_rounding_boundary_hash_equal() -> None:
    first = Placement(x=0.1234567895, width=100.0)
    second = Placement(x=0.1234567895 + 5e-13, width=100.0)

    assert first == second
    assert hash(first) == hash(second)
    assert len({first, second}) == 1
    assert {first: "left"}[second] == "left"


def test_placements_outside_tolerance_differ() -> None:
    assert Placement(x=0.0, width=100.0) != Placement(x=0.0, width=100.001)
    assert Placement(x=0.0, width=100.0) != Placement(x=1e-6, width=100.0)


def test_touching_placements_do_not_overlap() -> None:
    left = Placement(x=0.0, width=0.1 + 0.2)
    right = Placement(x=0.3, width=0.5)

    assert not left.overlaps(right)
    assert not right.overlaps(left)
    assert Placement(x=0.0, width=151.0).overlaps(Placement(x=150.0, width=150.0))


def test_frames_compare_by_event_id() -> None:
    first = Frame(event_id=7, x=0.0, y=0.0, width=300.0, height=100.0)
    moved = Frame(event_id=7, x=150.0, y=0.0, width=150.0, height=100.0)
    other = Frame(event_id=8, x=0.0, y=0.0, width=300.0, height=100.0)

    assert first == moved
    assert hash(first) == hash(moved)
    assert first != other
    assert len({first, moved, other}) == 2


def test_frame_apply_only_changes_horizontal_geometry() -> None:
    frame = Frame(event_id=1, x=0.0, y=50.0, width=300.0, height=100.0)
    frame.apply(Placement(x=100.0, width=100.0))

    assert frame.to_rect() == Rect(x=100.0, y=50.0, width=100.0, height=100.0)
    assert frame.placement() == Placement(x=100.0, width=100.0)


def test_event_accepts_id_alias_and_rejects_reversed_interval() -> None:
    event = Event.model_validate(
        {"id": 3, "start": "2024-05-06T09:00:00", "end": "2024-05-06T10:00:00"}
    )
    assert event.event_id == 3

    with pytest.raises(ValidationError):
        Event(
            event_id=4,
            start=datetime(2024, 5, 6, 10, 0),
            end=datetime(2024, 5, 6, 9, 0),
        )


def test_event_batch_rejects_duplicate_ids() -> None:
    payload = {
        "events": [
            {"id": 1, "start": "2024-05-06T09:00:00", "end": "2024-05-06T10:00:00"},
            {"id": 1, "start": "2024-05-06T11:00:00", "end": "2024-05-06T12:00:00"},
        ]
    }
    with pytest.raises(ValidationError, match="Duplicate event id"):
        EventBatch.model_validate(payload)


def test_cancelled_solution_has_no_result() -> None:
    cancelled = LayoutSolution(outcome=SolveOutcome.CANCELLED)
    solved = LayoutSolution(
        outcome=SolveOutcome.SOLVED,
        frames={1: Rect(x=0.0, y=0.0, width=300.0, height=100.0)},
    )

    assert cancelled.as_result() is None
    assert solved.as_result() == {1: Rect(x=0.0, y=0.0, width=300.0, height=100.0)}
    assert solved.to_dict() == {
        "outcome": "solved",
        "frames": {"1": {"x": 0.0, "y": 0.0, "width": 300.0, "height": 100.0}},
    }
