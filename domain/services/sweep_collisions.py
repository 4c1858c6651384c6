from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Dict, List

from domain.models import Frame, Placement, is_close, sort_value
from domain.services.placement_domain import DomainStrategy, build_domain

logger = logging.getLogger(__name__)

# Endpoint ranks at a shared coordinate: ends settle before new starts, and a
# zero-height frame closes only after every start at its coordinate.
_END_RANK = 0
_START_RANK = 1
_EMPTY_END_RANK = 2


@dataclass(frozen=True)
class EndPoint:
    y: float
    frame: Frame
    is_start: bool

    @property
    def is_end(self) -> bool:
        return not self.is_start

    @property
    def rank(self) -> int:
        if self.is_start:
            return _START_RANK
        if is_close(self.frame.height, 0.0):
            return _EMPTY_END_RANK
        return _END_RANK


@dataclass(frozen=True)
class SweepResult:
    frames: List[Frame]
    domains: List[List[Placement]]
    collisions: List[List[bool]]
    has_collisions: bool

    def collides(self, first: int, second: int) -> bool:
        return self.collisions[first][second]


def _endpoint_key(point: EndPoint) -> tuple[float, int, int]:
    return sort_value(point.y), point.rank, point.frame.event_id


def build_endpoints(frames: Iterable[Frame]) -> List[EndPoint]:
    points: List[EndPoint] = []
    for frame in frames:
        points.append(EndPoint(y=frame.y, frame=frame, is_start=True))
        points.append(EndPoint(y=frame.y2, frame=frame, is_start=False))
    points.sort(key=_endpoint_key)
    return points


def sweep_frames(
    frames: Iterable[Frame],
    column_width: float,
    strategy: DomainStrategy = DomainStrategy.SUB_OPTIMAL,
) -> SweepResult:
    """Scan frames top to bottom, shrinking widths of time-overlapping frames.

    Frames are returned in the order their bottom edge is passed, which is
    also the variable order of the solver. Each frame's domain is generated
    when it settles, so it reflects the narrowest share it was squeezed into.
    """
    active: Dict[int, Frame] = {}
    settled: List[Frame] = []
    domains: List[List[Placement]] = []
    indices: Dict[int, int] = {}
    possible: Dict[int, List[int]] = {}
    has_collisions = False

    for point in build_endpoints(frames):
        frame = point.frame
        if point.is_start:
            if active:
                has_collisions = True
                share = column_width / (len(active) + 1)
                for other in active.values():
                    other.width = min(other.width, share)
                    possible.setdefault(frame.event_id, []).append(other.event_id)
                    possible.setdefault(other.event_id, []).append(frame.event_id)
                frame.width = share
            active[frame.event_id] = frame
        else:
            active.pop(frame.event_id, None)
            indices[frame.event_id] = len(settled)
            settled.append(frame)
            domains.append(build_domain(frame.width, column_width, strategy))

    size = len(settled)
    collisions = [[False] * size for _ in range(size)]
    for event_id, others in possible.items():
        first = indices[event_id]
        for other_id in others:
            collisions[first][indices[other_id]] = True

    logger.debug(
        "Swept %d frames: collisions=%s, constrained pairs=%d",
        size,
        has_collisions,
        sum(len(others) for others in possible.values()) // 2,
    )
    return SweepResult(
        frames=settled,
        domains=domains,
        collisions=collisions,
        has_collisions=has_collisions,
    )
