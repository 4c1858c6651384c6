from __future__ import annotations

import math
from enum import Enum
from typing import List

from domain.models import Placement, is_close, sort_value


class DomainStrategy(str, Enum):
    """How many column splits are offered to a frame.

    ``optimal`` offers every split from one column up to the finest one that
    fits the frame, ``singular`` only the finest, and ``sub_optimal`` a
    handful of the finest splits, which keeps the search small for crowded
    columns.
    """

    OPTIMAL = "optimal"
    SUB_OPTIMAL = "sub_optimal"
    SINGULAR = "singular"


def fitting_columns(frame_width: float, column_width: float) -> int:
    ratio = column_width / frame_width
    nearest = round(ratio)
    if is_close(ratio, nearest):
        return max(int(nearest), 1)
    return max(math.floor(ratio), 1)


def first_column_count(count: int, strategy: DomainStrategy = DomainStrategy.SUB_OPTIMAL) -> int:
    if strategy is DomainStrategy.OPTIMAL:
        return 1
    if strategy is DomainStrategy.SINGULAR:
        return count
    if count == 1:
        return 1
    if count <= 4:
        return 2
    if count <= 6:
        return count - 2
    if count <= 7:
        return count - 1
    return count


def build_domain(
    frame_width: float,
    column_width: float,
    strategy: DomainStrategy = DomainStrategy.SUB_OPTIMAL,
) -> List[Placement]:
    count = fitting_columns(frame_width, column_width)
    domain: List[Placement] = []
    for columns in range(first_column_count(count, strategy), count + 1):
        width = column_width / columns
        for slot in range(columns):
            candidate = Placement(x=slot * width, width=width)
            if candidate not in domain:
                domain.append(candidate)
    return domain


def _candidate_key(candidate: Placement) -> tuple[float, float]:
    return -sort_value(candidate.width), sort_value(candidate.x)


def order_domain(domain: List[Placement]) -> List[Placement]:
    """Widest candidates first, leftmost first among equal widths."""
    return sorted(domain, key=_candidate_key)
