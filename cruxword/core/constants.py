"""Shared constants and enumerations for the fill engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Direction(str, Enum):
    """Word directions supported by the board."""

    ACROSS = "ACROSS"
    DOWN = "DOWN"

    @property
    def step(self) -> Tuple[int, int]:
        return (0, 1) if self is Direction.ACROSS else (1, 0)

    @property
    def short(self) -> str:
        return "A" if self is Direction.ACROSS else "D"


ORTHOGONAL_STEPS: Tuple[Tuple[int, int], ...] = ((0, 1), (1, 0), (0, -1), (-1, 0))

# Unknown cell in a slot pattern.
PATTERN_WILDCARD = "?"
# Blank tile on a board; accepted by the dictionary check, never scored.
BOARD_WILDCARD = "*"

MIN_SEGMENT_LENGTH = 2
MAX_SEGMENT_LENGTH = 5
SEGMENT_LENGTHS: Tuple[int, ...] = tuple(range(MIN_SEGMENT_LENGTH, MAX_SEGMENT_LENGTH + 1))

EDGE_BONUS = 0.08
PRODUCTIVITY_WEIGHT = 0.05
JOIN_BONUS = 0.08
JOIN_PENALTY = -0.06

DEFAULT_MIN_ZIPF = 2.6
DEFAULT_MAX_ZIPF = 6.7
MISSING_ZIPF_NORM = 0.2


@dataclass(frozen=True)
class Bounds:
    """Simple rectangle bounds helper."""

    rows: int
    cols: int

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    @property
    def area(self) -> int:
        return self.rows * self.cols
