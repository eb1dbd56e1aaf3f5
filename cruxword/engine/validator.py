"""Rule validation and length-based scoring for finished boards."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import AbstractSet, Iterable, List, Optional, Set, Tuple

from ..core.constants import BOARD_WILDCARD, ORTHOGONAL_STEPS, Direction
from ..core.models import BoardWord, ValidationResult
from ..utils.logger import get_logger
from .board import Board

LOGGER = get_logger(__name__)

Coord = Tuple[int, int]

MIN_SCORED_LENGTH = 3
BONUS_START_LENGTH = 6


@dataclass
class ValidatorConfig:
    min_word_len: int = 3
    require_single_cluster: bool = True
    max_intersections_per_pair: int = 1


def length_bonus(length: int) -> int:
    """0 below six letters, then 2, 3, 5, 8, 13, 21, ... for 6, 7, 8, 9, 10, 11, ..."""

    if length < BONUS_START_LENGTH:
        return 0
    current, following = 2, 3
    for _ in range(length - BONUS_START_LENGTH):
        current, following = following, current + following
    return current


def word_score(text: str) -> int:
    return len(text) + length_bonus(len(text))


class BoardValidator:
    """Collects every rule breach on a board in one pass and scores the words."""

    def __init__(
        self,
        config: Optional[ValidatorConfig] = None,
        dictionary: Optional[Iterable[str]] = None,
        scoreable: Optional[Iterable[str]] = None,
    ) -> None:
        self.config = config or ValidatorConfig()
        self.dictionary: Optional[Set[str]] = (
            {word.upper() for word in dictionary} if dictionary is not None else None
        )
        self.scoreable: Optional[Set[str]] = (
            {word.upper() for word in scoreable} if scoreable is not None else None
        )

    def validate(self, board: Board) -> ValidationResult:
        issues: List[str] = []
        filled = board.filled_count
        area = board.bounds.area
        density = filled / area if area else 0.0

        if self.config.require_single_cluster and filled > 0:
            self._check_single_cluster(board, filled, issues)

        runs = self._extract_runs(board)
        self._check_short_runs(runs, issues)
        words = [run for run in runs if run.length >= self.config.min_word_len]
        if board.has_ownership():
            words = _drop_nested_runs(words)

        self._check_intersections(words, issues)
        valid_words = self._check_dictionary(words, issues)

        eligible = [word for word in valid_words if self._is_scoreable(word.text)]
        score = sum(word_score(word.text) for word in eligible)

        if issues:
            LOGGER.warning("Board validation failed: %s", "; ".join(issues))
        return ValidationResult(
            ok=not issues,
            issues=issues,
            density=density,
            filled_cells=filled,
            word_count=len(eligible),
            score=score,
            words=valid_words,
        )

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------
    @staticmethod
    def _check_single_cluster(board: Board, filled: int, issues: List[str]) -> None:
        start = board.filled_coords()[0]
        seen: Set[Coord] = {start}
        queue = deque([start])
        while queue:
            row, col = queue.popleft()
            for dr, dc in ORTHOGONAL_STEPS:
                neighbor = (row + dr, col + dc)
                if neighbor in seen or not board.is_filled(*neighbor):
                    continue
                seen.add(neighbor)
                queue.append(neighbor)
        if len(seen) != filled:
            issues.append(
                f"Board is not one connected cluster ({len(seen)} of {filled} cells reachable)"
            )

    def _check_short_runs(self, runs: List[BoardWord], issues: List[str]) -> None:
        # Single cells are crossings of perpendicular words, not runs.
        short = [run for run in runs if 2 <= run.length < self.config.min_word_len]
        if short:
            listed = ", ".join(f"'{run.text}' at ({run.row},{run.col})" for run in short)
            issues.append(
                f"Found {len(short)} run(s) shorter than {self.config.min_word_len} letters: {listed}"
            )

    def _check_intersections(self, words: List[BoardWord], issues: List[str]) -> None:
        across = [word for word in words if word.direction is Direction.ACROSS]
        down = [word for word in words if word.direction is Direction.DOWN]
        limit = self.config.max_intersections_per_pair
        for horizontal in across:
            cells = set(horizontal.cells)
            for vertical in down:
                shared = sum(1 for cell in vertical.cells if cell in cells)
                if shared > limit:
                    issues.append(
                        f"'{horizontal.text}' and '{vertical.text}' intersect {shared} times (max {limit})"
                    )

    def _check_dictionary(self, words: List[BoardWord], issues: List[str]) -> List[BoardWord]:
        if not self.dictionary:
            return list(words)
        valid: List[BoardWord] = []
        invalid: List[BoardWord] = []
        for word in words:
            if BOARD_WILDCARD in word.text or word.text in self.dictionary:
                valid.append(word)
            else:
                invalid.append(word)
        if invalid:
            listed = ", ".join(f"'{word.text}'" for word in invalid)
            issues.append(f"Invalid words found: {listed}")
        return valid

    def _is_scoreable(self, text: str) -> bool:
        if len(text) < MIN_SCORED_LENGTH or BOARD_WILDCARD in text:
            return False
        if self.scoreable is not None:
            return text in self.scoreable
        return True

    # ------------------------------------------------------------------
    # Word extraction
    # ------------------------------------------------------------------
    @staticmethod
    def _extract_runs(board: Board) -> List[BoardWord]:
        runs: List[BoardWord] = []
        for r in range(board.rows):
            runs.extend(_runs_in_line(board, [(r, c) for c in range(board.cols)], Direction.ACROSS))
        for c in range(board.cols):
            runs.extend(_runs_in_line(board, [(r, c) for r in range(board.rows)], Direction.DOWN))
        return runs


def _runs_in_line(board: Board, line: List[Coord], direction: Direction) -> List[BoardWord]:
    runs: List[BoardWord] = []
    letters: List[str] = []
    start: Optional[Coord] = None
    for coord in line + [None]:  # sentinel closes a trailing run
        cell = board.cell(*coord) if coord is not None else None
        if cell is not None:
            if start is None:
                start = coord
            letters.append(cell.letter)
            continue
        if start is not None:
            runs.append(
                BoardWord(
                    text="".join(letters),
                    direction=direction,
                    row=start[0],
                    col=start[1],
                    length=len(letters),
                )
            )
        start = None
        letters = []
    return runs


def _drop_nested_runs(words: List[BoardWord]) -> List[BoardWord]:
    """Drop runs strictly inside a longer run of the same line and direction."""

    def line_key(word: BoardWord) -> Tuple[Direction, int]:
        return (word.direction, word.row if word.direction is Direction.ACROSS else word.col)

    def span(word: BoardWord) -> Tuple[int, int]:
        offset = word.col if word.direction is Direction.ACROSS else word.row
        return offset, offset + word.length

    kept: List[BoardWord] = []
    seen: Set[Tuple[Direction, int, int, int]] = set()
    for word in words:
        start, end = span(word)
        nested = any(
            other is not word
            and line_key(other) == line_key(word)
            and span(other)[0] <= start
            and end <= span(other)[1]
            and other.length > word.length
            for other in words
        )
        key = line_key(word) + (start, end)
        if nested or key in seen:
            continue
        seen.add(key)
        kept.append(word)
    return kept


def validate_and_score(
    board: Board,
    min_word_len: int = 3,
    require_single_cluster: bool = True,
    max_intersections_per_pair: int = 1,
    dictionary: Optional[AbstractSet[str]] = None,
    scoreable: Optional[AbstractSet[str]] = None,
) -> ValidationResult:
    """Validate ``board`` and compute its score; rule breaches land in ``issues``."""

    config = ValidatorConfig(
        min_word_len=min_word_len,
        require_single_cluster=require_single_cluster,
        max_intersections_per_pair=max_intersections_per_pair,
    )
    return BoardValidator(config, dictionary=dictionary, scoreable=scoreable).validate(board)
