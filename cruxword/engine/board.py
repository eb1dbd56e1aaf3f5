"""Board representation, piece placement and slot extraction."""

from __future__ import annotations

import copy
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..core.constants import BOARD_WILDCARD, PATTERN_WILDCARD, Bounds, Direction
from ..core.exceptions import InvariantViolation, PlacementError
from ..core.models import BoardCell, Crossing, PlacedPiece, Slot
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

Coord = Tuple[int, int]


def _normalize_letter(letter: str) -> str:
    if len(letter) != 1 or not (letter.isalpha() or letter == BOARD_WILDCARD):
        raise PlacementError(f"Invalid letter '{letter}'")
    return letter.upper()


class Board:
    """Grid of optional cells plus the registry of pieces that wrote them."""

    def __init__(self, rows: int, cols: int) -> None:
        if rows <= 0 or cols <= 0:
            raise InvariantViolation(f"Board dimensions must be positive, got {rows}x{cols}")
        self.bounds = Bounds(rows=rows, cols=cols)
        self.cells: List[List[Optional[BoardCell]]] = [[None] * cols for _ in range(rows)]
        self.pieces: Dict[str, PlacedPiece] = {}
        self.blocked: Set[Coord] = set()

    @classmethod
    def from_rows(cls, lines: Sequence[str], blocked_marker: str = "#") -> "Board":
        """Build a board from text rows: letters fill, ``.``/space stay empty, ``#`` blocks."""

        if not lines:
            raise InvariantViolation("Board needs at least one row")
        width = max(len(line) for line in lines)
        board = cls(len(lines), width)
        for r, line in enumerate(lines):
            for c, char in enumerate(line):
                if char == blocked_marker:
                    board.blocked.add((r, c))
                elif char.isalpha() or char == BOARD_WILDCARD:
                    board.cells[r][c] = BoardCell(letter=char.upper())
        return board

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def rows(self) -> int:
        return self.bounds.rows

    @property
    def cols(self) -> int:
        return self.bounds.cols

    def cell(self, row: int, col: int) -> Optional[BoardCell]:
        return self.cells[row][col]

    def letter_at(self, row: int, col: int) -> Optional[str]:
        if not self.bounds.contains(row, col):
            return None
        cell = self.cells[row][col]
        return cell.letter if cell else None

    def is_filled(self, row: int, col: int) -> bool:
        return self.bounds.contains(row, col) and self.cells[row][col] is not None

    def is_blocked(self, row: int, col: int) -> bool:
        return (row, col) in self.blocked

    @property
    def filled_count(self) -> int:
        return sum(1 for row in self.cells for cell in row if cell is not None)

    def filled_coords(self) -> List[Coord]:
        return [
            (r, c)
            for r in range(self.rows)
            for c in range(self.cols)
            if self.cells[r][c] is not None
        ]

    def has_ownership(self) -> bool:
        return any(cell is not None and cell.owners for row in self.cells for cell in row)

    # ------------------------------------------------------------------
    # Piece placement
    # ------------------------------------------------------------------
    def can_place(self, text: str, direction: Direction, row: int, col: int) -> Tuple[bool, Optional[str]]:
        """Check bounds and letters; overlap is allowed only on identical letters."""

        if not text:
            return False, "Empty piece"
        dr, dc = direction.step
        end_row = row + dr * (len(text) - 1)
        end_col = col + dc * (len(text) - 1)
        if not (self.bounds.contains(row, col) and self.bounds.contains(end_row, end_col)):
            return False, "Out of bounds"
        for index, char in enumerate(text.upper()):
            r, c = row + dr * index, col + dc * index
            if (r, c) in self.blocked:
                return False, "Blocked cell"
            existing = self.cells[r][c]
            if existing is not None and existing.letter != char:
                return False, "Letter mismatch"
        return True, None

    def place_piece(self, piece_id: str, text: str, direction: Direction, row: int, col: int) -> PlacedPiece:
        if piece_id in self.pieces:
            raise PlacementError(f"Piece {piece_id} is already on the board")
        text = text.upper()
        for char in text:
            _normalize_letter(char)
        ok, reason = self.can_place(text, direction, row, col)
        if not ok:
            raise PlacementError(f"Cannot place {piece_id} '{text}' at ({row},{col}): {reason}")

        piece = PlacedPiece(piece_id=piece_id, text=text, direction=direction, row=row, col=col)
        for (r, c), char in zip(piece.cells, text):
            existing = self.cells[r][c]
            if existing is None:
                self.cells[r][c] = BoardCell(letter=char, owners={piece_id})
            else:
                existing.owners.add(piece_id)
        self.pieces[piece_id] = piece
        LOGGER.debug("Placed %s '%s' %s at (%s,%s)", piece_id, text, direction.value, row, col)
        return piece

    def remove_piece(self, piece_id: str) -> bool:
        """Drop a piece; cells still owned by an overlapping piece keep their letter."""

        piece = self.pieces.pop(piece_id, None)
        if piece is None:
            return False
        for r, c in piece.cells:
            cell = self.cells[r][c]
            if cell is None:
                continue
            cell.owners.discard(piece_id)
            if not cell.owners:
                self.cells[r][c] = None
        return True

    def move_piece(self, piece_id: str, row: int, col: int, direction: Optional[Direction] = None) -> bool:
        """Move (and optionally rotate) a piece; the board is untouched on failure."""

        piece = self.pieces.get(piece_id)
        if piece is None:
            return False
        snapshot = self.copy()
        self.remove_piece(piece_id)
        target = direction or piece.direction
        ok, reason = self.can_place(piece.text, target, row, col)
        if not ok:
            LOGGER.debug("Move of %s to (%s,%s) rejected: %s", piece_id, row, col, reason)
            self._restore(snapshot)
            return False
        self.place_piece(piece_id, piece.text, target, row, col)
        return True

    def write_letters(self, cells: Sequence[Coord], letters: str, owner: Optional[str] = None) -> None:
        """Write ``letters`` into ``cells``; all-or-nothing on conflicts."""

        if len(cells) != len(letters):
            raise InvariantViolation(f"{len(letters)} letters for {len(cells)} cells")
        normalized = [_normalize_letter(char) for char in letters]
        for (r, c), char in zip(cells, normalized):
            if not self.bounds.contains(r, c):
                raise PlacementError(f"Cell ({r},{c}) outside board")
            if (r, c) in self.blocked:
                raise PlacementError(f"Cell ({r},{c}) is blocked")
            existing = self.cells[r][c]
            if existing is not None and existing.letter != char:
                raise PlacementError(f"Letter conflict at ({r},{c}): '{existing.letter}' vs '{char}'")
        for (r, c), char in zip(cells, normalized):
            existing = self.cells[r][c]
            if existing is None:
                existing = BoardCell(letter=char)
                self.cells[r][c] = existing
            if owner:
                existing.owners.add(owner)

    def set_letter(self, row: int, col: int, letter: Optional[str]) -> None:
        """Free-hand edit of one cell; ``None`` or ``""`` clears it."""

        if not self.bounds.contains(row, col):
            raise PlacementError(f"Cell ({row},{col}) outside board")
        if not letter:
            self.cells[row][col] = None
            return
        self.blocked.discard((row, col))
        self.cells[row][col] = BoardCell(letter=_normalize_letter(letter))

    def toggle_block(self, row: int, col: int) -> bool:
        """Flip a cell between open and blocked; blocking clears its letter."""

        if not self.bounds.contains(row, col):
            raise PlacementError(f"Cell ({row},{col}) outside board")
        if (row, col) in self.blocked:
            self.blocked.discard((row, col))
            return False
        self.blocked.add((row, col))
        self.cells[row][col] = None
        return True

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------
    def compute_slots(self, min_length: int = 3) -> List[Slot]:
        """Derive across then down slots over open cells, with crossings and patterns."""

        runs: List[Tuple[Direction, List[Coord]]] = []
        for r in range(self.rows):
            runs.extend((Direction.ACROSS, cells) for cells in self._open_runs([(r, c) for c in range(self.cols)]))
        for c in range(self.cols):
            runs.extend((Direction.DOWN, cells) for cells in self._open_runs([(r, c) for r in range(self.rows)]))

        slots: List[Slot] = []
        owner: Dict[Tuple[Direction, Coord], Tuple[str, int]] = {}
        for direction, cells in runs:
            if len(cells) < min_length:
                continue
            start_row, start_col = cells[0]
            slot = Slot(
                id=f"r{start_row}c{start_col}-{direction.short}",
                direction=direction,
                length=len(cells),
                cells=cells,
                pattern=self._pattern_for(cells),
            )
            for index, coord in enumerate(cells):
                owner[(direction, coord)] = (slot.id, index)
            slots.append(slot)

        for slot in slots:
            other = Direction.DOWN if slot.direction is Direction.ACROSS else Direction.ACROSS
            for index, coord in enumerate(slot.cells):
                crossing = owner.get((other, coord))
                if crossing is not None:
                    slot.crossings.append(Crossing(index=index, other_slot_id=crossing[0]))
        return slots

    def _open_runs(self, line: List[Coord]) -> List[List[Coord]]:
        runs: List[List[Coord]] = []
        current: List[Coord] = []
        for coord in line:
            if coord in self.blocked:
                if current:
                    runs.append(current)
                current = []
            else:
                current.append(coord)
        if current:
            runs.append(current)
        return runs

    def _pattern_for(self, cells: Sequence[Coord]) -> str:
        chars = []
        for r, c in cells:
            cell = self.cells[r][c]
            if cell is None or cell.letter == BOARD_WILDCARD:
                chars.append(PATTERN_WILDCARD)
            else:
                chars.append(cell.letter.lower())
        return "".join(chars)

    def slot_pattern(self, slot: Slot) -> str:
        return self._pattern_for(slot.cells)

    def refresh_patterns(self, slots: Iterable[Slot]) -> List[Slot]:
        """Return copies of ``slots`` with patterns read from the current letters."""

        refreshed = []
        for slot in slots:
            updated = copy.copy(slot)
            updated.pattern = self.slot_pattern(slot)
            refreshed.append(updated)
        return refreshed

    @staticmethod
    def number_slots(slots: Iterable[Slot]) -> Dict[Coord, int]:
        """Classic clue numbering: one number per distinct start cell, row-major."""

        numbers: Dict[Coord, int] = {}
        for start in sorted({slot.start for slot in slots}):
            numbers[start] = len(numbers) + 1
        return numbers

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    def copy(self) -> "Board":
        clone = Board(self.rows, self.cols)
        clone.cells = copy.deepcopy(self.cells)
        clone.pieces = dict(self.pieces)
        clone.blocked = set(self.blocked)
        return clone

    def _restore(self, snapshot: "Board") -> None:
        self.cells = snapshot.cells
        self.pieces = snapshot.pieces
        self.blocked = snapshot.blocked

    def to_jsonable(self) -> Dict[str, object]:
        return {
            "rows": self.rows,
            "cols": self.cols,
            "cells": [
                [
                    None if cell is None else {"letter": cell.letter, "owners": sorted(cell.owners)}
                    for cell in row
                ]
                for row in self.cells
            ],
            "blocked": sorted([list(coord) for coord in self.blocked]),
            "pieces": {
                piece_id: {
                    "text": piece.text,
                    "direction": piece.direction.value,
                    "row": piece.row,
                    "col": piece.col,
                }
                for piece_id, piece in sorted(self.pieces.items())
            },
        }
