"""Pretty-print helpers for boards, candidates, chains and reports."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from ..core.models import Candidate, SegmentChain, ValidationResult
    from ..engine.board import Board


def cell_symbol(board: Board, row: int, col: int) -> str:
    if board.is_blocked(row, col):
        return "#"
    return board.letter_at(row, col) or "."


def format_board(board: Board) -> str:
    width = board.cols
    header_cells = [f"{c:>2}" for c in range(width)]
    lines = ["    " + " ".join(header_cells)]
    lines.append("    " + "-" * (3 * width - 1))
    for r in range(board.rows):
        row_render = " ".join(f"{cell_symbol(board, r, c):>2}" for c in range(width))
        lines.append(f"{r:>2} | {row_render}")
    return "\n".join(lines)


def format_candidates(candidates: Iterable[Candidate], limit: Optional[int] = None) -> str:
    lines = []
    for rank, candidate in enumerate(candidates, start=1):
        if limit is not None and rank > limit:
            break
        lines.append(
            f"{rank:>3}. {candidate.word:<12} {candidate.score:6.3f}  "
            f"seg={candidate.segmentation_score:.3f} zipf={candidate.zipf:.2f} "
            f"cross={candidate.crossing_bonus:.2f}  {'|'.join(candidate.pieces)}"
        )
    return "\n".join(lines) if lines else "  (no candidates)"


def format_chains(chains: Iterable[SegmentChain], limit: Optional[int] = None) -> str:
    lines = []
    for rank, chain in enumerate(chains, start=1):
        if limit is not None and rank > limit:
            break
        remaining = ",".join(str(count) for count in chain.remaining)
        marker = " " if chain.usable else "x"
        lines.append(
            f"{rank:>3}.{marker} {chain.letters:<12} {chain.score:6.3f}  "
            f"{'+'.join(chain.segments)}  left=[{remaining}]"
        )
    return "\n".join(lines) if lines else "  (no chains)"


def format_report(result: ValidationResult) -> str:
    lines = [
        f"  Status:        {'OK' if result.ok else 'BLOCKED'}",
        f"  Filled:        {result.filled_cells} ({result.density * 100:.0f}%)",
        f"  Words scored:  {result.word_count}",
        f"  Score:         {result.score}",
    ]
    if result.words:
        listed = ", ".join(f"{word.text}({word.direction.short})" for word in result.words)
        lines.append(f"  Words:         {listed}")
    for issue in result.issues:
        lines.append(f"  ! {issue}")
    return "\n".join(lines)


def pretty_print_board(board: Board, *, label: Optional[str] = None, stream=None) -> None:
    """Print the board in a human-friendly format."""

    stream = stream or sys.stdout
    if label:
        print(label, file=stream)
    print(format_board(board), file=stream)


def print_report(board: Board, result: ValidationResult, *, stream=None) -> None:
    """Print board plus its validation report."""

    stream = stream or sys.stdout
    print(format_board(board), file=stream)
    print(file=stream)
    print("--- Validation ---", file=stream)
    print(format_report(result), file=stream)
