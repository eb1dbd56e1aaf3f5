"""Joint slot assignment with the OR-Tools CP-SAT solver."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from ortools.sat.python import cp_model

from ..core.models import Candidate, Slot
from ..utils.logger import get_logger
from .board import Board
from .candidates import CandidateScorer

LOGGER = get_logger(__name__)

SCORE_SCALE = 1000


def solve_slots(
    board: Board,
    slots: Sequence[Slot],
    scorer: CandidateScorer,
    timeout: float = 10.0,
    max_candidates: int = 50,
) -> Optional[List[Tuple[Slot, Candidate]]]:
    """Pick one candidate per slot so crossings agree and no word repeats.

    Args:
        board: Board whose current letters constrain each slot. Not mutated.
        slots: Slots to fill together.
        scorer: Candidate scorer supplying the ranked pools.
        timeout: Solver time limit in seconds.
        max_candidates: Pool size per slot, best first.

    Returns:
        ``(slot, candidate)`` pairs in slot order maximizing the summed
        candidate score, or ``None`` when no consistent assignment exists.
    """
    if not slots:
        return []

    model = cp_model.CpModel()

    # ------------------------------------------------------------------
    # Step 1: Candidate pools and selection variables
    # ------------------------------------------------------------------
    current = board.refresh_patterns(slots)
    pools: Dict[str, List[Candidate]] = {}
    choices: Dict[str, List[cp_model.IntVar]] = {}
    for slot in current:
        pool = scorer.get_candidates(slot, board)[:max_candidates]
        if not pool:
            LOGGER.debug("No candidates for slot %s '%s'", slot.id, slot.pattern)
            return None
        pools[slot.id] = pool
        choices[slot.id] = [model.new_bool_var(f"x_{slot.id}_{i}") for i in range(len(pool))]
        model.add_exactly_one(choices[slot.id])

    # ------------------------------------------------------------------
    # Step 2: Crossing cells must agree
    # ------------------------------------------------------------------
    cell_vars: Dict[Tuple[int, int], cp_model.IntVar] = {}
    for slot in current:
        for index, (r, c) in enumerate(slot.cells):
            var = cell_vars.get((r, c))
            if var is None:
                var = model.new_int_var(0, 25, f"L_{r}_{c}")
                cell_vars[(r, c)] = var
            for choice, candidate in zip(choices[slot.id], pools[slot.id]):
                model.add(var == ord(candidate.word[index]) - ord("A")).only_enforce_if(choice)

    # ------------------------------------------------------------------
    # Step 3: Uniqueness constraints
    # ------------------------------------------------------------------
    by_word: Dict[str, List[cp_model.IntVar]] = defaultdict(list)
    for slot in current:
        for choice, candidate in zip(choices[slot.id], pools[slot.id]):
            by_word[candidate.word].append(choice)
    for word, selections in by_word.items():
        if len(selections) > 1:
            model.add_at_most_one(selections)

    model.maximize(
        sum(
            int(round(candidate.score * SCORE_SCALE)) * choice
            for slot in current
            for choice, candidate in zip(choices[slot.id], pools[slot.id])
        )
    )

    # ------------------------------------------------------------------
    # Step 4: Solve
    # ------------------------------------------------------------------
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = timeout
    solver.parameters.num_workers = 4

    LOGGER.info(
        "CP-SAT: %d slots, %d candidates, %d cell vars, solving (timeout=%0.1fs)...",
        len(current),
        sum(len(pool) for pool in pools.values()),
        len(cell_vars),
        timeout,
    )
    status = solver.solve(model)
    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        LOGGER.warning("CP-SAT: no solution found (status=%s)", solver.status_name(status))
        return None
    LOGGER.info("CP-SAT: solution found in %.2fs", solver.wall_time)

    # ------------------------------------------------------------------
    # Step 5: Extract solution
    # ------------------------------------------------------------------
    result: List[Tuple[Slot, Candidate]] = []
    for original, slot in zip(slots, current):
        for choice, candidate in zip(choices[slot.id], pools[slot.id]):
            if solver.boolean_value(choice):
                result.append((original, candidate))
                break
    return result
