"""Convenience entrypoint with a tiny built-in lexicon for debugging.

Usage in a Python console (Jupyter-style)::

    import debug_main
    state = debug_main.prepare_state(rows=5, cols=5)
    debug_main.step_slots(state)
    debug_main.step_candidates(state, "r0c0-A")
    debug_main.step_chains(state, "r0c0-A")
    debug_main.step_commit(state, "r0c0-A")
    debug_main.step_validate(state)

Call :func:`run_debug` for a one-liner, or execute the functions above one by
one to inspect intermediate state. Real data is handed in as row tables via
``lexicon_rows``/``segment_rows`` overrides.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from cruxword.core.exceptions import CruxwordError
from cruxword.core.models import Candidate, SegmentChain, ValidationResult
from cruxword.data.lexicon import Lexicon
from cruxword.data.segments import SegmentCatalog
from cruxword.engine.candidates import ScoringConfig
from cruxword.engine.chains import ChainFinderConfig
from cruxword.engine.session import FillSession
from cruxword.engine.solver import solve_slots
from cruxword.utils.logger import configure_logging
from cruxword.utils.pretty import (
    format_candidates,
    format_chains,
    pretty_print_board,
    print_report,
)

SAMPLE_LEXICON_ROWS: List[Dict[str, Any]] = [
    {"word": "cave", "zipf": 4.1, "is_clueable": True},
    {"word": "code", "zipf": 5.0, "is_clueable": True},
    {"word": "core", "zipf": 4.8, "is_clueable": True},
    {"word": "cube", "zipf": 4.2, "is_clueable": True},
    {"word": "abalone", "zipf": 2.9, "is_clueable": True},
    {"word": "stone", "zipf": 4.9, "is_clueable": True},
    {"word": "tone", "zipf": 4.7, "is_clueable": True},
    {"word": "note", "zipf": 5.1, "is_clueable": True},
]

SAMPLE_SEGMENT_ROWS: List[Dict[str, Any]] = [
    {"text": "ca", "combo_count": 120, "pos_start": True, "game_weight": 0.4},
    {"text": "ve", "combo_count": 80, "pos_end": True, "game_weight": 0.3},
    {"text": "co", "combo_count": 300, "pos_start": True, "game_weight": 0.5},
    {"text": "de", "combo_count": 200, "pos_end": True, "game_weight": 0.4},
    {"text": "re", "combo_count": 400, "morph_suffix": True, "game_weight": 0.5},
    {"text": "cu", "combo_count": 40, "game_weight": 0.2},
    {"text": "be", "combo_count": 90, "pos_end": True, "game_weight": 0.3},
    {"text": "ab", "combo_count": 60, "pos_start": True, "game_weight": 0.4},
    {"text": "alo", "combo_count": 12, "game_weight": 0.3},
    {"text": "ne", "combo_count": 150, "pos_end": True, "game_weight": 0.3},
    {"text": "st", "combo_count": 500, "pos_start": True, "game_weight": 0.4},
    {"text": "one", "combo_count": 250, "pos_end": True, "game_weight": 0.5},
    {"text": "to", "combo_count": 320, "game_weight": 0.4},
    {"text": "no", "combo_count": 280, "pos_start": True, "game_weight": 0.4},
    {"text": "te", "combo_count": 110, "pos_end": True, "game_weight": 0.3},
]

DEFAULT_DEBUG_ARGS: Dict[str, Any] = {
    "rows": 5,
    "cols": 5,
    "lexicon_rows": SAMPLE_LEXICON_ROWS,
    "segment_rows": SAMPLE_SEGMENT_ROWS,
    "top_n": 10,
    "beam_width": 100,
    "solver_timeout": 5.0,
}

LOGGER = logging.getLogger(__name__)


def prepare_state(**overrides: Any) -> Dict[str, Any]:
    """Return a mutable state dictionary used by the step helpers."""

    args = {**DEFAULT_DEBUG_ARGS, **overrides}
    configure_logging()
    lexicon = Lexicon.from_rows(args["lexicon_rows"])
    catalog = SegmentCatalog.from_rows(args["segment_rows"])
    session = FillSession.create(
        lexicon,
        catalog,
        int(args["rows"]),
        int(args["cols"]),
        scoring=ScoringConfig(top_n=int(args["top_n"])),
        chains=ChainFinderConfig(beam_width=int(args["beam_width"]), top_k=int(args["top_n"])),
        dictionary=lexicon.playable_set(),
        scoreable=lexicon.clueable_set(),
    )
    return {
        "args": args,
        "catalog": catalog,
        "session": session,
        "slots": [],
        "candidates": {},
        "chains": {},
        "validation": None,
    }


def load_catalog_dataframe(state: Dict[str, Any], *, limit: Optional[int] = 10):
    """Return the segment catalog as a pandas DataFrame.

    ``limit`` controls how many rows are printed (``None`` disables the preview).
    """

    try:
        import pandas as pd
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "Viewing the segment catalog requires pandas. Install it via 'pip install cruxword[debug]'."
        ) from exc

    catalog: SegmentCatalog = state["catalog"]
    df = pd.DataFrame(
        [
            {
                "text": segment.text,
                "len": segment.length,
                "combo_count": segment.combo_count,
                "start_combo_count": segment.start_combo_count,
                "game_weight": segment.game_weight,
                "uses_left": state["session"].inventory.remaining(segment.text),
            }
            for segment in catalog
        ]
    )
    if limit is not None:
        print(df.head(limit))
    return df


def step_slots(state: Dict[str, Any], min_length: int = 3):
    state["slots"] = state["session"].slots(min_length)
    for slot in state["slots"]:
        LOGGER.info("Slot %s len=%d pattern='%s'", slot.id, slot.length, slot.pattern)
    return state["slots"]


def step_candidates(state: Dict[str, Any], slot_id: str) -> List[Candidate]:
    session: FillSession = state["session"]
    candidates = session.candidates(session.slot(slot_id))
    state["candidates"][slot_id] = candidates
    print(format_candidates(candidates))
    return candidates


def step_chains(state: Dict[str, Any], slot_id: str) -> List[SegmentChain]:
    session: FillSession = state["session"]
    chains = session.chains(session.slot(slot_id))
    state["chains"][slot_id] = chains
    print(format_chains(chains))
    return chains


def step_commit(state: Dict[str, Any], slot_id: str, rank: int = 0) -> Dict[str, int]:
    """Commit the ``rank``-th usable chain for ``slot_id``."""

    session: FillSession = state["session"]
    chains = state["chains"].get(slot_id) or step_chains(state, slot_id)
    usable = [chain for chain in chains if chain.usable]
    if rank >= len(usable):
        raise CruxwordError(f"No usable chain #{rank} for slot {slot_id}")
    remaining = session.commit_chain(usable[rank], session.slot(slot_id))
    state["chains"].pop(slot_id, None)
    pretty_print_board(session.board)
    return remaining


def step_solve(state: Dict[str, Any]):
    session: FillSession = state["session"]
    slots = state["slots"] or step_slots(state)
    assignment = solve_slots(
        session.board,
        slots,
        session.scorer,
        timeout=float(state["args"]["solver_timeout"]),
    )
    if assignment is None:
        raise CruxwordError("No consistent assignment for the open slots")
    for slot, candidate in assignment:
        session.board.write_letters(slot.cells, candidate.word, owner=f"word:{slot.id}")
    pretty_print_board(session.board)
    return assignment


def step_validate(state: Dict[str, Any]) -> ValidationResult:
    session: FillSession = state["session"]
    state["validation"] = session.validate()
    print_report(session.board, state["validation"])
    return state["validation"]


def run_debug(**overrides: Any) -> ValidationResult:
    """Fill every slot jointly and report the validated board."""

    state = prepare_state(**overrides)
    step_slots(state)
    step_solve(state)
    return step_validate(state)


def main() -> None:  # pragma: no cover - manual helper
    result = run_debug(rows=4, cols=4)
    print(f"Validation: {result.issues or 'ok'} (score {result.score})")


if __name__ == "__main__":
    main()
