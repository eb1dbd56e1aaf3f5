"""Fill session tying the board, the fill index and the segment inventory together."""

from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional, Union

from ..core.exceptions import InvariantViolation
from ..core.models import Candidate, SegmentChain, Slot, ValidationResult
from ..data.lexicon import Lexicon
from ..data.segments import SegmentCatalog
from ..utils.logger import get_logger
from .board import Board
from .candidates import CandidateScorer, ScoringConfig
from .chains import ChainFinderConfig, SegmentChainFinder
from .fill_index import FillIndex
from .inventory import Inventory
from .validator import BoardValidator, ValidatorConfig

LOGGER = get_logger(__name__)


class FillSession:
    """Single-owner state for one board being filled.

    The inventory is seeded once and mutated only by :meth:`commit_chain`.
    Candidate and chain queries never touch the board.
    """

    def __init__(
        self,
        index: FillIndex,
        board: Board,
        inventory: Optional[Inventory] = None,
        scoring: Optional[ScoringConfig] = None,
        chains: Optional[ChainFinderConfig] = None,
        validation: Optional[ValidatorConfig] = None,
        dictionary: Optional[Iterable[str]] = None,
        scoreable: Optional[Iterable[str]] = None,
    ) -> None:
        self.index = index
        self.board = board
        self.inventory = inventory if inventory is not None else Inventory.from_catalog(index.catalog)
        self.scorer = CandidateScorer(index, scoring)
        self.chain_finder = SegmentChainFinder(chains)
        self.validator = BoardValidator(validation, dictionary=dictionary, scoreable=scoreable)
        self.committed: Dict[str, SegmentChain] = {}
        self._commit_lock = threading.Lock()

    @classmethod
    def create(
        cls,
        lexicon: Lexicon,
        catalog: SegmentCatalog,
        rows: int,
        cols: int,
        **kwargs,
    ) -> "FillSession":
        """Build the index, an empty board and a seeded inventory in one go."""

        return cls(FillIndex(lexicon, catalog), Board(rows, cols), **kwargs)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def slots(self, min_length: int = 3) -> List[Slot]:
        return self.board.compute_slots(min_length)

    def slot(self, slot_id: str, min_length: int = 3) -> Slot:
        for slot in self.slots(min_length):
            if slot.id == slot_id:
                return slot
        raise KeyError(slot_id)

    def candidates(self, slot: Slot) -> List[Candidate]:
        current = self.board.refresh_patterns([slot])[0]
        return self.scorer.get_candidates(current, self.board)

    def chains(self, target: Union[Slot, str], k: Optional[int] = None) -> List[SegmentChain]:
        pattern = self.board.slot_pattern(target) if isinstance(target, Slot) else target
        return self.chain_finder.find_top_chains(pattern, self.index.catalog, self.inventory, k)

    def validate(self) -> ValidationResult:
        return self.validator.validate(self.board)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def commit_chain(self, chain: SegmentChain, slot: Slot) -> Dict[str, int]:
        """Write ``chain`` into ``slot`` and spend one use of each of its segments.

        The board write is all-or-nothing; the inventory is only touched
        once the letters are on the board. Returns the updated counts.
        """

        if len(chain.letters) != slot.length:
            raise InvariantViolation(
                f"Chain '{chain.letters}' has {len(chain.letters)} letters for slot {slot.id} of length {slot.length}"
            )
        if "".join(chain.segments).upper() != chain.letters.upper():
            raise InvariantViolation(f"Chain segments {chain.segments} do not spell '{chain.letters}'")

        with self._commit_lock:
            self.board.write_letters(slot.cells, chain.letters, owner=f"chain:{slot.id}")
            remaining = self.inventory.consume(chain.segments)
            self.committed[slot.id] = chain
        LOGGER.info(
            "Committed '%s' to %s (%s)",
            chain.letters,
            slot.id,
            ", ".join(f"{text}={count}" for text, count in remaining.items()),
        )
        return remaining
