"""Ranked word candidates for a slot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..core.constants import BOARD_WILDCARD, MISSING_ZIPF_NORM, PATTERN_WILDCARD
from ..core.exceptions import InvariantViolation
from ..core.models import Candidate, Slot, WordEntry
from ..data.normalization import clean_pattern, matches_pattern
from ..utils.logger import get_logger
from .board import Board
from .fill_index import FillIndex

LOGGER = get_logger(__name__)


@dataclass
class ScoringConfig:
    """Weights and filters for word candidates.

    Banned lexicon entries are dropped unless ``exclude_banned`` is turned
    off; the bare ranking (match, board check, segment, score) keeps them.
    """

    zipf_weight: float = 0.10
    crossing_weight: float = 0.10
    top_n: int = 50
    missing_zipf_norm: float = MISSING_ZIPF_NORM
    exclude_banned: bool = True
    clueable_only: bool = False
    allow_proper_nouns: bool = True


def normalize_zipf(
    zipf: Optional[float],
    min_zipf: float,
    max_zipf: float,
    missing: float = MISSING_ZIPF_NORM,
) -> float:
    """Map zipf onto [0, 1] over the corpus range; absent zipf gets ``missing``."""

    if not zipf:
        return missing
    span = max_zipf - min_zipf
    if span <= 0:
        return 1.0 if zipf >= max_zipf else 0.0
    return max(0.0, min(1.0, (zipf - min_zipf) / span))


class CandidateScorer:
    """Combines index lookups, segmentation and crossing support into a ranking."""

    def __init__(self, index: FillIndex, config: Optional[ScoringConfig] = None) -> None:
        self.index = index
        self.config = config or ScoringConfig()

    def get_candidates(self, slot: Slot, board: Optional[Board] = None) -> List[Candidate]:
        pattern = clean_pattern(slot.pattern)
        if len(pattern) != slot.length:
            raise InvariantViolation(
                f"Slot {slot.id}: pattern '{slot.pattern}' does not match length {slot.length}"
            )

        scored: List[Candidate] = []
        rejected_board = rejected_untileable = rejected_filtered = 0
        for word in self.index.positions.find_candidates(pattern):
            if not matches_pattern(word, pattern):
                continue
            entry = self.index.lexicon.get(word)
            if not self._passes_filters(entry):
                rejected_filtered += 1
                continue
            matched = self._crossing_matches(word, slot, pattern, board)
            if matched is None:
                rejected_board += 1
                continue
            segmentation = self.index.segment(word)
            if segmentation is None:
                rejected_untileable += 1
                continue

            zipf = entry.zipf if entry and entry.zipf else 0.0
            norm_zipf = normalize_zipf(
                zipf,
                self.index.min_zipf,
                self.index.max_zipf,
                self.config.missing_zipf_norm,
            )
            crossing_bonus = matched / slot.length
            score = (
                segmentation.score
                + self.config.zipf_weight * norm_zipf
                + self.config.crossing_weight * crossing_bonus
            )
            scored.append(
                Candidate(
                    word=word.upper(),
                    score=score,
                    segmentation_score=segmentation.score,
                    zipf=zipf,
                    crossing_bonus=crossing_bonus,
                    pieces=list(segmentation.pieces),
                    is_clueable=bool(entry and entry.is_clueable),
                    theme_tags=entry.theme_tags if entry else "",
                )
            )

        scored.sort(key=lambda candidate: (-candidate.score, candidate.word))
        LOGGER.debug(
            "Slot %s '%s': %d scored, %d board conflicts, %d untileable, %d filtered",
            slot.id,
            pattern,
            len(scored),
            rejected_board,
            rejected_untileable,
            rejected_filtered,
        )
        return scored[: self.config.top_n]

    def _passes_filters(self, entry: Optional[WordEntry]) -> bool:
        if entry is None:
            return True
        if self.config.exclude_banned and entry.banned:
            return False
        if self.config.clueable_only and not entry.is_clueable:
            return False
        if not self.config.allow_proper_nouns and entry.is_proper_noun():
            return False
        return True

    @staticmethod
    def _crossing_matches(word: str, slot: Slot, pattern: str, board: Optional[Board]) -> Optional[int]:
        """Count board letters the word agrees with; ``None`` on any conflict."""

        if board is None:
            return sum(1 for char in pattern if char != PATTERN_WILDCARD)
        matched = 0
        for index, (row, col) in enumerate(slot.cells):
            letter = board.letter_at(row, col)
            if not letter or letter == BOARD_WILDCARD:
                continue
            if letter.lower() != word[index]:
                return None
            matched += 1
        return matched


def get_candidates(
    slot: Slot,
    index: FillIndex,
    board: Optional[Board] = None,
    config: Optional[ScoringConfig] = None,
) -> List[Candidate]:
    """Return up to ``top_n`` candidates for ``slot``, best first."""

    return CandidateScorer(index, config).get_candidates(slot, board)
