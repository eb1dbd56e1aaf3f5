"""Assemble slot letters directly from catalog segments.

The search is a dynamic program over ``(position, segments used)`` states,
filled from the end of the pattern backwards. Each state keeps only its
``beam_width`` best partial chains, so results are approximate: a chain
pruned from a late state is never reconsidered. Two runs over the same
inputs return the same chains; a different beam width may not.
"""

from __future__ import annotations

import heapq
import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..core.constants import (
    EDGE_BONUS,
    JOIN_BONUS,
    JOIN_PENALTY,
    PATTERN_WILDCARD,
    PRODUCTIVITY_WEIGHT,
    SEGMENT_LENGTHS,
)
from ..core.exceptions import InvariantViolation
from ..core.models import Segment, SegmentChain
from ..data.normalization import clean_pattern
from ..data.segments import SegmentCatalog
from ..utils.logger import get_logger
from .inventory import Inventory

LOGGER = get_logger(__name__)

SegmentsByLength = Union[SegmentCatalog, Mapping[int, Sequence[Segment]]]
InventoryLike = Union[Inventory, Mapping[str, int]]


@dataclass
class ChainFinderConfig:
    """Search limits for segment chains."""

    beam_width: int = 100
    top_k: int = 50
    # Caps how many catalog segments are tried per window, best piece score first.
    max_segments_per_window: Optional[int] = None


@dataclass(frozen=True)
class _Partial:
    score: float
    segments: Tuple[Segment, ...]


def _rank_key(partial: _Partial) -> Tuple[float, int, Tuple[str, ...]]:
    return (-partial.score, len(partial.segments), tuple(segment.text for segment in partial.segments))


def segment_count_bounds(length: int) -> Tuple[int, int]:
    """Fewest (all 5-letter) and most (all 2-letter) segments that can cover ``length``."""

    return math.ceil(length / 5), length // 2


def chain_piece_score(segment: Segment, start: int, end: int, total: int) -> float:
    score = segment.game_weight + PRODUCTIVITY_WEIGHT * min(1.0, segment.productivity / 1000)
    if start == 0 and segment.opens_word:
        score += EDGE_BONUS
    if end == total and segment.closes_word:
        score += EDGE_BONUS
    return score


def join_bonus(current: Segment, following: Segment) -> float:
    left_ok = current.closes_word
    right_ok = following.opens_word
    if not left_ok and not right_ok:
        return JOIN_PENALTY
    return (JOIN_BONUS if left_ok else 0.0) + (JOIN_BONUS if right_ok else 0.0)


def _fits(pattern: str, start: int, text: str) -> bool:
    for offset, char in enumerate(text):
        fixed = pattern[start + offset]
        if fixed != PATTERN_WILDCARD and fixed != char:
            return False
    return True


class SegmentChainFinder:
    """Beam-pruned search for high-scoring segment chains matching a pattern."""

    def __init__(self, config: Optional[ChainFinderConfig] = None) -> None:
        self.config = config or ChainFinderConfig()

    def find_top_chains(
        self,
        pattern: str,
        segments_by_length: SegmentsByLength,
        inventory: InventoryLike,
        k: Optional[int] = None,
    ) -> List[SegmentChain]:
        cleaned = clean_pattern(pattern)
        if len(cleaned) != len(pattern):
            raise InvariantViolation(
                f"Pattern '{pattern}' may only hold letters and wildcards"
            )
        pattern = cleaned
        total = len(pattern)
        limit = self.config.top_k if k is None else k
        if total < 2 or limit <= 0:
            return []

        by_length = segments_by_length.by_length if isinstance(segments_by_length, SegmentCatalog) else segments_by_length
        min_segments, max_segments = segment_count_bounds(total)
        windows = self._windows(pattern, by_length)

        table: Dict[Tuple[int, int], List[_Partial]] = {}
        for position in range(total, -1, -1):
            for used in range(math.ceil(position / 5), position // 2 + 1):
                if position == total:
                    table[(position, used)] = (
                        [_Partial(0.0, ())] if min_segments <= used <= max_segments else []
                    )
                    continue
                table[(position, used)] = self._expand(
                    position, used, total, min_segments, max_segments, windows, table
                )

        results = table.get((0, 0), [])
        chains = [self._to_chain(partial, inventory) for partial in sorted(results, key=_rank_key)]
        LOGGER.debug(
            "Pattern '%s': %d chains (corridor %d-%d segments)",
            pattern,
            len(chains),
            min_segments,
            max_segments,
        )
        return chains[:limit]

    def _windows(
        self,
        pattern: str,
        by_length: Mapping[int, Sequence[Segment]],
    ) -> Dict[Tuple[int, int], List[Tuple[Segment, float]]]:
        """Segments matching each ``(start, size)`` window, with their piece scores."""

        total = len(pattern)
        cap = self.config.max_segments_per_window
        windows: Dict[Tuple[int, int], List[Tuple[Segment, float]]] = {}
        for start in range(total):
            for size in SEGMENT_LENGTHS:
                end = start + size
                if end > total:
                    break
                fitting = [
                    (segment, chain_piece_score(segment, start, end, total))
                    for segment in by_length.get(size, ())
                    if _fits(pattern, start, segment.text)
                ]
                if cap is not None and len(fitting) > cap:
                    fitting.sort(key=lambda item: (-item[1], item[0].text))
                    fitting = fitting[:cap]
                windows[(start, size)] = fitting
        return windows

    def _expand(
        self,
        position: int,
        used: int,
        total: int,
        min_segments: int,
        max_segments: int,
        windows: Dict[Tuple[int, int], List[Tuple[Segment, float]]],
        table: Dict[Tuple[int, int], List[_Partial]],
    ) -> List[_Partial]:
        results: List[_Partial] = []
        next_used = used + 1
        for size in SEGMENT_LENGTHS:
            end = position + size
            if end > total:
                break
            remaining = total - end
            min_left, max_left = segment_count_bounds(remaining)
            if next_used + min_left > max_segments:
                continue
            if remaining > 0 and next_used + max_left < min_segments:
                continue
            tails = table.get((end, next_used), [])
            if not tails:
                continue
            for segment, score in windows.get((position, size), ()):
                for tail in tails:
                    bonus = join_bonus(segment, tail.segments[0]) if tail.segments else 0.0
                    results.append(_Partial(score + bonus + tail.score, (segment,) + tail.segments))
        if len(results) <= self.config.beam_width:
            return sorted(results, key=_rank_key)
        return heapq.nsmallest(self.config.beam_width, results, key=_rank_key)

    @staticmethod
    def _to_chain(partial: _Partial, inventory: InventoryLike) -> SegmentChain:
        texts = [segment.text for segment in partial.segments]
        if isinstance(inventory, Inventory):
            remaining = inventory.remaining_for(texts)
        else:
            remaining = [int(inventory.get(text, 0)) for text in texts]
        return SegmentChain(
            letters="".join(texts).upper(),
            segments=texts,
            score=partial.score,
            usable=all(count > 0 for count in remaining),
            remaining=remaining,
        )


def find_top_segment_chains(
    pattern: str,
    segments_by_length: SegmentsByLength,
    inventory: InventoryLike,
    k: Optional[int] = None,
    config: Optional[ChainFinderConfig] = None,
) -> List[SegmentChain]:
    """Return up to ``k`` (default ``config.top_k``) chains matching ``pattern``, best first."""

    return SegmentChainFinder(config).find_top_chains(pattern, segments_by_length, inventory, k)
