"""Optimal word segmentation into catalog segments."""

from __future__ import annotations

import math
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..core.constants import EDGE_BONUS, PRODUCTIVITY_WEIGHT, SEGMENT_LENGTHS
from ..core.models import Segment
from ..data.normalization import clean_word
from ..data.segments import SegmentCatalog
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_CACHE_SIZE = 50_000


@dataclass(frozen=True)
class Segmentation:
    score: float
    pieces: Tuple[str, ...]


def piece_score(segment: Segment, start: int, end: int, word_length: int) -> float:
    """Score one piece: game weight, edge bonuses and a log-scaled productivity bonus."""

    score = segment.game_weight
    if start == 0 and segment.opens_word:
        score += EDGE_BONUS
    if end == word_length and segment.closes_word:
        score += EDGE_BONUS
    score += PRODUCTIVITY_WEIGHT * math.log1p(segment.productivity) / 10
    return score


def _prefer(candidate: Segmentation, incumbent: Optional[Segmentation]) -> bool:
    """Higher score wins; ties go to fewer pieces, then the lexicographically smaller tiling."""

    if incumbent is None:
        return True
    if candidate.score != incumbent.score:
        return candidate.score > incumbent.score
    if len(candidate.pieces) != len(incumbent.pieces):
        return len(candidate.pieces) < len(incumbent.pieces)
    return candidate.pieces < incumbent.pieces


def segment_word(word: str, catalog: SegmentCatalog) -> Optional[Segmentation]:
    """Uncached bottom-up DP; ``None`` when no 2-5 letter tiling exists."""

    length = len(word)
    if length == 0:
        return None
    best: List[Optional[Segmentation]] = [None] * (length + 1)
    best[length] = Segmentation(score=0.0, pieces=())
    for start in range(length - 1, -1, -1):
        chosen: Optional[Segmentation] = None
        for size in SEGMENT_LENGTHS:
            end = start + size
            if end > length:
                break
            tail = best[end]
            if tail is None:
                continue
            segment = catalog.get(word[start:end])
            if segment is None:
                continue
            option = Segmentation(
                score=piece_score(segment, start, end, length) + tail.score,
                pieces=(segment.text,) + tail.pieces,
            )
            if _prefer(option, chosen):
                chosen = option
        best[start] = chosen
    return best[0]


class SegmentationCache:
    """Thread-safe LRU of segmentation results keyed by lowercase word.

    Untileable words are cached as ``None``; :meth:`lookup` distinguishes a
    cached ``None`` from a miss through its ``found`` flag.
    """

    def __init__(self, max_entries: int = DEFAULT_CACHE_SIZE) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, Optional[Segmentation]]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, key: str) -> Tuple[bool, Optional[Segmentation]]:
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
                self.hits += 1
                return True, self._entries[key]
            self.misses += 1
            return False, None

    def store(self, key: str, value: Optional[Segmentation]) -> None:
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0


class SegmentationEngine:
    """Memoized segmentation bound to one catalog."""

    def __init__(self, catalog: SegmentCatalog, cache: Optional[SegmentationCache] = None) -> None:
        self.catalog = catalog
        self.cache = cache if cache is not None else SegmentationCache()

    def best_segmentation(self, word: str) -> Optional[Segmentation]:
        key = clean_word(word)
        found, cached = self.cache.lookup(key)
        if found:
            return cached
        result = segment_word(key, self.catalog)
        self.cache.store(key, result)
        return result


def best_segmentation(
    word: str,
    catalog: SegmentCatalog,
    cache: Optional[SegmentationCache] = None,
) -> Optional[Segmentation]:
    """Return ``Segmentation(score, pieces)`` or ``None`` if ``word`` is untileable."""

    if cache is None:
        return segment_word(clean_word(word), catalog)
    return SegmentationEngine(catalog, cache).best_segmentation(word)
