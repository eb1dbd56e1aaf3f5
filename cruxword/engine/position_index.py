"""Position-indexed pattern matching over a word list."""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from ..core.constants import PATTERN_WILDCARD
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

# position -> character -> word ids
PositionMap = Dict[int, Dict[str, FrozenSet[int]]]

_EMPTY: FrozenSet[int] = frozenset()


class PositionIndex:
    """Answers "which words of length L have character X at position i".

    Words get integer ids in insertion order. Only the by-length grouping is
    built up front; the per-position map for a length is built on its first
    query and published whole, so readers never observe a partial map.
    """

    def __init__(self, words: Optional[Iterable[str]] = None) -> None:
        self._words: List[str] = []
        self._id_by_word: Dict[str, int] = {}
        self._ids_by_length: Dict[int, List[int]] = {}
        self._position_maps: Dict[int, PositionMap] = {}
        self._lock = threading.Lock()
        if words is not None:
            self.build(words)

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------
    def build(self, words: Iterable[str]) -> None:
        """(Re)build the length grouping. Position maps are dropped and rebuilt lazily."""

        ordered: List[str] = []
        id_by_word: Dict[str, int] = {}
        ids_by_length: Dict[int, List[int]] = defaultdict(list)
        for word in words:
            if not word or word in id_by_word:
                continue
            word_id = len(ordered)
            ordered.append(word)
            id_by_word[word] = word_id
            ids_by_length[len(word)].append(word_id)

        with self._lock:
            self._words = ordered
            self._id_by_word = id_by_word
            self._ids_by_length = dict(ids_by_length)
            self._position_maps = {}
        LOGGER.debug("Position index grouped %d words into %d lengths", len(ordered), len(ids_by_length))

    def _position_map(self, length: int) -> PositionMap:
        existing = self._position_maps.get(length)
        if existing is not None:
            return existing
        with self._lock:
            existing = self._position_maps.get(length)
            if existing is not None:
                return existing
            staging: Dict[int, Dict[str, Set[int]]] = defaultdict(lambda: defaultdict(set))
            for word_id in self._ids_by_length.get(length, []):
                for position, char in enumerate(self._words[word_id]):
                    staging[position][char].add(word_id)
            built: PositionMap = {
                position: {char: frozenset(ids) for char, ids in chars.items()}
                for position, chars in staging.items()
            }
            self._position_maps[length] = built
        LOGGER.debug("Built position map for length %d", length)
        return built

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._words)

    def __contains__(self, word: object) -> bool:
        return word in self._id_by_word

    def word(self, word_id: int) -> str:
        return self._words[word_id]

    def id_of(self, word: str) -> Optional[int]:
        return self._id_by_word.get(word)

    def words_of_length(self, length: int) -> List[str]:
        return [self._words[word_id] for word_id in self._ids_by_length.get(length, [])]

    def query(self, length: int, position: int, char: str) -> FrozenSet[int]:
        """Return ids of words of ``length`` with ``char`` at ``position``."""

        return self._position_map(length).get(position, {}).get(char, _EMPTY)

    def find_candidate_ids(self, pattern: str) -> Set[int]:
        """Return ids of words matching ``pattern`` (``?`` matches any letter)."""

        length = len(pattern)
        if length not in self._ids_by_length:
            return set()

        constraints: List[FrozenSet[int]] = []
        for position, char in enumerate(pattern):
            if char == PATTERN_WILDCARD:
                continue
            match_set = self.query(length, position, char)
            if not match_set:
                return set()
            constraints.append(match_set)

        if not constraints:
            return set(self._ids_by_length[length])

        # Intersect smallest sets first for speed
        constraints.sort(key=len)
        result = set(constraints[0])
        for other in constraints[1:]:
            result &= other
            if not result:
                return set()
        return result

    def find_candidates(self, pattern: str) -> List[str]:
        """Return matching words in id order."""

        return [self._words[word_id] for word_id in sorted(self.find_candidate_ids(pattern))]
