"""Lexicon of playable words and their attributes."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from ..core.constants import DEFAULT_MAX_ZIPF, DEFAULT_MIN_ZIPF
from ..core.models import WordEntry
from .normalization import clean_word
from .records import load_word_entries, merge_lexicon_rows


class Lexicon:
    """Deduplicated lowercase word list with frequency and editorial metadata."""

    def __init__(self, entries: Iterable[WordEntry]) -> None:
        self._entry_by_word: Dict[str, WordEntry] = {}
        for entry in entries:
            if entry.word in self._entry_by_word:
                continue
            self._entry_by_word[entry.word] = entry
        self.min_zipf, self.max_zipf = self._zipf_range()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, Any]] | Any) -> "Lexicon":
        """Build from canonical rows carrying both membership and attributes."""

        return cls(load_word_entries(rows))

    @classmethod
    def from_tables(
        cls,
        word_rows: Iterable[Mapping[str, Any]] | Any,
        attribute_rows: Iterable[Mapping[str, Any]] | Any = (),
    ) -> "Lexicon":
        return cls(merge_lexicon_rows(word_rows, attribute_rows))

    @classmethod
    def from_words(cls, words: Iterable[str]) -> "Lexicon":
        return cls(WordEntry(word=clean_word(word)) for word in words if clean_word(word))

    def _zipf_range(self) -> Tuple[float, float]:
        positive = [entry.zipf for entry in self._entry_by_word.values() if entry.zipf and entry.zipf > 0]
        if not positive:
            return DEFAULT_MIN_ZIPF, DEFAULT_MAX_ZIPF
        return min(positive), max(positive)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._entry_by_word)

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and clean_word(word) in self._entry_by_word

    def get(self, word: str) -> Optional[WordEntry]:
        return self._entry_by_word.get(clean_word(word))

    def words(self) -> List[str]:
        return list(self._entry_by_word)

    def zipf_of(self, word: str) -> float:
        entry = self.get(word)
        if entry is None or entry.zipf is None:
            return 0.0
        return entry.zipf

    def playable_set(self) -> Set[str]:
        """Uppercase surfaces of every non-banned word, for board validation."""

        return {entry.word.upper() for entry in self._entry_by_word.values() if not entry.banned}

    def clueable_set(self) -> Set[str]:
        return {
            entry.word.upper()
            for entry in self._entry_by_word.values()
            if entry.is_clueable and not entry.banned
        }
