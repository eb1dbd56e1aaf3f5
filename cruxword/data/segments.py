"""Segment catalog used for segmentation and chain building."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from ..core.constants import SEGMENT_LENGTHS
from ..core.models import Segment
from .records import load_segments


class SegmentCatalog:
    """Read-only lookup of segments by text and by length."""

    def __init__(self, segments: Iterable[Segment]) -> None:
        self._by_text: Dict[str, Segment] = {}
        for segment in segments:
            self._by_text[segment.text] = segment
        self._by_length: Dict[int, List[Segment]] = {length: [] for length in SEGMENT_LENGTHS}
        for segment in self._by_text.values():
            self._by_length[segment.length].append(segment)

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, Any]] | Any) -> "SegmentCatalog":
        return cls(load_segments(rows))

    def __len__(self) -> int:
        return len(self._by_text)

    def __contains__(self, text: object) -> bool:
        return isinstance(text, str) and text.lower() in self._by_text

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._by_text.values())

    def get(self, text: str) -> Optional[Segment]:
        return self._by_text.get(text.lower())

    def of_length(self, length: int) -> List[Segment]:
        return self._by_length.get(length, [])

    @property
    def by_length(self) -> Dict[int, List[Segment]]:
        return self._by_length
