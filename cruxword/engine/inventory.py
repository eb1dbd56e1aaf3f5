"""Per-segment remaining-use counts."""

from __future__ import annotations

import math
import threading
from typing import Dict, Iterable, List, Mapping, Optional

from ..core.exceptions import InvariantViolation
from ..data.segments import SegmentCatalog
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

MIN_USES = 1
MAX_USES = 3


def seed_uses(combo_count: int) -> int:
    """Uses granted to a segment: ``clamp(round(log1p(combo_count) / 2), 1, 3)``, halves round up."""

    raw = math.floor(math.log1p(max(0, combo_count)) / 2 + 0.5)
    return max(MIN_USES, min(MAX_USES, raw))


class Inventory:
    """Remaining uses per segment text.

    Reads are lock-free snapshots; :meth:`consume` is the single mutation
    entry point and never takes a count below zero.
    """

    def __init__(self, counts: Optional[Mapping[str, int]] = None) -> None:
        self._counts: Dict[str, int] = {}
        for text, count in (counts or {}).items():
            if count < 0:
                raise InvariantViolation(f"Negative inventory count for '{text}': {count}")
            self._counts[text.lower()] = int(count)
        self._lock = threading.Lock()

    @classmethod
    def from_catalog(cls, catalog: SegmentCatalog) -> "Inventory":
        inventory = cls({segment.text: seed_uses(segment.combo_count) for segment in catalog})
        LOGGER.info("Seeded inventory for %d segments", len(inventory))
        return inventory

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, text: object) -> bool:
        return isinstance(text, str) and text.lower() in self._counts

    def remaining(self, text: str) -> int:
        return self._counts.get(text.lower(), 0)

    def remaining_for(self, texts: Iterable[str]) -> List[int]:
        counts = self._counts
        return [counts.get(text.lower(), 0) for text in texts]

    def snapshot(self) -> Dict[str, int]:
        return dict(self._counts)

    def consume(self, texts: Iterable[str]) -> Dict[str, int]:
        """Decrement each listed segment once per occurrence, floored at zero.

        Returns the counts after the update for the touched segments.
        """

        touched: Dict[str, int] = {}
        with self._lock:
            for text in texts:
                key = text.lower()
                current = self._counts.get(key, 0)
                if current > 0:
                    self._counts[key] = current - 1
                else:
                    LOGGER.debug("Segment '%s' already exhausted", key)
                touched[key] = self._counts.get(key, 0)
        return touched
