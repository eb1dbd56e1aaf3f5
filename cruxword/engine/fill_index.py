"""Load-time bundle of everything the fill queries read."""

from __future__ import annotations

from typing import Optional

from ..data.lexicon import Lexicon
from ..data.segments import SegmentCatalog
from ..utils.logger import get_logger
from .position_index import PositionIndex
from .segmentation import Segmentation, SegmentationCache, SegmentationEngine

LOGGER = get_logger(__name__)


class FillIndex:
    """Lexicon, position index, segment catalog and the segmentation cache they share."""

    def __init__(
        self,
        lexicon: Lexicon,
        catalog: SegmentCatalog,
        cache: Optional[SegmentationCache] = None,
    ) -> None:
        self.lexicon = lexicon
        self.catalog = catalog
        self.positions = PositionIndex(lexicon.words())
        self.segmenter = SegmentationEngine(catalog, cache)
        LOGGER.info(
            "Fill index ready: %d words, %d segments, zipf range %.2f-%.2f",
            len(lexicon),
            len(catalog),
            lexicon.min_zipf,
            lexicon.max_zipf,
        )

    @property
    def min_zipf(self) -> float:
        return self.lexicon.min_zipf

    @property
    def max_zipf(self) -> float:
        return self.lexicon.max_zipf

    @property
    def cache(self) -> SegmentationCache:
        return self.segmenter.cache

    def segment(self, word: str) -> Optional[Segmentation]:
        return self.segmenter.best_segmentation(word)
