import math
import unittest

from cruxword.data.segments import SegmentCatalog
from cruxword.engine.segmentation import (
    SegmentationCache,
    SegmentationEngine,
    best_segmentation,
    piece_score,
)


def make_catalog() -> SegmentCatalog:
    return SegmentCatalog.from_rows(
        [
            {"text": "ab", "combo_count": 60, "pos_start": True, "game_weight": 0.4},
            {"text": "alo", "combo_count": 12, "game_weight": 0.3},
            {"text": "ne", "combo_count": 150, "pos_end": True, "game_weight": 0.3},
            {"text": "aba", "game_weight": 0.1},
            {"text": "lo", "game_weight": 0.1},
        ]
    )


class SegmentationTests(unittest.TestCase):
    def test_best_tiling_prefers_weighted_pieces(self) -> None:
        result = best_segmentation("abalone", make_catalog())
        assert result is not None
        self.assertEqual(result.pieces, ("ab", "alo", "ne"))
        expected = (
            0.4 + 0.08 + 0.05 * math.log1p(60) / 10
            + 0.3 + 0.05 * math.log1p(12) / 10
            + 0.3 + 0.08 + 0.05 * math.log1p(150) / 10
        )
        self.assertAlmostEqual(result.score, expected)

    def test_pieces_concatenate_to_word(self) -> None:
        result = best_segmentation("ABALONE", make_catalog())
        assert result is not None
        self.assertEqual("".join(result.pieces), "abalone")

    def test_untileable_word_returns_none(self) -> None:
        self.assertIsNone(best_segmentation("abalonex", make_catalog()))
        self.assertIsNone(best_segmentation("", make_catalog()))

    def test_piece_score_edge_bonuses(self) -> None:
        catalog = make_catalog()
        ab = catalog.get("ab")
        assert ab is not None
        self.assertAlmostEqual(
            piece_score(ab, 0, 2, 7) - piece_score(ab, 2, 4, 7),
            0.08,
        )

    def test_ties_prefer_fewer_pieces(self) -> None:
        catalog = SegmentCatalog.from_rows([{"text": "ab"}, {"text": "cd"}, {"text": "abcd"}])
        result = best_segmentation("abcd", catalog)
        assert result is not None
        self.assertEqual(result.pieces, ("abcd",))

    def test_ties_then_prefer_lexicographic_order(self) -> None:
        catalog = SegmentCatalog.from_rows(
            [{"text": "ab"}, {"text": "cdef"}, {"text": "abcd"}, {"text": "ef"}]
        )
        result = best_segmentation("abcdef", catalog)
        assert result is not None
        self.assertEqual(result.pieces, ("ab", "cdef"))


class SegmentationCacheTests(unittest.TestCase):
    def test_cached_results_are_identical(self) -> None:
        engine = SegmentationEngine(make_catalog(), SegmentationCache(max_entries=10))
        first = engine.best_segmentation("abalone")
        second = engine.best_segmentation("Abalone")
        self.assertEqual(first, second)
        self.assertEqual(engine.cache.hits, 1)
        self.assertEqual(engine.cache.misses, 1)

    def test_untileable_results_are_cached(self) -> None:
        cache = SegmentationCache(max_entries=10)
        self.assertIsNone(best_segmentation("zz", make_catalog(), cache))
        found, value = cache.lookup("zz")
        self.assertTrue(found)
        self.assertIsNone(value)

    def test_cache_is_bounded(self) -> None:
        cache = SegmentationCache(max_entries=2)
        engine = SegmentationEngine(make_catalog(), cache)
        for word in ("ab", "ne", "lo"):
            engine.best_segmentation(word)
        self.assertEqual(len(cache), 2)
        found, _ = cache.lookup("ab")
        self.assertFalse(found)

    def test_cache_size_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            SegmentationCache(max_entries=0)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
