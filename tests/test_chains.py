import unittest

from cruxword.core.exceptions import InvariantViolation
from cruxword.core.models import Segment
from cruxword.data.segments import SegmentCatalog
from cruxword.engine.chains import (
    ChainFinderConfig,
    SegmentChainFinder,
    find_top_segment_chains,
    join_bonus,
    segment_count_bounds,
)
from cruxword.engine.inventory import Inventory

SEGMENT_ROWS = [
    {"text": "co", "combo_count": 300, "pos_start": True, "game_weight": 0.5},
    {"text": "de", "combo_count": 200, "pos_end": True, "game_weight": 0.4},
    {"text": "re", "combo_count": 400, "morph_suffix": True, "game_weight": 0.5},
    {"text": "ca", "combo_count": 120, "pos_start": True, "game_weight": 0.4},
    {"text": "ve", "combo_count": 80, "pos_end": True, "game_weight": 0.3},
    {"text": "code", "combo_count": 10, "game_weight": 0.6},
    {"text": "ton", "combo_count": 50, "game_weight": 0.3},
    {"text": "ing", "combo_count": 900, "morph_suffix": True, "game_weight": 0.5},
    {"text": "st", "combo_count": 500, "pos_start": True, "game_weight": 0.4},
    {"text": "one", "combo_count": 250, "pos_end": True, "game_weight": 0.5},
]


def make_catalog() -> SegmentCatalog:
    return SegmentCatalog.from_rows(SEGMENT_ROWS)


class ChainHelperTests(unittest.TestCase):
    def test_segment_count_corridor(self) -> None:
        self.assertEqual(segment_count_bounds(4), (1, 2))
        self.assertEqual(segment_count_bounds(7), (2, 3))
        self.assertEqual(segment_count_bounds(11), (3, 5))

    def test_join_bonus(self) -> None:
        closing = Segment(text="de", pos_end=True)
        opening = Segment(text="st", pos_start=True)
        plain = Segment(text="xy")
        self.assertAlmostEqual(join_bonus(closing, opening), 0.16)
        self.assertAlmostEqual(join_bonus(closing, plain), 0.08)
        self.assertAlmostEqual(join_bonus(plain, plain), -0.06)


class SegmentChainTests(unittest.TestCase):
    def setUp(self) -> None:
        self.catalog = make_catalog()
        self.inventory = Inventory.from_catalog(self.catalog)

    def test_chains_fill_pattern_exactly(self) -> None:
        chains = find_top_segment_chains("????", self.catalog, self.inventory)
        self.assertTrue(chains)
        for chain in chains:
            self.assertEqual(len(chain.letters), 4)
            self.assertEqual("".join(chain.segments).upper(), chain.letters)
            low, high = segment_count_bounds(4)
            self.assertTrue(low <= len(chain.segments) <= high)
            self.assertEqual(len(chain.remaining), len(chain.segments))

    def test_fixed_letters_are_respected(self) -> None:
        chains = find_top_segment_chains("c??e", self.catalog, self.inventory)
        letters = {chain.letters for chain in chains}
        self.assertTrue(letters <= {"CODE", "CORE", "CAVE", "CADE", "CARE", "COVE"})
        for chain in chains:
            self.assertTrue(chain.letters.startswith("C"))
            self.assertTrue(chain.letters.endswith("E"))
        self.assertIn(("co", "de"), {tuple(chain.segments) for chain in chains})
        self.assertIn(("code",), {tuple(chain.segments) for chain in chains})

    def test_results_are_sorted_and_limited(self) -> None:
        chains = find_top_segment_chains("????", self.catalog, self.inventory, k=3)
        self.assertLessEqual(len(chains), 3)
        scores = [chain.score for chain in chains]
        self.assertEqual(scores, sorted(scores, reverse=True))

    def test_join_bonus_enters_chain_score(self) -> None:
        chains = find_top_segment_chains("co?e", self.catalog, self.inventory)
        by_segments = {tuple(chain.segments): chain for chain in chains}
        co = self.catalog.get("co")
        de = self.catalog.get("de")
        assert co is not None and de is not None
        expected = (
            0.5 + 0.05 * min(1.0, 300 / 1000) + 0.08
            + 0.4 + 0.05 * min(1.0, 200 / 1000) + 0.08
            - 0.06
        )
        self.assertAlmostEqual(by_segments[("co", "de")].score, expected)

    def test_usable_flag_reflects_inventory(self) -> None:
        chains = find_top_segment_chains("code", self.catalog, {"co": 1, "de": 0, "code": 2})
        by_segments = {tuple(chain.segments): chain for chain in chains}
        self.assertFalse(by_segments[("co", "de")].usable)
        self.assertEqual(by_segments[("co", "de")].remaining, [1, 0])
        self.assertTrue(by_segments[("code",)].usable)

    def test_mapping_of_segments_by_length(self) -> None:
        chains = find_top_segment_chains("stone", self.catalog.by_length, self.inventory)
        self.assertEqual([chain.segments for chain in chains], [["st", "one"]])

    def test_impossible_pattern_yields_nothing(self) -> None:
        self.assertEqual(find_top_segment_chains("zzzz", self.catalog, self.inventory), [])
        self.assertEqual(find_top_segment_chains("?", self.catalog, self.inventory), [])

    def test_runs_are_deterministic(self) -> None:
        finder = SegmentChainFinder(ChainFinderConfig(beam_width=5))
        first = finder.find_top_chains("???????", self.catalog, self.inventory)
        second = finder.find_top_chains("???????", self.catalog, self.inventory)
        self.assertEqual(first, second)

    def test_patterns_with_stray_characters_are_rejected(self) -> None:
        for pattern in ("c*de", "co de", "co-de"):
            with self.assertRaises(InvariantViolation, msg=pattern):
                find_top_segment_chains(pattern, self.catalog, self.inventory)

    def test_dot_and_underscore_count_as_wildcards(self) -> None:
        chains = find_top_segment_chains("c._e", self.catalog, self.inventory)
        self.assertTrue(chains)
        for chain in chains:
            self.assertEqual(len(chain.letters), 4)

    def test_function_form_uses_configured_top_k(self) -> None:
        config = ChainFinderConfig(top_k=2)
        chains = find_top_segment_chains("????", self.catalog, self.inventory, config=config)
        self.assertEqual(len(chains), 2)
        more = find_top_segment_chains("????", self.catalog, self.inventory, k=4, config=config)
        self.assertEqual(len(more), 4)

    def test_window_cap_limits_breadth(self) -> None:
        capped = SegmentChainFinder(ChainFinderConfig(max_segments_per_window=1))
        chains = capped.find_top_chains("????", self.catalog, self.inventory)
        self.assertTrue(chains)
        self.assertLessEqual(len(chains), len(find_top_segment_chains("????", self.catalog, self.inventory)))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
