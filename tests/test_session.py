import unittest
from concurrent.futures import ThreadPoolExecutor

from cruxword.core.exceptions import InvariantViolation, PlacementError
from cruxword.core.models import SegmentChain
from cruxword.data.lexicon import Lexicon
from cruxword.data.segments import SegmentCatalog
from cruxword.engine.inventory import Inventory, seed_uses
from cruxword.engine.session import FillSession

LEXICON_ROWS = [
    {"word": "code", "zipf": 5.0},
    {"word": "core", "zipf": 4.8},
]

SEGMENT_ROWS = [
    {"text": "co", "combo_count": 20, "pos_start": True, "game_weight": 0.5},
    {"text": "de", "combo_count": 0, "pos_end": True, "game_weight": 0.4},
    {"text": "re", "combo_count": 148, "morph_suffix": True, "game_weight": 0.5},
]


class InventoryTests(unittest.TestCase):
    def test_seed_uses_rounds_half_up_and_clamps(self) -> None:
        self.assertEqual(seed_uses(0), 1)
        self.assertEqual(seed_uses(19), 1)
        self.assertEqual(seed_uses(20), 2)
        self.assertEqual(seed_uses(148), 3)
        self.assertEqual(seed_uses(10 ** 6), 3)

    def test_from_catalog(self) -> None:
        inventory = Inventory.from_catalog(SegmentCatalog.from_rows(SEGMENT_ROWS))
        self.assertEqual(inventory.snapshot(), {"co": 2, "de": 1, "re": 3})

    def test_consume_floors_at_zero(self) -> None:
        inventory = Inventory({"co": 1, "de": 2})
        self.assertEqual(inventory.consume(["co", "de", "co"]), {"co": 0, "de": 1})
        self.assertEqual(inventory.remaining("co"), 0)
        self.assertEqual(inventory.remaining_for(["CO", "de", "zz"]), [0, 1, 0])

    def test_concurrent_consume_floors_at_zero(self) -> None:
        inventory = Inventory({"co": 5})
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda _: inventory.consume(["co"]), range(20)))
        self.assertEqual(inventory.remaining("co"), 0)

    def test_negative_counts_are_rejected(self) -> None:
        with self.assertRaises(InvariantViolation):
            Inventory({"co": -1})


class FillSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = FillSession.create(
            Lexicon.from_rows(LEXICON_ROWS),
            SegmentCatalog.from_rows(SEGMENT_ROWS),
            rows=3,
            cols=4,
        )
        self.slot = self.session.slot("r0c0-A")
        self.chain = SegmentChain(
            letters="CODE",
            segments=["co", "de"],
            score=1.0,
            usable=True,
            remaining=[2, 1],
        )

    def test_commit_writes_letters_and_spends_uses(self) -> None:
        remaining = self.session.commit_chain(self.chain, self.slot)
        self.assertEqual(remaining, {"co": 1, "de": 0})
        self.assertEqual(
            "".join(self.session.board.letter_at(0, c) or "" for c in range(4)),
            "CODE",
        )
        owners = self.session.board.cell(0, 0).owners
        self.assertEqual(owners, {"chain:r0c0-A"})

    def test_repeated_commits_never_go_negative(self) -> None:
        self.session.commit_chain(self.chain, self.slot)
        other = self.session.slot("r2c0-A")
        remaining = self.session.commit_chain(self.chain, other)
        self.assertEqual(remaining, {"co": 0, "de": 0})
        self.assertEqual(self.session.inventory.remaining("de"), 0)

    def test_committed_inventory_shows_in_chains(self) -> None:
        self.session.commit_chain(self.chain, self.slot)
        chains = self.session.chains("code")
        by_segments = {tuple(chain.segments): chain for chain in chains}
        self.assertFalse(by_segments[("co", "de")].usable)
        self.assertEqual(by_segments[("co", "de")].remaining, [1, 0])

    def test_length_mismatch_is_rejected(self) -> None:
        short = SegmentChain(letters="CO", segments=["co"], score=0.5, usable=True, remaining=[2])
        with self.assertRaises(InvariantViolation):
            self.session.commit_chain(short, self.slot)
        self.assertEqual(self.session.inventory.remaining("co"), 2)

    def test_conflicting_letters_leave_inventory_untouched(self) -> None:
        self.session.board.set_letter(0, 3, "X")
        with self.assertRaises(PlacementError):
            self.session.commit_chain(self.chain, self.slot)
        self.assertEqual(self.session.inventory.snapshot(), {"co": 2, "de": 1, "re": 3})
        self.assertIsNone(self.session.board.letter_at(0, 0))

    def test_candidates_follow_board_letters(self) -> None:
        self.session.board.set_letter(0, 2, "R")
        words = [candidate.word for candidate in self.session.candidates(self.slot)]
        self.assertEqual(words, ["CORE"])

    def test_chains_for_slot_use_board_pattern(self) -> None:
        self.session.board.set_letter(0, 2, "D")
        chains = self.session.chains(self.slot)
        letters = [chain.letters for chain in chains]
        self.assertIn("CODE", letters)
        for word in letters:
            self.assertEqual(word[2:], "DE")

    def test_validate_committed_board(self) -> None:
        self.session.commit_chain(self.chain, self.slot)
        result = self.session.validate()
        self.assertTrue(result.ok)
        self.assertEqual(result.score, 4)
        self.assertEqual(result.word_count, 1)

    def test_chains_reject_stray_pattern_characters(self) -> None:
        with self.assertRaises(InvariantViolation):
            self.session.chains("c*de")

    def test_concurrent_commits_never_go_negative(self) -> None:
        slots = [self.session.slot(f"r{row}c0-A") for row in range(3)]
        with ThreadPoolExecutor(max_workers=3) as pool:
            results = list(pool.map(lambda slot: self.session.commit_chain(self.chain, slot), slots))
        self.assertEqual(self.session.inventory.snapshot(), {"co": 0, "de": 0, "re": 3})
        for remaining in results:
            self.assertTrue(all(count >= 0 for count in remaining.values()))
        for row in range(3):
            self.assertEqual(
                "".join(self.session.board.letter_at(row, c) or "" for c in range(4)),
                "CODE",
            )

    def test_unknown_slot(self) -> None:
        with self.assertRaises(KeyError):
            self.session.slot("r9c9-A")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
