import math
import unittest

from cruxword.core.exceptions import DataLoadError, InvariantViolation
from cruxword.core.models import Segment
from cruxword.data.lexicon import Lexicon
from cruxword.data.normalization import clean_pattern, clean_word, matches_pattern
from cruxword.data.records import (
    iter_rows,
    load_segments,
    load_word_entries,
    parse_bool,
    parse_int,
    parse_optional_float,
)
from cruxword.data.segments import SegmentCatalog


class NormalizationTests(unittest.TestCase):
    def test_clean_word_folds_diacritics_and_case(self) -> None:
        self.assertEqual(clean_word("Café-Noir"), "cafenoir")

    def test_clean_pattern_keeps_wildcards(self) -> None:
        self.assertEqual(clean_pattern("C..E"), "c??e")
        self.assertEqual(clean_pattern("c_?e"), "c??e")

    def test_matches_pattern(self) -> None:
        self.assertTrue(matches_pattern("cave", "c??e"))
        self.assertFalse(matches_pattern("cave", "c??"))
        self.assertFalse(matches_pattern("cave", "d??e"))


class RecordCoercionTests(unittest.TestCase):
    def test_parse_bool_variants(self) -> None:
        for value in ("Yes", "true", "T", "1", 1, True):
            self.assertTrue(parse_bool(value), value)
        for value in ("0", "no", "", None, float("nan"), 0):
            self.assertFalse(parse_bool(value), value)

    def test_parse_int_is_non_negative(self) -> None:
        self.assertEqual(parse_int("12.0"), 12)
        self.assertEqual(parse_int("-3"), 0)
        self.assertEqual(parse_int("abc"), 0)

    def test_parse_optional_float_missing(self) -> None:
        self.assertIsNone(parse_optional_float(""))
        self.assertIsNone(parse_optional_float(math.nan))
        self.assertAlmostEqual(parse_optional_float("3.5"), 3.5)

    def test_unusable_tables_raise(self) -> None:
        with self.assertRaises(DataLoadError):
            list(iter_rows(None, "lexicon"))
        with self.assertRaises(DataLoadError):
            list(iter_rows(5, "lexicon"))

    def test_non_mapping_rows_are_skipped(self) -> None:
        rows = list(iter_rows([{"word": "cat"}, "junk", 3], "lexicon"))
        self.assertEqual(rows, [{"word": "cat"}])

    def test_duplicate_words_merge(self) -> None:
        entries = load_word_entries(
            [
                {"word": "Café", "zipf": "3.1"},
                {"word": "cafe", "zipf": 4.0, "is_clueable": "true"},
                {"word": "", "zipf": 5.0},
            ]
        )
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].word, "cafe")
        self.assertAlmostEqual(entries[0].zipf, 4.0)
        self.assertTrue(entries[0].is_clueable)

    def test_segments_outside_length_range_are_skipped(self) -> None:
        segments = load_segments(
            [
                {"text": "a"},
                {"text": "abcdef"},
                {"text": "ab", "combo_count": "7", "pos_start": "yes"},
                {"text": "ab", "combo_count": "9"},
            ]
        )
        self.assertEqual([segment.text for segment in segments], ["ab"])
        self.assertEqual(segments[0].combo_count, 9)


class ModelInvariantTests(unittest.TestCase):
    def test_segment_length_is_enforced(self) -> None:
        with self.assertRaises(InvariantViolation):
            Segment(text="a")
        with self.assertRaises(InvariantViolation):
            Segment(text="abcdef")

    def test_segment_counters_cannot_be_negative(self) -> None:
        with self.assertRaises(InvariantViolation):
            Segment(text="ab", combo_count=-1)


class LexiconTests(unittest.TestCase):
    def test_from_tables_uses_word_list_membership(self) -> None:
        lexicon = Lexicon.from_tables(
            [{"word": "cat", "is_clueable": 1}],
            [{"word": "cat", "zipf": 3.5, "pos": "NOUN"}, {"word": "dog", "zipf": 4}],
        )
        self.assertEqual(len(lexicon), 1)
        self.assertIn("CAT", lexicon)
        self.assertNotIn("dog", lexicon)
        entry = lexicon.get("cat")
        assert entry is not None
        self.assertAlmostEqual(entry.zipf, 3.5)
        self.assertEqual(entry.pos, "noun")
        self.assertTrue(entry.is_clueable)

    def test_zipf_range_defaults_without_frequencies(self) -> None:
        lexicon = Lexicon.from_words(["cat", "dog"])
        self.assertAlmostEqual(lexicon.min_zipf, 2.6)
        self.assertAlmostEqual(lexicon.max_zipf, 6.7)
        self.assertEqual(lexicon.zipf_of("cat"), 0.0)

    def test_playable_set_excludes_banned(self) -> None:
        lexicon = Lexicon.from_rows(
            [{"word": "cat", "is_clueable": "yes"}, {"word": "cow"}, {"word": "dog", "banned": "1", "is_clueable": 1}]
        )
        self.assertEqual(lexicon.playable_set(), {"CAT", "COW"})
        self.assertEqual(lexicon.clueable_set(), {"CAT"})


class SegmentCatalogTests(unittest.TestCase):
    def test_lookup_by_text_and_length(self) -> None:
        catalog = SegmentCatalog.from_rows([{"text": "ab"}, {"text": "alo"}, {"text": "NE"}])
        self.assertEqual(len(catalog), 3)
        self.assertIn("ne", catalog)
        self.assertEqual([segment.text for segment in catalog.of_length(2)], ["ab", "ne"])
        self.assertEqual(catalog.of_length(5), [])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
