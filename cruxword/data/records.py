"""Row coercion for lexicon and segment tables.

Collaborators hand over rows as mappings (``csv.DictReader`` rows, JSON
objects or ``DataFrame.to_dict("records")`` output). Individual bad fields
are coerced to safe defaults; rows without a usable key are skipped. Only a
table that cannot be iterated at all raises :class:`DataLoadError`.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from ..core.constants import MAX_SEGMENT_LENGTH, MIN_SEGMENT_LENGTH
from ..core.exceptions import DataLoadError
from ..core.models import Segment, WordEntry
from ..utils.logger import get_logger
from .normalization import clean_word

LOGGER = get_logger(__name__)

_TRUE_VALUES = {"1", "true", "t", "yes", "y"}


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def parse_float(value: Any, default: float = 0.0) -> float:
    if _is_missing(value):
        return default
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(parsed) or math.isinf(parsed):
        return default
    return parsed


def parse_optional_float(value: Any) -> Optional[float]:
    if _is_missing(value):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(parsed) or math.isinf(parsed):
        return None
    return parsed


def parse_bool(value: Any) -> bool:
    if _is_missing(value):
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in _TRUE_VALUES


def parse_int(value: Any) -> int:
    """Parse a non-negative counter; ``"12.0"`` is accepted, negatives become 0."""

    parsed = parse_float(value)
    return max(0, int(parsed))


def parse_text(value: Any) -> str:
    if _is_missing(value):
        return ""
    return str(value).strip()


def iter_rows(rows: Any, table: str) -> Iterator[Mapping[str, Any]]:
    """Yield mapping rows from an iterable of mappings or a DataFrame-like object."""

    if rows is None:
        raise DataLoadError(f"Missing {table} table")
    if hasattr(rows, "to_dict") and not isinstance(rows, Mapping):
        rows = rows.to_dict(orient="records")
    try:
        iterator = iter(rows)
    except TypeError as exc:
        raise DataLoadError(f"{table} table is not iterable: {type(rows).__name__}") from exc
    for number, row in enumerate(iterator):
        if not isinstance(row, Mapping):
            LOGGER.debug("Skipping %s row %d: not a mapping", table, number)
            continue
        yield row


def word_entry_from_row(row: Mapping[str, Any]) -> Optional[WordEntry]:
    word = clean_word(parse_text(row.get("word")))
    if not word:
        return None
    zipf = parse_optional_float(row.get("zipf"))
    return WordEntry(
        word=word,
        zipf=zipf,
        is_clueable=parse_bool(row.get("is_clueable")),
        pos=parse_text(row.get("pos")).lower(),
        flags=parse_text(row.get("flags")),
        theme_tags=parse_text(row.get("theme_tags")),
        banned=parse_bool(row.get("banned")),
        must_keep=parse_bool(row.get("in_must_keep", row.get("must_keep"))),
        sources=parse_text(row.get("sources")),
    )


def segment_from_row(row: Mapping[str, Any]) -> Optional[Segment]:
    text = clean_word(parse_text(row.get("text")))
    if not MIN_SEGMENT_LENGTH <= len(text) <= MAX_SEGMENT_LENGTH:
        return None
    return Segment(
        text=text,
        combo_count=parse_int(row.get("combo_count")),
        start_combo_count=parse_int(row.get("start_combo_count")),
        is_syntactic=parse_bool(row.get("is_syntactic")),
        morph_prefix=parse_bool(row.get("morph_prefix")),
        morph_suffix=parse_bool(row.get("morph_suffix")),
        pos_start=parse_bool(row.get("pos_start")),
        pos_end=parse_bool(row.get("pos_end")),
        atomic_slice=parse_bool(row.get("atomic_slice")),
        semantic_weight=parse_float(row.get("semantic_weight")),
        game_weight=parse_float(row.get("game_weight")),
    )


def _merge_entries(existing: WordEntry, incoming: WordEntry) -> WordEntry:
    """Combine duplicate rows: keep the higher zipf, OR the boolean flags."""

    zipf = existing.zipf
    if incoming.zipf is not None and (zipf is None or incoming.zipf > zipf):
        zipf = incoming.zipf
    return WordEntry(
        word=existing.word,
        zipf=zipf,
        is_clueable=existing.is_clueable or incoming.is_clueable,
        pos=existing.pos or incoming.pos,
        flags=existing.flags or incoming.flags,
        theme_tags=existing.theme_tags or incoming.theme_tags,
        banned=existing.banned or incoming.banned,
        must_keep=existing.must_keep or incoming.must_keep,
        sources=existing.sources or incoming.sources,
    )


def load_word_entries(rows: Iterable[Mapping[str, Any]] | Any) -> List[WordEntry]:
    """Return deduplicated entries in first-seen order."""

    aggregated: Dict[str, WordEntry] = {}
    skipped = 0
    for row in iter_rows(rows, "lexicon"):
        entry = word_entry_from_row(row)
        if entry is None:
            skipped += 1
            continue
        existing = aggregated.get(entry.word)
        aggregated[entry.word] = entry if existing is None else _merge_entries(existing, entry)
    if skipped:
        LOGGER.debug("Skipped %d lexicon rows without a usable word", skipped)
    LOGGER.info("Loaded %d lexicon entries", len(aggregated))
    return list(aggregated.values())


def merge_lexicon_rows(
    word_rows: Iterable[Mapping[str, Any]] | Any,
    attribute_rows: Iterable[Mapping[str, Any]] | Any = (),
) -> List[WordEntry]:
    """Join a playable word list with an attribute table keyed by word.

    The word list decides membership and clueability; the attribute table
    contributes zipf, part of speech, flags and tags. Attribute rows for
    words outside the list are ignored.
    """

    attributes: Dict[str, WordEntry] = {}
    for row in iter_rows(attribute_rows, "attribute"):
        entry = word_entry_from_row(row)
        if entry is not None and entry.word not in attributes:
            attributes[entry.word] = entry

    entries: Dict[str, WordEntry] = {}
    for row in iter_rows(word_rows, "word list"):
        word = clean_word(parse_text(row.get("word")))
        if not word or word in entries:
            continue
        clueable = parse_bool(row.get("is_clueable"))
        base = attributes.get(word)
        if base is None:
            entries[word] = WordEntry(word=word, is_clueable=clueable)
        else:
            entries[word] = WordEntry(
                word=word,
                zipf=base.zipf,
                is_clueable=clueable or base.is_clueable,
                pos=base.pos,
                flags=base.flags,
                theme_tags=base.theme_tags,
                banned=base.banned,
                must_keep=base.must_keep,
                sources=base.sources,
            )
    LOGGER.info(
        "Merged %d playable words with %d attribute rows",
        len(entries),
        len(attributes),
    )
    return list(entries.values())


def load_segments(rows: Iterable[Mapping[str, Any]] | Any) -> List[Segment]:
    """Return one segment per text; later rows replace earlier ones."""

    segments: Dict[str, Segment] = {}
    skipped = 0
    for row in iter_rows(rows, "segment"):
        segment = segment_from_row(row)
        if segment is None:
            skipped += 1
            continue
        segments[segment.text] = segment
    if skipped:
        LOGGER.debug(
            "Skipped %d segment rows outside %d-%d letters",
            skipped,
            MIN_SEGMENT_LENGTH,
            MAX_SEGMENT_LENGTH,
        )
    LOGGER.info("Loaded %d segments", len(segments))
    return list(segments.values())


__all__ = [
    "iter_rows",
    "load_segments",
    "load_word_entries",
    "merge_lexicon_rows",
    "parse_bool",
    "parse_float",
    "parse_int",
    "parse_optional_float",
    "segment_from_row",
    "word_entry_from_row",
]
