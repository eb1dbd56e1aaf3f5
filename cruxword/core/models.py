"""Data models supporting the fill engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from .constants import MAX_SEGMENT_LENGTH, MIN_SEGMENT_LENGTH, Direction
from .exceptions import InvariantViolation


@dataclass(frozen=True)
class WordEntry:
    """A lexicon word with its frequency and editorial attributes."""

    word: str
    zipf: Optional[float] = None
    is_clueable: bool = False
    pos: str = ""
    flags: str = ""
    theme_tags: str = ""
    banned: bool = False
    must_keep: bool = False
    sources: str = ""

    @property
    def length(self) -> int:
        return len(self.word)

    @property
    def flag_set(self) -> Set[str]:
        return {flag.strip().lower() for flag in self.flags.replace(";", "|").split("|") if flag.strip()}

    def is_proper_noun(self) -> bool:
        return self.pos.lower() == "noun" and "proper" in self.flag_set


@dataclass(frozen=True)
class Segment:
    """A 2-5 letter building block with productivity and morphology metadata."""

    text: str
    combo_count: int = 0
    start_combo_count: int = 0
    is_syntactic: bool = False
    morph_prefix: bool = False
    morph_suffix: bool = False
    pos_start: bool = False
    pos_end: bool = False
    atomic_slice: bool = False
    semantic_weight: float = 0.0
    game_weight: float = 0.0

    def __post_init__(self) -> None:
        if not MIN_SEGMENT_LENGTH <= len(self.text) <= MAX_SEGMENT_LENGTH:
            raise InvariantViolation(
                f"Segment '{self.text}' has length {len(self.text)}, "
                f"expected {MIN_SEGMENT_LENGTH}-{MAX_SEGMENT_LENGTH}"
            )
        if self.combo_count < 0 or self.start_combo_count < 0:
            raise InvariantViolation(f"Segment '{self.text}' has negative productivity counters")

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def opens_word(self) -> bool:
        return self.pos_start or self.morph_prefix

    @property
    def closes_word(self) -> bool:
        return self.pos_end or self.morph_suffix

    @property
    def productivity(self) -> int:
        return self.combo_count + self.start_combo_count


@dataclass(frozen=True)
class Crossing:
    """Reference from a slot cell to the perpendicular slot sharing it."""

    index: int
    other_slot_id: str


@dataclass
class Slot:
    """A fillable run of cells with its current pattern."""

    id: str
    direction: Direction
    length: int
    cells: List[Tuple[int, int]]
    pattern: str
    crossings: List[Crossing] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.pattern) != self.length:
            raise InvariantViolation(
                f"Slot {self.id}: pattern '{self.pattern}' does not match length {self.length}"
            )
        if len(self.cells) != self.length:
            raise InvariantViolation(
                f"Slot {self.id}: {len(self.cells)} cells for length {self.length}"
            )

    @property
    def start(self) -> Tuple[int, int]:
        return self.cells[0]


@dataclass
class Candidate:
    """A ranked dictionary word for a slot."""

    word: str
    score: float
    segmentation_score: float
    zipf: float
    crossing_bonus: float
    pieces: List[str]
    is_clueable: bool = False
    theme_tags: str = ""


@dataclass
class SegmentChain:
    """Letters assembled directly from catalog segments."""

    letters: str
    segments: List[str]
    score: float
    usable: bool
    remaining: List[int]


@dataclass
class BoardCell:
    """A filled board cell and the pieces that wrote it."""

    letter: str
    owners: Set[str] = field(default_factory=set)


@dataclass(frozen=True)
class PlacedPiece:
    """A piece registered on the board."""

    piece_id: str
    text: str
    direction: Direction
    row: int
    col: int

    @property
    def cells(self) -> List[Tuple[int, int]]:
        dr, dc = self.direction.step
        return [(self.row + dr * i, self.col + dc * i) for i in range(len(self.text))]


@dataclass(frozen=True)
class BoardWord:
    """A contiguous run read off the board."""

    text: str
    direction: Direction
    row: int
    col: int
    length: int

    @property
    def cells(self) -> List[Tuple[int, int]]:
        dr, dc = self.direction.step
        return [(self.row + dr * i, self.col + dc * i) for i in range(self.length)]


@dataclass
class ValidationResult:
    ok: bool
    issues: List[str]
    density: float
    filled_cells: int
    word_count: int
    score: int
    words: List[BoardWord] = field(default_factory=list)

    def to_jsonable(self) -> Dict[str, object]:
        return {
            "ok": self.ok,
            "issues": list(self.issues),
            "density": self.density,
            "filledCells": self.filled_cells,
            "wordCount": self.word_count,
            "score": self.score,
            "words": [
                {
                    "text": word.text,
                    "dir": "H" if word.direction is Direction.ACROSS else "V",
                    "row": word.row,
                    "col": word.col,
                    "len": word.length,
                }
                for word in self.words
            ],
        }
