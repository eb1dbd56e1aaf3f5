"""Segment-aware fill engine for crossword boards.

This package exposes the public API surface via:

- ``cruxword.engine.session.FillSession``: board, fill index and inventory for one puzzle.
- ``cruxword.engine.candidates.get_candidates``: ranked dictionary words for a slot.
- ``cruxword.engine.chains.find_top_segment_chains``: slot letters built from segments.
- ``cruxword.engine.validator.validate_and_score``: board rules and scoring.

Lexicon and segment data are passed in as row tables; nothing here reads
files or talks to the network.
"""

from .data.lexicon import Lexicon
from .data.segments import SegmentCatalog
from .engine.board import Board
from .engine.candidates import CandidateScorer, ScoringConfig, get_candidates
from .engine.chains import ChainFinderConfig, SegmentChainFinder, find_top_segment_chains
from .engine.fill_index import FillIndex
from .engine.inventory import Inventory
from .engine.segmentation import best_segmentation
from .engine.session import FillSession
from .engine.validator import ValidatorConfig, validate_and_score

__all__ = [
    "Board",
    "CandidateScorer",
    "ChainFinderConfig",
    "FillIndex",
    "FillSession",
    "Inventory",
    "Lexicon",
    "ScoringConfig",
    "SegmentCatalog",
    "SegmentChainFinder",
    "ValidatorConfig",
    "best_segmentation",
    "find_top_segment_chains",
    "get_candidates",
    "validate_and_score",
]

__version__ = "0.1.0"
