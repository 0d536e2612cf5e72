"""
Extraction module for Refinery.

Provides the main content extraction pipeline:
- Tree normalization and scoring
- Title localization
- Candidate selection
- Trash pruning
- Text formatting
"""

from refinery.extraction.normalizer import (
    TreeNormalizer,
    NormalizedDocument,
    clean_text,
    resolve_root,
)
from refinery.extraction.title_locator import TitleLocator
from refinery.extraction.candidate_walker import CandidateWalker, Contender
from refinery.extraction.trash_pruner import TrashPruner
from refinery.extraction.text_formatter import TextFormatter, INLINE_TAGS
from refinery.extraction.extractor import ContentExtractor, ExtractionResult

__all__ = [
    # Normalization
    "TreeNormalizer",
    "NormalizedDocument",
    "clean_text",
    "resolve_root",
    # Title
    "TitleLocator",
    # Candidate selection
    "CandidateWalker",
    "Contender",
    # Pruning
    "TrashPruner",
    # Formatting
    "TextFormatter",
    "INLINE_TAGS",
    # Pipeline
    "ContentExtractor",
    "ExtractionResult",
]
