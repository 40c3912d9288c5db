"""Per-file source analysis: language detection and extraction strategies."""

from __future__ import annotations

from .base import Extraction, Extractor
from .languages import LANGUAGES, LanguageSpec, detect_language
from .patterns import PatternExtractor, calculate_complexity
from .source import SourceAnalyzer
from .tree_sitter import TreeSitterExtractor

__all__ = [
    "Extraction",
    "Extractor",
    "LANGUAGES",
    "LanguageSpec",
    "PatternExtractor",
    "SourceAnalyzer",
    "TreeSitterExtractor",
    "calculate_complexity",
    "detect_language",
]
