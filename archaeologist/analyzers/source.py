"""Per-file structural analysis."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .base import Extraction, Extractor
from .languages import language_for_extension
from .patterns import PatternExtractor, calculate_complexity
from .tree_sitter import TreeSitterExtractor
from ..logging import get_logger
from ..models import FileAnalysis

logger = get_logger("analyzers.source")


class SourceAnalyzer:
    """Builds a FileAnalysis for one file of a supported language."""

    def __init__(
        self,
        *,
        structured: Optional[Extractor] = None,
        fallback: Optional[Extractor] = None,
    ) -> None:
        self.structured = structured if structured is not None else TreeSitterExtractor()
        self.fallback = fallback if fallback is not None else PatternExtractor()

    def analyze_file(self, path: Path) -> Optional[FileAnalysis]:
        """Read and analyze ``path``; unsupported or unreadable files yield None."""
        if language_for_extension(path.suffix) is None:
            return None
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Skipping unreadable file %s: %s", path, exc)
            return None
        return self.analyze_source(content, path.suffix, str(path))

    def analyze_source(self, content: str, extension: str, path: str) -> Optional[FileAnalysis]:
        spec = language_for_extension(extension)
        if spec is None:
            return None

        extraction: Optional[Extraction] = None
        if spec.structured:
            try:
                extraction = self.structured.extract(content, spec.name, extension)
            except Exception as exc:  # pragma: no cover - parser failure
                logger.debug("Structured parse of %s failed: %s", path, exc)
                extraction = None
            if extraction is None:
                logger.debug("Falling back to pattern extraction for %s", path)
        if extraction is None:
            extraction = self.fallback.extract(content, spec.name, extension) or Extraction()

        return FileAnalysis(
            path=path,
            language=spec.name,
            size=len(content.encode("utf-8")),
            lines=len(content.split("\n")),
            imports=tuple(extraction.imports),
            functions=tuple(extraction.functions),
            classes=tuple(extraction.classes),
            exports=tuple(extraction.exports),
            complexity=calculate_complexity(content),
            interfaces=tuple(extraction.interfaces) if spec.name == "typescript" else None,
            structs=tuple(extraction.structs) if spec.name == "go" else None,
        )


__all__ = ["SourceAnalyzer"]
