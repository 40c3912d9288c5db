"""Extension to language lookup and per-language extraction strategy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class LanguageSpec:
    """A supported language and the way its files are analyzed.

    ``structured`` languages are parsed into a syntax tree first and only fall
    back to the pattern tables when parsing fails; the rest are pattern-only.
    """

    name: str
    extensions: Tuple[str, ...]
    structured: bool = False


LANGUAGES: Tuple[LanguageSpec, ...] = (
    LanguageSpec("javascript", (".js", ".jsx", ".mjs"), structured=True),
    LanguageSpec("typescript", (".ts", ".tsx"), structured=True),
    LanguageSpec("python", (".py",)),
    LanguageSpec("java", (".java",)),
    LanguageSpec("go", (".go",)),
)

_BY_EXTENSION: Dict[str, LanguageSpec] = {
    extension: spec for spec in LANGUAGES for extension in spec.extensions
}


def language_for_extension(extension: str) -> Optional[LanguageSpec]:
    return _BY_EXTENSION.get(extension.lower())


def detect_language(extension: str) -> Optional[str]:
    """Return the language name for ``extension`` (``".py"``), or None."""
    spec = language_for_extension(extension)
    return spec.name if spec is not None else None


__all__ = ["LANGUAGES", "LanguageSpec", "detect_language", "language_for_extension"]
