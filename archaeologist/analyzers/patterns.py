"""Pattern-matching extraction used when no syntax tree is available."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Pattern, Tuple

from .base import Extraction

_FLAGS = re.MULTILINE


@dataclass(frozen=True)
class PatternSet:
    """Regular expressions for one language; every non-empty group is a match."""

    imports: Tuple[Pattern[str], ...]
    functions: Tuple[Pattern[str], ...]
    classes: Tuple[Pattern[str], ...]
    exports: Tuple[Pattern[str], ...] = ()
    interfaces: Tuple[Pattern[str], ...] = ()
    structs: Tuple[Pattern[str], ...] = ()
    grouped_imports: Optional[Pattern[str]] = None
    # Captures such as ``import os, sys`` hold several comma-separated names.
    split_lists: bool = False
    reserved: FrozenSet[str] = frozenset()


_JS_IMPORTS = (
    re.compile(r"""\bimport\s+(?!type\b)[^;'"]*?\bfrom\s*['"]([^'"\n]+)['"]""", _FLAGS),
    re.compile(r"""^\s*import\s*['"]([^'"\n]+)['"]""", _FLAGS),
    re.compile(r"""\brequire\s*\(\s*['"]([^'"\n]+)['"]\s*\)""", _FLAGS),
    re.compile(r"""\bimport\s*\(\s*['"]([^'"\n]+)['"]\s*\)""", _FLAGS),
    re.compile(r"""\bexport\s+(?:\*|\*\s+as\s+[\w$]+|\{[^}]*\})\s*from\s*['"]([^'"\n]+)['"]""", _FLAGS),
)

_JS_FUNCTIONS = (
    re.compile(r"\bfunction\s*\*?\s*([\w$]+)\s*\(", _FLAGS),
    re.compile(
        r"\b(?:const|let|var)\s+([\w$]+)\s*=\s*(?:async\s+)?(?:function\b|\([^)]*\)\s*=>|[\w$]+\s*=>)",
        _FLAGS,
    ),
    re.compile(r"([\w$]+)\s*:\s*(?:async\s+)?function\b", _FLAGS),
)

_JS_CLASSES = (re.compile(r"\bclass\s+([\w$]+)", _FLAGS),)

_JS_EXPORTS = (
    re.compile(r"\bexport\s+(?:async\s+)?(?:class|function\s*\*?|const|let|var)\s+([\w$]+)", _FLAGS),
    re.compile(r"\bexport\s+(default)\b", _FLAGS),
    re.compile(r"\bexport\s+(\*)\s+from\b", _FLAGS),
    re.compile(r"\bmodule\.exports\s*=\s*([\w$]+)\s*;?\s*$", _FLAGS),
    re.compile(r"\b(?:module\.)?exports\.([\w$]+)\s*=", _FLAGS),
)

_TS_EXPORTS = _JS_EXPORTS + (
    re.compile(r"\bexport\s+(?:declare\s+)?(?:abstract\s+class|interface|type|enum)\s+([\w$]+)", _FLAGS),
)

_PYTHON = PatternSet(
    imports=(
        re.compile(r"^\s*from\s+([.\w]+)\s+import\b", _FLAGS),
        re.compile(r"^\s*import\s+([\w.]+(?:\s+as\s+\w+)?(?:\s*,\s*[\w.]+(?:\s+as\s+\w+)?)*)", _FLAGS),
    ),
    functions=(re.compile(r"^\s*(?:async\s+)?def\s+(\w+)\s*\(", _FLAGS),),
    classes=(re.compile(r"^\s*class\s+(\w+)", _FLAGS),),
    split_lists=True,
)

_JAVA = PatternSet(
    imports=(re.compile(r"^\s*import\s+(?:static\s+)?([\w.]+(?:\.\*)?)\s*;", _FLAGS),),
    functions=(
        re.compile(
            r"^[ \t]*(?:(?:public|private|protected|static|final|abstract|synchronized)\s+)*"
            r"[\w<>\[\]?,.]+(?:<[^>\n]*>)?\s+(\w+)\s*\([^)]*\)\s*(?:throws\s+[\w.,\s]+)?\{",
            _FLAGS,
        ),
    ),
    classes=(re.compile(r"\bclass\s+(\w+)", _FLAGS),),
    reserved=frozenset({"if", "for", "while", "switch", "catch", "synchronized", "return", "new", "else"}),
)

_GO = PatternSet(
    imports=(re.compile(r'^\s*import\s+(?:[\w.]+\s+)?"([^"\n]+)"', _FLAGS),),
    functions=(re.compile(r"^func\s+(?:\([^)]*\)\s*)?(\w+)\s*[\[(]", _FLAGS),),
    classes=(),
    structs=(re.compile(r"^\s*type\s+(\w+)\s+struct\b", _FLAGS),),
    grouped_imports=re.compile(r"^\s*import\s*\(([^)]*)\)", _FLAGS),
)

PATTERN_SETS: Dict[str, PatternSet] = {
    "javascript": PatternSet(
        imports=_JS_IMPORTS,
        functions=_JS_FUNCTIONS,
        classes=_JS_CLASSES,
        exports=_JS_EXPORTS,
    ),
    "typescript": PatternSet(
        imports=_JS_IMPORTS,
        functions=_JS_FUNCTIONS,
        classes=_JS_CLASSES,
        exports=_TS_EXPORTS,
        interfaces=(re.compile(r"\binterface\s+([\w$]+)", _FLAGS),),
    ),
    "python": _PYTHON,
    "java": _JAVA,
    "go": _GO,
}

_GROUPED_IMPORT_LINE = re.compile(r'"([^"\n]+)"')

_COMPLEXITY_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"\bif\b"),
    re.compile(r"\belse\b"),
    re.compile(r"\bfor\b"),
    re.compile(r"\bwhile\b"),
    re.compile(r"\bswitch\b"),
    re.compile(r"\bcase\b"),
    re.compile(r"&&"),
    re.compile(r"\|\|"),
    # A ternary ``?`` that is not part of ``?.`` or ``??``.
    re.compile(r"(?<!\?)\?(?![.?])"),
    re.compile(r"\btry\b"),
    re.compile(r"\bcatch\b"),
)


def calculate_complexity(content: str) -> int:
    """Textual cyclomatic complexity: 1 plus one per branching keyword or operator."""
    complexity = 1
    for pattern in _COMPLEXITY_PATTERNS:
        complexity += len(pattern.findall(content))
    return complexity


class PatternExtractor:
    """Extracts imports and declarations with the per-language pattern tables."""

    def extract(self, content: str, language: str, extension: str = "") -> Optional[Extraction]:
        patterns = PATTERN_SETS.get(language)
        if patterns is None:
            return None

        result = Extraction()
        for bucket in ("imports", "functions", "classes", "exports", "interfaces", "structs"):
            for pattern in getattr(patterns, bucket):
                for value in _iter_matches(pattern, content, patterns.split_lists):
                    if value in patterns.reserved:
                        continue
                    result.add(bucket, value)

        if patterns.grouped_imports is not None:
            for block in patterns.grouped_imports.finditer(content):
                for line_match in _GROUPED_IMPORT_LINE.finditer(block.group(1)):
                    result.add("imports", line_match.group(1))

        return result


def _iter_matches(pattern: Pattern[str], content: str, split_lists: bool):
    for match in pattern.finditer(content):
        for group in match.groups():
            if not group:
                continue
            if split_lists:
                for item in group.split(","):
                    name = item.strip().split()[0] if item.strip() else ""
                    if name:
                        yield name
            else:
                yield group


__all__ = ["PATTERN_SETS", "PatternExtractor", "PatternSet", "calculate_complexity"]
