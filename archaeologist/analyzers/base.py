"""Shared contracts for per-language extraction strategies."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Set


@dataclass
class Extraction:
    """Names collected from one source file, in first-seen order without duplicates."""

    imports: List[str] = field(default_factory=list)
    functions: List[str] = field(default_factory=list)
    classes: List[str] = field(default_factory=list)
    exports: List[str] = field(default_factory=list)
    interfaces: List[str] = field(default_factory=list)
    structs: List[str] = field(default_factory=list)
    _seen: Dict[str, Set[str]] = field(default_factory=dict, init=False, repr=False, compare=False)

    def add(self, bucket: str, value: Optional[str]) -> None:
        if not value:
            return
        values: List[str] = getattr(self, bucket)
        seen = self._seen.get(bucket)
        if seen is None:
            seen = self._seen[bucket] = set(values)
        if value not in seen:
            seen.add(value)
            values.append(value)


class Extractor(Protocol):
    """Strategy that turns file content into an Extraction, or None when it cannot."""

    def extract(self, content: str, language: str, extension: str) -> Optional[Extraction]:
        ...


__all__ = ["Extraction", "Extractor"]
