"""File-to-file dependency graph built from resolved imports."""

from __future__ import annotations

import os
from typing import Dict, Sequence

from .resolver import ImportResolver
from ..logging import get_logger
from ..models import CallGraph, CallGraphNode, FileAnalysis

logger = get_logger("graph.call_graph")


def build_call_graph(analyses: Sequence[FileAnalysis], resolver: ImportResolver) -> CallGraph:
    """Return a node per analysed file with symmetric ``calls``/``called_by`` edges.

    Imports that do not resolve, or that resolve to files outside the analysed
    set, add no edge.
    """
    graph: CallGraph = {analysis.path: CallGraphNode() for analysis in analyses}
    known: Dict[str, str] = {os.path.normpath(path): path for path in graph}

    unresolved = 0
    for analysis in analyses:
        node = graph[analysis.path]
        for specifier in analysis.imports:
            resolved = resolver.resolve(analysis.path, specifier)
            target = known.get(resolved) if resolved is not None else None
            if target is None:
                unresolved += 1
                continue
            node.calls.add(target)
            graph[target].called_by.add(analysis.path)

    edges = sum(len(node.calls) for node in graph.values())
    logger.debug("Call graph: %d nodes, %d edges, %d unresolved imports", len(graph), edges, unresolved)
    return graph


__all__ = ["build_call_graph"]
