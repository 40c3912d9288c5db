"""HTTP service mode for repository analysis."""

from .app import AnalyzeRequest, create_app, run_service

__all__ = ["AnalyzeRequest", "create_app", "run_service"]
