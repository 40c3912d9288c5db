"""Repository architecture reconstruction from source structure and git history."""

from .config import AnalyzerOptions, get_analyzer_options
from .models import AnalysisResult, FileAnalysis
from .orchestrator import RepositoryAnalyzer

__all__ = [
    "AnalysisResult",
    "AnalyzerOptions",
    "FileAnalysis",
    "RepositoryAnalyzer",
    "get_analyzer_options",
]

__version__ = "0.1.0"
