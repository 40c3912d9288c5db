"""CLI entrypoints for repo-archaeologist commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable

from .config import get_analyzer_options
from .insights import DEFAULT_RISK_THRESHOLD, categorize_files, identify_features, rank_risky_files
from .logging import configure_logging
from .models import AnalysisResult
from .orchestrator import RepositoryAnalyzer
from .reports import (
    build_map_payload,
    render_analysis_text,
    render_architecture_map,
    render_onboarding_guide,
    render_risk_report,
    to_json,
)

AnalyzerFactory = Callable[[str], RepositoryAnalyzer]


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Write the report to this file instead of stdout.",
    )
    parser.add_argument(
        "--ignore",
        help="Comma-separated path segments or globs to skip, added to the defaults.",
    )
    parser.add_argument(
        "--include-tests",
        action="store_true",
        help="Consider test files when looking for dead code.",
    )
    parser.add_argument(
        "--skip-cochange",
        action="store_true",
        help="Skip co-change analysis (faster on large histories).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Increase log verbosity for troubleshooting.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repo-archaeologist",
        description="Reconstruct a repository's architecture from its code and history.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Summarise languages, contributors and dead code.",
    )
    _add_common_options(analyze_parser)
    analyze_parser.add_argument("--format", choices=("text", "json"), default="text")

    map_parser = subparsers.add_parser(
        "map",
        help="Generate an architecture map of file categories and features.",
    )
    _add_common_options(map_parser)
    map_parser.add_argument("--format", choices=("markdown", "json"), default="markdown")

    onboard_parser = subparsers.add_parser(
        "onboard",
        help="Generate an onboarding guide for new contributors.",
    )
    _add_common_options(onboard_parser)

    risk_parser = subparsers.add_parser(
        "risk",
        help="Rank files by refactor risk.",
    )
    _add_common_options(risk_parser)
    risk_parser.add_argument(
        "--threshold",
        type=int,
        default=DEFAULT_RISK_THRESHOLD,
        help=f"Minimum risk score to report (default {DEFAULT_RISK_THRESHOLD}).",
    )

    return parser


def main(argv: list[str] | None = None, *, analyzer_factory: AnalyzerFactory = RepositoryAnalyzer) -> None:
    """CLI entrypoint for repo-archaeologist commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    wants_json = getattr(args, "format", None) == "json" and not args.output
    configure_logging(verbose=bool(args.verbose), quiet=wants_json)

    options = get_analyzer_options(
        ignore=args.ignore,
        include_tests=args.include_tests,
        skip_cochange=args.skip_cochange,
    )

    try:
        result = analyzer_factory(args.path).run(options)
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except Exception as exc:
        parser.exit(
            1,
            f"repo-archaeologist {args.command} failed: {exc}\nRun with --verbose for more details.\n",
        )

    report = _render(args, result)
    if args.output:
        Path(args.output).write_text(report, encoding="utf-8")
        print(f"Report saved to {_relativize(Path(args.output))}")
    else:
        sys.stdout.write(report)


def _render(args: argparse.Namespace, result: AnalysisResult) -> str:
    if args.command == "analyze":
        if args.format == "json":
            return to_json(result.to_dict()) + "\n"
        return render_analysis_text(result)

    if args.command == "map":
        categories = categorize_files(result.files, result.repository)
        features = identify_features(result.files, result.repository)
        if args.format == "json":
            return to_json(build_map_payload(result, categories, features)) + "\n"
        return render_architecture_map(result, categories, features)

    if args.command == "onboard":
        categories = categorize_files(result.files, result.repository)
        features = identify_features(result.files, result.repository)
        return render_onboarding_guide(result, categories, features)

    if args.command == "risk":
        risky = rank_risky_files(result.files, args.threshold)
        return render_risk_report(result.repository, risky, args.threshold)

    raise ValueError(f"Unknown command: {args.command}")  # pragma: no cover - argparse enforces choices


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
