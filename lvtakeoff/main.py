import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from lvtakeoff.analysis.aggregator import AnalysisProgress, BatchAnalyzer
from lvtakeoff.analysis.device_table import to_device_count_table
from lvtakeoff.analysis.document_analyzer import build_document_analyzer
from lvtakeoff.config.exceptions import ConfigurationError
from lvtakeoff.config.settings import Settings
from lvtakeoff.documents.file_loader import FileLoader
from lvtakeoff.gateway.connection import check_connection
from lvtakeoff.gateway.factory import VisionClientFactory
from lvtakeoff.logging.logger import Log


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="lv-takeoff",
        description="Count low-voltage devices on floor-plan PDFs and images",
    )
    parser.add_argument("files", nargs="*", type=Path, help="Floor-plan files to analyze")
    parser.add_argument(
        "--quick",
        action="store_true",
        help="Run the single-pass preview count instead of the 3-pass analysis",
    )
    parser.add_argument("--output", type=Path, help="Write JSON here instead of stdout")
    parser.add_argument(
        "--check-connection",
        action="store_true",
        help="Only check that the vision provider answers",
    )
    return parser.parse_args(argv)


def _log_progress(progress: AnalysisProgress) -> None:
    Log.info(f"[{progress.current}/{progress.total}] {progress.file_name}: {progress.status}")


def _write_json(payload: dict[str, Any], output: Path | None) -> None:
    text = json.dumps(payload, indent=2, default=str)
    if output is None:
        print(text)
        return
    output.write_text(text + "\n", encoding="utf-8")
    Log.info(f"Wrote results to {output}")


def main(argv: list[str] | None = None) -> int:
    """Entry point: settings -> vision client -> load files -> analyze -> JSON."""
    args = _parse_args(argv)
    try:
        settings = Settings()
    except ValidationError as exc:
        Log.error(f"Invalid configuration: {exc}")
        return 2
    Log.configure(settings.log_level)

    try:
        client = VisionClientFactory.create(settings)
    except ConfigurationError as exc:
        Log.error(str(exc))
        return 2

    if args.check_connection:
        status = check_connection(client)
        _write_json(asdict(status), args.output)
        return 0 if status.success else 1

    if not args.files:
        Log.error("No input files given")
        return 2

    try:
        documents = FileLoader().load_many(args.files)
    except FileNotFoundError as exc:
        Log.error(str(exc))
        return 2

    analyzer = build_document_analyzer(settings, client=client)
    if args.quick:
        quick_results = {
            document.name: asdict(analyzer.quick_analyze(document)) for document in documents
        }
        _write_json(quick_results, args.output)
        return 0

    batch = BatchAnalyzer(analyzer, max_workers=settings.max_workers)
    aggregate = batch.analyze_all(documents, on_progress=_log_progress)
    _write_json(
        {
            "aggregate": asdict(aggregate),
            "device_counts": to_device_count_table(aggregate),
        },
        args.output,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
