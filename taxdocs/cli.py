"""
Command-line interface for the document intake tools.

Usage:
    python -m taxdocs classify FILE [FILE ...]
    python -m taxdocs parse FILE [--format json|csv]
    python -m taxdocs batch-classify DIRECTORY [--pattern GLOB] [--workers N]
"""

import argparse
import asyncio
import glob
import os
import sys
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from taxdocs.config import Settings, configure_logging, get_settings
from taxdocs.models.classification import BatchDocument, DocumentTypeResult
from taxdocs.services.batch_classifier import detect_document_types_batch
from taxdocs.services.document_classifier import thresholds_from_settings
from taxdocs.services.exporters import export_contracts_to_csv, export_detection_results, to_storage_record
from taxdocs.services.pipeline import analyze_contract
from taxdocs.services.text_source import TextExtractionError, extract_text_from_file, process_document
from taxdocs.utils.normalizers import detect_format

_SOURCE_TYPES = {"pdf": "Pdf", "image": "Image"}


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="taxdocs",
        description="Classify tax documents and extract contract/invoice fields"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    classify_parser = subparsers.add_parser(
        "classify",
        help="Classify one or more documents"
    )
    classify_parser.add_argument("files", nargs="+", metavar="FILE", help="Documents to classify")

    parse_parser = subparsers.add_parser(
        "parse",
        help="Extract contract/invoice fields from a document"
    )
    parse_parser.add_argument("file", metavar="FILE", help="Document to parse")
    parse_parser.add_argument(
        "--format",
        "-f",
        choices=["json", "csv"],
        default="json",
        help="Output format (default: json)"
    )

    batch_parser = subparsers.add_parser(
        "batch-classify",
        help="Classify every matching document in a directory"
    )
    batch_parser.add_argument("directory", metavar="DIRECTORY", help="Directory to scan")
    batch_parser.add_argument(
        "--pattern",
        "-p",
        type=str,
        default="*",
        help="Glob pattern for files (default: *)"
    )
    batch_parser.add_argument(
        "--workers",
        "-w",
        type=int,
        default=None,
        help="Worker threads (default: BATCH_WORKERS or CPU count)"
    )

    return parser


def classify_command(args: argparse.Namespace, settings: Settings) -> int:
    """Classify files and print the detection results as JSON."""
    results: List[Tuple[str, DocumentTypeResult]] = []
    failures = 0

    for path in args.files:
        try:
            processed = process_document(path)
        except TextExtractionError as e:
            print(f"Error: {e}", file=sys.stderr)
            failures += 1
            continue
        results.append((os.path.basename(path), processed.result))

    print(export_detection_results(results, thresholds_from_settings(settings)))
    return 1 if failures else 0


def parse_command(args: argparse.Namespace, settings: Settings) -> int:
    """Parse one file and print the contract (JSON) or its storage row (CSV)."""
    try:
        text = extract_text_from_file(args.file)
    except TextExtractionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    fmt = detect_format(args.file)
    analysis = analyze_contract(text, _SOURCE_TYPES.get(fmt, "Unknown"), settings)

    if args.format == "csv":
        record = to_storage_record(analysis.contract, args.file, fmt)
        record["id"] = os.path.basename(args.file)
        record["created_at"] = datetime.now(timezone.utc).isoformat()
        print(export_contracts_to_csv([record]), end="")
    else:
        print(analysis.model_dump_json(indent=2))
    return 0


def _collect_files(directory: str, pattern: str) -> List[str]:
    return sorted(
        path for path in glob.glob(os.path.join(directory, pattern))
        if os.path.isfile(path)
    )


async def batch_classify_command(args: argparse.Namespace, settings: Settings) -> int:
    """
    Classify every matching file in a directory concurrently.

    Returns:
        int: 0 if at least one file was classified, 1 otherwise
    """
    if not os.path.isdir(args.directory):
        print(f"Error: Not a directory: {args.directory}", file=sys.stderr)
        return 1

    if args.workers is not None and args.workers < 1:
        print("Error: --workers must be at least 1", file=sys.stderr)
        return 1

    files = _collect_files(args.directory, args.pattern)
    if not files:
        print(f"No files matching {args.pattern} in {args.directory}")
        return 1

    documents: List[BatchDocument] = []
    extraction_failures: List[str] = []
    for path in files:
        try:
            text = await asyncio.to_thread(extract_text_from_file, path)
        except TextExtractionError as e:
            extraction_failures.append(f"{os.path.basename(path)}: {e.reason}")
            continue
        documents.append(BatchDocument(text=text, file_path=path))

    results = await detect_document_types_batch(
        documents,
        args.workers,
        thresholds=thresholds_from_settings(settings),
        unique_identifier_bonus=settings.unique_identifier_bonus,
    )

    succeeded = 0
    for item in results:
        name = os.path.basename(item.file_path or f"#{item.index}")
        if item.status == "ok" and item.result is not None:
            succeeded += 1
            print(f"  {name}: {item.result.type} ({item.result.confidence:.2f}, {item.result.method})")
        else:
            print(f"  {name}: FAILED {item.error}")
    for failure in extraction_failures:
        print(f"  {failure} (text extraction failed)")

    print(f"\nClassified {succeeded}/{len(files)} files")
    return 0 if succeeded > 0 else 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        settings = get_settings()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging(settings.log_level)

    if args.command == "classify":
        return classify_command(args, settings)
    if args.command == "parse":
        return parse_command(args, settings)
    if args.command == "batch-classify":
        try:
            return asyncio.run(batch_classify_command(args, settings))
        except KeyboardInterrupt:
            print("\n\nInterrupted by user", file=sys.stderr)
            return 1

    print(f"Unknown command: {args.command}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
