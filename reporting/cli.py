#!/usr/bin/env python3
"""
CLI for generating CMA reports offline.

Usage:
    python -m reporting.cli cma <subject_json> --store <properties_json>

Examples:
    # PDF for a subject against a JSON export of the properties table
    python -m reporting.cli cma subjects/naples.json --store data/properties.json

    # JSON report instead of PDF
    python -m reporting.cli cma subjects/naples.json --store data/properties.json --json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from core.cma import CMAGenerator
from core.comp_engine import CompEngineError
from core.storage import InMemoryPropertyStore
from utils.config import Config

from .cma_pdf import generate_cma_pdf


logger = logging.getLogger(__name__)


def load_subject(path: Path):
    """Parse a subject JSON file with the same rules as POST /cma/generate."""
    from web.cma_routes import CMARequest

    data = json.loads(path.read_text())
    return CMARequest.model_validate(data)


def cmd_cma(args, config: Config) -> int:
    """Generate a CMA for a subject file."""
    subject_path = Path(args.subject_file)
    if not subject_path.exists():
        print(f"Error: File not found: {subject_path}", file=sys.stderr)
        return 1

    try:
        request = load_subject(subject_path)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"Error: Invalid subject data: {e}", file=sys.stderr)
        return 1

    try:
        store = InMemoryPropertyStore.from_json_file(args.store)
        generator = CMAGenerator(
            store,
            base_rate_per_sqft=config.cma_base_rate_per_sqft,
            include_sold=not args.exclude_sold and config.cma_include_sold,
        )
        report = generator.generate(request.to_reference(), request.limit or config.cma_default_limit)
    except CompEngineError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
        return 0

    result = generate_cma_pdf(report, output_dir=Path(args.output_dir or config.reports_dir))
    print(f"Report generated: {result.path}")
    print(f"Comparables included: {result.comparables_included}")
    return 0


def main(argv=None) -> int:
    """Main CLI entry point."""
    config = Config.load()
    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")

    parser = argparse.ArgumentParser(
        description="Comparative Market Analysis generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m reporting.cli cma subjects/naples.json --store data/properties.json

Output:
    Reports are saved to: <REPORTS_DIR>/CMA-<city>-<timestamp>.pdf
        """,
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    cma_parser = subparsers.add_parser(
        "cma",
        help="Generate a CMA report for a subject property",
    )
    cma_parser.add_argument("subject_file", help="Path to subject JSON (POST /cma/generate body)")
    cma_parser.add_argument("--store", required=True, help="Path to properties JSON")
    cma_parser.add_argument("--output-dir", help="Directory for the PDF (default: REPORTS_DIR)")
    cma_parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    cma_parser.add_argument("--exclude-sold", action="store_true", help="Active listings only")
    cma_parser.set_defaults(func=cmd_cma)

    args = parser.parse_args(argv)
    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
