from __future__ import annotations

import argparse
import logging
from pathlib import Path

from analytics.reporting import generate_reports
from parsers.file_loader import DEFAULT_PATTERN


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate Parquet section inventories from a directory of multitext files."
    )
    parser.add_argument(
        "--source-dir",
        type=Path,
        default=Path("samples"),
        help="Directory containing multitext files (default: ./samples)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("reports"),
        help="Directory to write Parquet files into (default: reports/)",
    )
    parser.add_argument(
        "--pattern",
        default=DEFAULT_PATTERN,
        help=f"Glob for files to include (default: {DEFAULT_PATTERN})",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level))
    outputs = generate_reports(
        source_dir=args.source_dir, output_dir=args.output_dir, pattern=args.pattern
    )
    print(f"Wrote {len(outputs)} report(s) to {args.output_dir}")


if __name__ == "__main__":
    main()
