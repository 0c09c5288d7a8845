from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from parsers.errors import MultitextError
from parsers.file_loader import load_multitext
from parsers.multitext import DUPLICATE_POLICIES


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print a section (or the list of section keys) from a multitext file."
    )
    parser.add_argument(
        "--file",
        type=Path,
        required=True,
        help="Multitext file to read",
    )
    parser.add_argument(
        "--section",
        default=None,
        help="Key of the section to print (default: list keys)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List section keys in document order",
    )
    parser.add_argument(
        "--encoding",
        default="utf-8",
        help="Text encoding of the file (default: utf-8)",
    )
    parser.add_argument(
        "--duplicates",
        default="last",
        choices=DUPLICATE_POLICIES,
        help="How repeated section keys are handled (default: last)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level))

    try:
        loaded = load_multitext(
            args.file, encoding=args.encoding, duplicates=args.duplicates
        )
    except (MultitextError, OSError, UnicodeDecodeError) as exc:
        print(exc, file=sys.stderr)
        return 1

    document = loaded.document
    if args.list or args.section is None:
        for key in document:
            print(key)
        return 0

    if args.section not in document:
        print(f"No section {args.section!r} in {args.file}", file=sys.stderr)
        return 1

    sys.stdout.write(document[args.section])
    return 0


if __name__ == "__main__":
    sys.exit(main())
