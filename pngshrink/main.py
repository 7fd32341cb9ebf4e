#!/usr/bin/env python
"""Shrink PNG files with the TinyPNG web service."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from pngshrink.config import get_settings
from pngshrink.handlers.batch_handler import collect_candidates, run_batch
from pngshrink.services.credentials import CredentialError
from pngshrink.services.reachability import ServiceUnreachableError

logger = logging.getLogger("pngshrink")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pngshrink",
        description="Upload PNG files to TinyPNG and fetch the compressed results.",
        epilog=(
            "Arguments after -- are all treated as files. Results are named "
            "shrunk_<basename>, so of several files sharing a basename only "
            "the first is shrunk."
        ),
    )
    parser.add_argument("-f", "--file", dest="files", action="append", default=[], metavar="FILE", help="PNG file to shrink (repeatable)")
    parser.add_argument("-d", "--download", metavar="DIR", type=Path, help="download shrunk files into DIR instead of printing URLs")
    parser.add_argument("-k", "--key", metavar="KEY", help="API key for this run (not saved)")
    parser.add_argument("-p", "--print", dest="force_print", action="store_true", help="print URLs even when downloading")
    parser.add_argument("-v", "--verbose", action="store_true", help="log requests and other debug output")
    parser.add_argument("rest", nargs="*", metavar="FILE", help=argparse.SUPPRESS)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level.upper(),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    candidates = collect_candidates([*args.files, *args.rest])
    if not candidates:
        logger.error("No PNG files to shrink")
        parser.print_usage(sys.stderr)
        return 1

    try:
        run_batch(
            candidates,
            settings,
            api_key=args.key,
            download_dir=args.download,
            force_print=args.force_print,
        )
    except CredentialError as exc:
        logger.error("%s", exc)
        return 1
    except ServiceUnreachableError as exc:
        logger.error("%s; is the network up?", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
