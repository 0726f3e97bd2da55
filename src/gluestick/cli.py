"""Command line entry point.

Reads a scrape request from ``-f FILE``, ``-in JSON`` or standard input (in
that order of precedence), runs it, and prints the result as indented JSON.
Exits 0 on success and 1 on any failure.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import TextIO

from gluestick.engine import ScrapeOutcome, scrape
from gluestick.fetcher import close_http_clients
from gluestick.request import BadRequestError, ScrapeRequest, decode_request

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gluestick",
        description="Scrape a page into JSON using a selector request.",
    )
    parser.add_argument("-f", "--file", dest="file", help="Read the request JSON from a file.")
    parser.add_argument("-in", "--input", dest="input_json", help="Request JSON given literally.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr.")
    return parser


def read_request(args: argparse.Namespace, stdin: TextIO) -> str:
    if args.file:
        return Path(args.file).read_text(encoding="utf-8")
    if args.input_json:
        return args.input_json
    return stdin.read()


async def _run(request: ScrapeRequest) -> ScrapeOutcome:
    try:
        return await scrape(request)
    finally:
        await close_http_clients()


def main(
    argv: list[str] | None = None,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    try:
        raw = read_request(args, stdin)
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("read_failed: %s", exc)
        return 1
    try:
        request = decode_request(raw)
        outcome = asyncio.run(_run(request))
    except BadRequestError as exc:
        logger.error("bad_request: %s", exc)
        return 1
    if not outcome.success:
        logger.error("scrape_failed: %s", outcome.error)
        return 1
    try:
        payload = json.dumps(outcome.results, indent=4)
    except (TypeError, ValueError) as exc:
        logger.error("serialize_failed: %s", exc)
        return 1
    stdout.write(payload + "\n")
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
