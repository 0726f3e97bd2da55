from __future__ import annotations

import argparse
import logging

import uvicorn

from core.config import settings

logger = logging.getLogger(__name__)


def parse_serve_addr(value: str) -> tuple[str, int]:
    host, sep, port = value.rpartition(":")
    if not sep or not port.isdigit():
        raise argparse.ArgumentTypeError(f"expected host:port, got {value!r}")
    return host or "0.0.0.0", int(port)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Serve POST /scrape over HTTP.")
    parser.add_argument(
        "-serve",
        "--serve",
        dest="serve",
        type=parse_serve_addr,
        default=settings.serve_addr,
        help="Address:Port to serve http.",
    )
    args = parser.parse_args(argv)
    host, port = args.serve
    logging.basicConfig(level=settings.log_level.upper())
    logger.info("serving_http: %s:%s", host, port)
    uvicorn.run("api.main:app", host=host, port=port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
