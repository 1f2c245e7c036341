from __future__ import annotations

import argparse
import logging
from typing import List, Optional

import uvicorn

from ..engine.history import DEFAULT_HISTORY_CAPACITY
from ..protocol.http.app import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve the mailbox chess engine over HTTP")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Bind address")
    parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--history-capacity",
        type=int,
        default=DEFAULT_HISTORY_CAPACITY,
        help=f"Maximum ply per game (default: {DEFAULT_HISTORY_CAPACITY})",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    if args.history_capacity < 1:
        raise SystemExit("--history-capacity must be >= 1")
    app = create_app(
        history_capacity=args.history_capacity,
        log_level=getattr(logging, args.log_level),
    )
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
