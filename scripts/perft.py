#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import time
import os
import sys
from typing import List, Optional

# Allow running this script directly via `python scripts/perft.py`
# by adding the repo root (which contains `mailbox_chess/`) to sys.path.
REPO_ROOT = os.path.dirname(os.path.dirname(__file__))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from mailbox_chess.engine.board import Board, STARTPOS_FEN
from mailbox_chess.engine.perft import divide, perft


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Run perft on a given FEN and depth")
    parser.add_argument(
        "--fen", type=str, default=STARTPOS_FEN, help="FEN string (default: startpos)"
    )
    parser.add_argument("--depth", type=int, default=3, help="Perft depth (default: 3)")
    parser.add_argument("--divide", action="store_true", help="Print counts per root move")
    parser.add_argument(
        "--history-capacity", type=int, default=400, help="Maximum ply held by the board"
    )
    args = parser.parse_args(argv)
    if args.depth < 0:
        parser.error("--depth must be >= 0")
    if args.divide and args.depth < 1:
        parser.error("--divide needs --depth >= 1")

    board = Board.from_fen(args.fen, history_capacity=max(args.history_capacity, args.depth))
    start = time.perf_counter()
    if args.divide:
        counts = divide(board, args.depth)
        for mv, n in sorted(counts.items()):
            print(f"{mv}: {n}")
        nodes = sum(counts.values())
    else:
        nodes = perft(board, args.depth)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")


if __name__ == "__main__":
    main()
