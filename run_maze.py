"""Solve a maze file from the command line.

Usage:
    python run_maze.py maze.txt [--render] [--axes] [--method collapsed]
    python run_maze.py - < maze.txt

Prints the cheapest cost from S (facing East) to E and how many cells lie on
at least one cheapest route.  Exit status: 0 ok, 1 no path, 2 unreadable or
malformed maze, 3 inconsistent searches.
"""

import argparse
import logging
import sys
from pathlib import Path

from backend.algorithms.maze_grid import MalformedGridError, parse_grid, render_grid
from backend.algorithms.oriented_states import CostModel, MOVE_COST, TURN_COST
from backend.algorithms.path_membership import METHODS, InconsistencyError, PathMembership

logger = logging.getLogger("run_maze")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cheapest route through a maze where turning costs extra.")
    parser.add_argument("maze", help="maze text file, or - for stdin")
    parser.add_argument("--method", choices=METHODS, default="oriented")
    parser.add_argument("--move-cost", type=int, default=MOVE_COST)
    parser.add_argument("--turn-cost", type=int, default=TURN_COST)
    parser.add_argument("--render", action="store_true", help="print the maze with optimal cells marked O")
    parser.add_argument("--axes", action="store_true", help="add coordinate digits to the rendering")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    try:
        text = sys.stdin.read() if args.maze == "-" else Path(args.maze).read_text()
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    try:
        grid = parse_grid(text)
        costs = CostModel(move=args.move_cost, turn=args.turn_cost)
    except (MalformedGridError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    logger.info("loaded %dx%d maze", grid.width, grid.height)

    try:
        result = PathMembership(grid, costs=costs, method=args.method).solve()
    except InconsistencyError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3

    if not result.reachable:
        print("best cost: no path")
        return 1
    print(f"best cost: {result.best_cost}")
    print(f"tiles on optimal paths: {result.tile_count}")
    if args.render:
        print(render_grid(grid, result.tiles, axes=args.axes))
    return 0


if __name__ == "__main__":
    sys.exit(main())
