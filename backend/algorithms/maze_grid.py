"""Immutable maze grid for the oriented shortest-path engine.

A maze is a rectangular block of text over ``# . S E``:

    ###########
    #S.......E#
    ###########

``#`` is a wall, ``.`` is open floor, ``S`` (start) and ``E`` (goal) are open
cells.  Coordinates are zero-based ``(col, row)`` with row 0 at the top.

Besides the open/blocked mask the grid remembers which facings are allowed
when leaving the start and when arriving at the goal.  The plain puzzle
starts facing East and accepts any facing at the goal; :meth:`GridModel.reversed`
swaps the two ends so the same search can be run backwards.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Iterable, Iterator, List, Optional, Tuple

import numpy as np

Cell = Tuple[int, int]  # (col, row)

WALL = "#"
FLOOR = "."
START = "S"
GOAL = "E"
ON_PATH = "O"


class MazeError(Exception):
    """Base class for every error raised by the maze engine."""


class MalformedGridError(MazeError, ValueError):
    """Input text cannot be turned into a GridModel."""


class Facing(IntEnum):
    North = 0
    East = 1
    South = 2
    West = 3

    def clockwise(self) -> "Facing":
        return Facing((self + 1) % 4)

    def counter_clockwise(self) -> "Facing":
        return Facing((self + 3) % 4)

    def opposite(self) -> "Facing":
        return Facing((self + 2) % 4)

    @property
    def unit(self) -> Cell:
        return _UNITS[self]

    @property
    def glyph(self) -> str:
        return "^>v<"[self]

    def step(self, cell: Cell) -> Cell:
        dx, dy = _UNITS[self]
        return cell[0] + dx, cell[1] + dy


_UNITS = {
    Facing.North: (0, -1),
    Facing.East: (1, 0),
    Facing.South: (0, 1),
    Facing.West: (-1, 0),
}

ALL_FACINGS: Tuple[Facing, ...] = tuple(Facing)


def _opposites(facings: Iterable[Facing]) -> Tuple[Facing, ...]:
    return tuple(sorted(f.opposite() for f in facings))


@dataclass(frozen=True, eq=False)
class GridModel:
    width: int
    height: int
    open_mask: np.ndarray  # [row, col] -> True when the cell is open
    start: Cell
    goal: Cell
    start_facings: Tuple[Facing, ...] = (Facing.East,)
    goal_facings: Tuple[Facing, ...] = field(default=ALL_FACINGS)

    def __post_init__(self):
        try:
            mask = np.array(self.open_mask, dtype=bool)
        except ValueError as exc:  # ragged nested lists
            raise MalformedGridError(f"open mask is not rectangular: {exc}") from exc
        if mask.shape != (self.height, self.width):
            raise MalformedGridError(
                f"open mask has shape {mask.shape}, expected {(self.height, self.width)}"
            )
        mask.setflags(write=False)
        object.__setattr__(self, "open_mask", mask)
        for name in ("start", "goal"):
            cell = getattr(self, name)
            if not self.is_open(cell):
                raise MalformedGridError(f"{name} {cell} is not an open cell inside the grid")
        if not self.start_facings or not self.goal_facings:
            raise MalformedGridError("start and goal need at least one facing")

    # --------------------------------------------------
    def in_bounds(self, c: Cell) -> bool:
        x, y = c
        return 0 <= x < self.width and 0 <= y < self.height

    def is_open(self, c: Cell) -> bool:
        # everything outside the grid counts as wall
        return self.in_bounds(c) and bool(self.open_mask[c[1], c[0]])

    def open_cells(self) -> Iterator[Cell]:
        for y, x in zip(*np.nonzero(self.open_mask)):
            yield int(x), int(y)

    @property
    def n_states(self) -> int:
        return self.width * self.height * 4

    # --------------------------------------------------
    def reversed(self) -> "GridModel":
        """Same maze travelled backwards: goal becomes start and every facing flips."""
        return replace(
            self,
            start=self.goal,
            goal=self.start,
            start_facings=_opposites(self.goal_facings),
            goal_facings=_opposites(self.start_facings),
        )

    def __eq__(self, other):
        if not isinstance(other, GridModel):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self.start == other.start
            and self.goal == other.goal
            and set(self.start_facings) == set(other.start_facings)
            and set(self.goal_facings) == set(other.goal_facings)
            and np.array_equal(self.open_mask, other.open_mask)
        )

    __hash__ = None  # type: ignore[assignment]


# ---------------------------------------------------------------------------
# Text I/O
# ---------------------------------------------------------------------------

def parse_grid(text: str) -> GridModel:
    """Build a GridModel from maze text; raises MalformedGridError."""
    lines = [line.rstrip("\r") for line in text.split("\n")]
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    if not lines:
        raise MalformedGridError("maze is empty")

    width = len(lines[0])
    height = len(lines)
    mask = np.zeros((height, width), dtype=bool)
    starts: List[Cell] = []
    goals: List[Cell] = []
    for y, line in enumerate(lines):
        if len(line) != width:
            raise MalformedGridError(f"row {y} has length {len(line)}, expected {width}")
        for x, ch in enumerate(line):
            if ch == WALL:
                continue
            if ch == START:
                starts.append((x, y))
            elif ch == GOAL:
                goals.append((x, y))
            elif ch != FLOOR:
                raise MalformedGridError(f"unexpected character {ch!r} at {(x, y)}")
            mask[y, x] = True

    for marker, found in ((START, starts), (GOAL, goals)):
        if not found:
            raise MalformedGridError(f"missing {marker!r} marker")
        if len(found) > 1:
            raise MalformedGridError(f"{len(found)} {marker!r} markers at {found}, expected one")

    return GridModel(width=width, height=height, open_mask=mask, start=starts[0], goal=goals[0])


def render_grid(grid: GridModel, path: Optional[Iterable[Cell]] = None, axes: bool = False) -> str:
    """Draw the maze back as text, marking cells in ``path`` with ``O``."""
    on_path = set(path) if path is not None else set()
    rows = []
    if axes:
        rows.append(" " + "".join(str(x % 10) for x in range(grid.width)))
    for y in range(grid.height):
        row = str(y % 10) if axes else ""
        for x in range(grid.width):
            xy = (x, y)
            if xy in on_path:
                row += ON_PATH
            elif xy == grid.start:
                row += START
            elif xy == grid.goal:
                row += GOAL
            elif not grid.is_open(xy):
                row += WALL
            else:
                row += FLOOR
        rows.append(row)
    return "\n".join(rows)
