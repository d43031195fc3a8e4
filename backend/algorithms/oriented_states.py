"""Oriented state space: (cell, facing) vertices and the three legal moves.

Moving forward costs 1, rotating 90 degrees in place costs 1000.  Because a
turn is so much more expensive than a step, the facing has to be part of the
search state; a plain cell graph would happily trade one turn for a detour.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Tuple

from backend.algorithms.maze_grid import Cell, Facing, GridModel

MOVE_COST = 1
TURN_COST = 1000


class Move(Enum):
    Forward = "forward"
    TurnClockwise = "cw"
    TurnCounterClockwise = "ccw"


@dataclass(frozen=True)
class CostModel:
    move: int = MOVE_COST
    turn: int = TURN_COST

    def __post_init__(self):
        for name in ("move", "turn"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} cost must be a positive integer, got {value!r}")


@dataclass(frozen=True, order=True)
class OrientedState:
    x: int
    y: int
    facing: Facing

    @classmethod
    def at(cls, cell: Cell, facing: Facing) -> "OrientedState":
        return cls(cell[0], cell[1], Facing(facing))

    @property
    def cell(self) -> Cell:
        return self.x, self.y

    def reverse(self) -> "OrientedState":
        return OrientedState(self.x, self.y, self.facing.opposite())


# ---------------------------------------------------------------------------
# Dense index encoding: facing + 4*x + 4*width*y
# ---------------------------------------------------------------------------

def encode(state: OrientedState, width: int) -> int:
    return int(state.facing) + 4 * state.x + 4 * width * state.y


def decode(index: int, width: int) -> OrientedState:
    xy, facing = divmod(index, 4)
    y, x = divmod(xy, width)
    return OrientedState(x, y, Facing(facing))


# ---------------------------------------------------------------------------
# Move rules
# ---------------------------------------------------------------------------

def successors(grid: GridModel, index: int, costs: CostModel) -> Iterator[Tuple[Move, int, int]]:
    """Index-level move rules used by the search: ``(move, target_index, cost)``."""
    xy, f = divmod(index, 4)
    y, x = divmod(xy, grid.width)
    facing = Facing(f)
    dx, dy = facing.unit
    if grid.is_open((x + dx, y + dy)):
        yield Move.Forward, index + 4 * dx + 4 * grid.width * dy, costs.move
    base = index - f
    yield Move.TurnClockwise, base + facing.clockwise(), costs.turn
    yield Move.TurnCounterClockwise, base + facing.counter_clockwise(), costs.turn


def transitions(
    grid: GridModel, state: OrientedState, costs: CostModel = CostModel()
) -> Iterator[Tuple[Move, OrientedState, int]]:
    """Yield ``(move, target, cost)`` for every legal move out of ``state``."""
    for move, target, cost in successors(grid, encode(state, grid.width), costs):
        yield move, decode(target, grid.width), cost
