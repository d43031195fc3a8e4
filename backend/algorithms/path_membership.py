"""Which cells lie on at least one cheapest route from start to goal.

The search is run twice: forward from the start, and on the reversed maze
(goal becomes start, facings flipped) warm-started with the forward optimum.
A state ``(c, f)`` sits on some optimal route exactly when

    cost_from_start[(c, f)] + cost_from_goal[(c, opposite(f))] == best

since walking a route backwards visits the same cells with every facing
flipped.  No route is ever enumerated.

``method="collapsed"`` instead swaps start and goal, searches again from the goal
facing East, reduces both label arrays to a per-cell minimum over facings and
accepts a cell when the sum is ``best`` or ``best + turn``.  The extra turn
covers the one rotation between the East seed and the facing a route actually
leaves the goal with.  That only holds when the goal is entered along the
North-South axis; a goal entered heading East or West loses cells (on a
straight East-West corridor only the goal itself is reported).  ``"oriented"``
is the default.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Optional

import numpy as np

from backend.algorithms.maze_grid import ALL_FACINGS, Cell, Facing, GridModel, MazeError
from backend.algorithms.oriented_search import UNREACHED, OrientedSearch, SearchResult
from backend.algorithms.oriented_states import CostModel

logger = logging.getLogger(__name__)

METHODS = ("oriented", "collapsed")

# facing axis permutation N,E,S,W -> S,W,N,E
_OPPOSITE = [2, 3, 0, 1]


class InconsistencyError(MazeError, RuntimeError):
    """Forward and reversed searches disagree about the optimal cost."""


@dataclass(frozen=True)
class MembershipResult:
    best_cost: Optional[int]
    tiles: FrozenSet[Cell] = frozenset()

    @property
    def reachable(self) -> bool:
        return self.best_cost is not None

    @property
    def tile_count(self) -> int:
        return len(self.tiles)


@dataclass
class PathMembership:
    grid: GridModel
    costs: CostModel = field(default_factory=CostModel)
    method: str = "oriented"

    def __post_init__(self):
        if self.method not in METHODS:
            raise ValueError(f"unknown method {self.method!r}, expected one of {METHODS}")

    # --------------------------------------------------------
    def _on_path_oriented(self, forward: SearchResult, backward: SearchResult, best: int) -> np.ndarray:
        fwd = forward.oriented_costs()
        bwd = backward.oriented_costs()[:, :, _OPPOSITE]
        reached = (fwd != UNREACHED) & (bwd != UNREACHED)
        total = np.where(reached, fwd + bwd, UNREACHED)
        return (reached & (total == best)).any(axis=2)

    def _on_path_collapsed(self, forward: SearchResult, best: int) -> np.ndarray:
        swapped = replace(
            self.grid,
            start=self.grid.goal,
            goal=self.grid.start,
            start_facings=(Facing.East,),
            goal_facings=ALL_FACINGS,
        )
        backward = OrientedSearch(swapped, costs=self.costs, bound=best).solve()
        fwd = forward.cell_costs()
        bwd = backward.cell_costs()
        reached = (fwd != UNREACHED) & (bwd != UNREACHED)
        total = np.where(reached, fwd + bwd, UNREACHED)
        return reached & ((total == best) | (total == best + self.costs.turn))

    # --------------------------------------------------------
    def solve(self, forward: Optional[SearchResult] = None) -> MembershipResult:
        """Run both searches; a finished forward result may be passed in to skip the first one."""
        if forward is None:
            forward = OrientedSearch(self.grid, costs=self.costs).solve()
        if not forward.reachable:
            logger.info("goal %s unreachable from %s", self.grid.goal, self.grid.start)
            return MembershipResult(best_cost=None)
        best = forward.cost

        backward = OrientedSearch(self.grid.reversed(), costs=self.costs, bound=best).solve()
        if backward.best_cost != best:
            raise InconsistencyError(
                f"forward search found {best} but reversed search found {backward.best_cost}"
            )

        if self.method == "oriented":
            on_path = self._on_path_oriented(forward, backward, best)
        else:
            on_path = self._on_path_collapsed(forward, best)
        # walls are never members
        on_path &= self.grid.open_mask

        ys, xs = np.nonzero(on_path)
        tiles = frozenset((int(x), int(y)) for x, y in zip(xs, ys))
        logger.info("best cost %d, %d tiles on optimal paths (%s)", best, len(tiles), self.method)
        logger.debug("expansions: forward=%d reversed=%d", forward.expansions, backward.expansions)
        return MembershipResult(best_cost=best, tiles=tiles)


def optimal_tiles(grid: GridModel, costs: Optional[CostModel] = None, method: str = "oriented") -> MembershipResult:
    return PathMembership(grid, costs=costs or CostModel(), method=method).solve()
