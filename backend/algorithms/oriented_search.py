"""Single-source cost labelling over (cell, facing) states.

Dijkstra-style label-correcting search with an upper bound: a move is only
accepted when its cost does not exceed the best cost seen so far at the goal
and strictly improves the target's label.  The bound starts at infinity (or a
caller-supplied warm value) and tightens every time a goal state is labelled,
so nothing is explored past a cost that is already known to be non-optimal.

Labels live in one dense numpy array indexed by ``facing + 4*x + 4*width*y``;
``UNREACHED`` (-1) marks states the search never labelled.
"""
from __future__ import annotations

import heapq
import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import numpy as np

from backend.algorithms.maze_grid import GridModel, MazeError
from backend.algorithms.oriented_states import CostModel, OrientedState, decode, encode, successors

logger = logging.getLogger(__name__)

UNREACHED = -1


class Unreachable(MazeError):
    """The goal cannot be reached from the start (within the given bound)."""


@dataclass
class SearchResult:
    grid: GridModel
    labels: np.ndarray
    best_cost: Optional[int]
    expansions: int = 0

    @property
    def reachable(self) -> bool:
        return self.best_cost is not None

    @property
    def cost(self) -> int:
        if self.best_cost is None:
            raise Unreachable(f"no path from {self.grid.start} to {self.grid.goal}")
        return self.best_cost

    def cost_of(self, state: OrientedState) -> Optional[int]:
        if not self.grid.in_bounds(state.cell):
            return None
        value = int(self.labels[encode(state, self.grid.width)])
        return None if value == UNREACHED else value

    def labelled(self) -> Iterable[Tuple[OrientedState, int]]:
        for idx in np.flatnonzero(self.labels != UNREACHED):
            yield decode(int(idx), self.grid.width), int(self.labels[idx])

    def oriented_costs(self) -> np.ndarray:
        """Labels reshaped to ``[row, col, facing]``."""
        return self.labels.reshape(self.grid.height, self.grid.width, 4)

    def cell_costs(self) -> np.ndarray:
        """Minimum label over the four facings of each cell, ``[row, col]``."""
        per_state = self.oriented_costs()
        reached = per_state != UNREACHED
        big = np.iinfo(per_state.dtype).max
        cheapest = np.where(reached, per_state, big).min(axis=2)
        return np.where(reached.any(axis=2), cheapest, UNREACHED)


@dataclass
class OrientedSearch:
    grid: GridModel
    costs: CostModel = field(default_factory=CostModel)
    bound: float = math.inf  # best known cost at the goal; pass a finite value to warm-start pruning
    snapshot_interval: int = 500

    # internal state
    labels: np.ndarray = field(init=False, repr=False)
    frontier: List[Tuple[int, int]] = field(init=False, default_factory=list, repr=False)
    expansions: int = field(init=False, default=0)

    def __post_init__(self):
        if self.snapshot_interval < 1:
            raise ValueError("snapshot_interval must be >= 1")
        self.labels = np.full(self.grid.n_states, UNREACHED, dtype=np.int64)
        width = self.grid.width
        self._goal_indices = frozenset(
            encode(OrientedState.at(self.grid.goal, f), width) for f in self.grid.goal_facings
        )
        for f in self.grid.start_facings:
            origin = encode(OrientedState.at(self.grid.start, f), width)
            self.labels[origin] = 0
            heapq.heappush(self.frontier, (0, origin))
            if origin in self._goal_indices:
                self.bound = 0

    # ---------------------------------------------------------------------
    def _relax(self, target: int, cost: int) -> None:
        if cost > self.bound:
            return
        current = self.labels[target]
        if current != UNREACHED and cost >= current:
            return
        self.labels[target] = cost
        heapq.heappush(self.frontier, (cost, target))
        if target in self._goal_indices and cost < self.bound:
            logger.debug("bound tightened %s -> %d", self.bound, cost)
            self.bound = cost

    def _snapshot(self, done: bool = False) -> dict:
        return {
            "iteration": self.expansions,
            "frontier": len(self.frontier),
            "labelled": int(np.count_nonzero(self.labels != UNREACHED)),
            "bound": None if math.isinf(self.bound) else int(self.bound),
            "done": done,
        }

    # ---------------------------------------------------------------------
    def run_iter(self) -> Iterable[dict]:
        """Generator yielding progress snapshots while the frontier drains."""
        logger.debug(
            "searching %dx%d grid from %s %s to %s",
            self.grid.width, self.grid.height, self.grid.start,
            [f.name for f in self.grid.start_facings], self.grid.goal,
        )
        while self.frontier:
            cost, idx = heapq.heappop(self.frontier)
            if cost != self.labels[idx]:
                continue  # stale entry, a cheaper label was pushed later
            if cost > self.bound:
                continue
            self.expansions += 1
            for _move, target, step in successors(self.grid, idx, self.costs):
                self._relax(target, cost + step)
            if self.expansions % self.snapshot_interval == 0:
                yield self._snapshot()
        yield self._snapshot(done=True)

    def best_cost(self) -> Optional[int]:
        reached = [int(self.labels[i]) for i in self._goal_indices if self.labels[i] != UNREACHED]
        return min(reached) if reached else None

    def result(self) -> SearchResult:
        best = self.best_cost()
        logger.debug("search finished after %d expansions, best=%s", self.expansions, best)
        return SearchResult(grid=self.grid, labels=self.labels, best_cost=best, expansions=self.expansions)

    def solve(self) -> SearchResult:
        for _ in self.run_iter():
            pass
        return self.result()


def minimum_cost(grid: GridModel, costs: Optional[CostModel] = None) -> int:
    """Cheapest cost from start to goal; raises Unreachable when there is none."""
    return OrientedSearch(grid, costs=costs or CostModel()).solve().cost
