import pytest

from backend.algorithms.maze_grid import Facing, parse_grid
from backend.algorithms.oriented_states import (
    CostModel,
    Move,
    OrientedState,
    decode,
    encode,
    successors,
    transitions,
)


def test_encoding_layout():
    assert encode(OrientedState(0, 0, Facing.North), 5) == 0
    assert encode(OrientedState(0, 0, Facing.West), 5) == 3
    assert encode(OrientedState(1, 0, Facing.North), 5) == 4
    assert encode(OrientedState(0, 1, Facing.North), 5) == 20
    assert encode(OrientedState(4, 2, Facing.South), 5) == 2 + 16 + 40


def test_encoding_is_a_bijection():
    width, height = 7, 3
    seen = set()
    for y in range(height):
        for x in range(width):
            for f in Facing:
                state = OrientedState(x, y, f)
                idx = encode(state, width)
                assert decode(idx, width) == state
                seen.add(idx)
    assert seen == set(range(width * height * 4))


def test_state_helpers():
    state = OrientedState.at((2, 5), Facing.East)
    assert state.cell == (2, 5)
    assert state.reverse() == OrientedState(2, 5, Facing.West)
    assert state.reverse().reverse() == state
    assert OrientedState(0, 0, Facing.East) < OrientedState(0, 1, Facing.North)


def test_transitions_in_open_space():
    grid = parse_grid("S..\n...\n..E\n")
    moves = {move: (target, cost) for move, target, cost in transitions(grid, OrientedState(1, 1, Facing.East))}
    assert moves[Move.Forward] == (OrientedState(2, 1, Facing.East), 1)
    assert moves[Move.TurnClockwise] == (OrientedState(1, 1, Facing.South), 1000)
    assert moves[Move.TurnCounterClockwise] == (OrientedState(1, 1, Facing.North), 1000)


def test_no_forward_into_wall_or_off_grid():
    grid = parse_grid("#####\n#S.E#\n#####\n")
    west = [m for m, _, _ in transitions(grid, OrientedState(1, 1, Facing.West))]
    assert west == [Move.TurnClockwise, Move.TurnCounterClockwise]
    edge = parse_grid("S.E\n")
    north = [m for m, _, _ in transitions(edge, OrientedState(0, 0, Facing.North))]
    assert Move.Forward not in north


def test_successors_match_transitions():
    grid = parse_grid("S..\n.#.\n..E\n")
    costs = CostModel(move=2, turn=7)
    for idx in range(grid.n_states):
        state = decode(idx, grid.width)
        if not grid.is_open(state.cell):
            continue
        by_index = [(m, decode(t, grid.width), c) for m, t, c in successors(grid, idx, costs)]
        assert by_index == list(transitions(grid, state, costs))


def test_cost_model_validation():
    assert CostModel() == CostModel(move=1, turn=1000)
    for bad in ({"move": 0}, {"turn": -5}, {"move": 1.5}, {"turn": True}):
        with pytest.raises(ValueError):
            CostModel(**bad)
