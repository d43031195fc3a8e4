import numpy as np
import pytest

from backend.algorithms.maze_grid import (
    ALL_FACINGS,
    Facing,
    GridModel,
    MalformedGridError,
    parse_grid,
    render_grid,
)

CORRIDOR = "S..E\n....\n....\n....\n"


def test_parse_simple_grid():
    grid = parse_grid(CORRIDOR)
    assert (grid.width, grid.height) == (4, 4)
    assert grid.start == (0, 0)
    assert grid.goal == (3, 0)
    assert grid.start_facings == (Facing.East,)
    assert set(grid.goal_facings) == set(ALL_FACINGS)
    assert grid.n_states == 64


def test_walls_and_bounds():
    grid = parse_grid("#####\n#S.E#\n#####\n")
    assert grid.is_open((1, 1))
    assert grid.is_open((2, 1))
    assert not grid.is_open((0, 0))
    assert grid.in_bounds((4, 2))
    assert not grid.in_bounds((5, 1))
    assert not grid.in_bounds((-1, 0))
    # outside the grid is never open
    assert not grid.is_open((-1, 1))
    assert not grid.is_open((1, 3))
    assert list(grid.open_cells()) == [(1, 1), (2, 1), (3, 1)]


def test_blank_lines_and_crlf_are_tolerated():
    grid = parse_grid("\n\n#S.E#\r\n#...#\r\n\n")
    assert (grid.width, grid.height) == (5, 2)
    assert grid.goal == (3, 0)


@pytest.mark.parametrize(
    "text",
    [
        "",
        "\n\n",
        "S..E\n...\n",  # ragged
        "S..E\n\n....\n",  # blank line inside the block
        "...E\n....\n",  # no start
        "S...\n....\n",  # no goal
        "S..E\n..S.\n",  # two starts
        "S.EE\n....\n",  # two goals
        "S.xE\n....\n",  # unknown character
    ],
)
def test_malformed_grids(text):
    with pytest.raises(MalformedGridError):
        parse_grid(text)


def test_malformed_is_a_value_error():
    with pytest.raises(ValueError):
        parse_grid("S")


def test_grid_is_immutable():
    grid = parse_grid(CORRIDOR)
    with pytest.raises(ValueError):
        grid.open_mask[0, 0] = False
    with pytest.raises(AttributeError):
        grid.start = (1, 1)


def test_start_must_be_open():
    mask = np.ones((2, 2), dtype=bool)
    mask[0, 0] = False
    with pytest.raises(MalformedGridError):
        GridModel(width=2, height=2, open_mask=mask, start=(0, 0), goal=(1, 1))


def test_mask_may_be_nested_lists():
    grid = GridModel(width=2, height=1, open_mask=[[True, True]], start=(0, 0), goal=(1, 0))
    assert isinstance(grid.open_mask, np.ndarray)
    assert grid.is_open((1, 0))
    with pytest.raises(MalformedGridError):
        GridModel(width=2, height=2, open_mask=[[True, True, True]], start=(0, 0), goal=(1, 0))
    with pytest.raises(MalformedGridError):
        GridModel(width=2, height=2, open_mask=[[True, True], [True]], start=(0, 0), goal=(1, 0))


def test_facing_rotations():
    for f in Facing:
        assert f.clockwise().counter_clockwise() == f
        assert f.clockwise().clockwise() == f.opposite()
        g = f
        for _ in range(4):
            g = g.clockwise()
        assert g == f
    assert Facing.North.clockwise() == Facing.East
    assert Facing.North.counter_clockwise() == Facing.West
    assert Facing.East.unit == (1, 0)
    assert Facing.North.step((3, 3)) == (3, 2)
    assert "".join(f.glyph for f in Facing) == "^>v<"


def test_reversed_swaps_ends_and_flips_facings():
    grid = parse_grid(CORRIDOR)
    rev = grid.reversed()
    assert rev.start == grid.goal
    assert rev.goal == grid.start
    assert set(rev.start_facings) == set(ALL_FACINGS)
    assert rev.goal_facings == (Facing.West,)
    assert rev.reversed() == grid
    assert rev != grid


def test_render_round_trips_text():
    text = "#####\n#S.E#\n#####"
    assert render_grid(parse_grid(text)) == text


def test_render_marks_path_cells():
    grid = parse_grid(CORRIDOR)
    assert render_grid(grid, [(0, 0), (1, 0), (2, 0), (3, 0)]) == "OOOO\n....\n....\n...."
    assert render_grid(grid, [(1, 0)]).splitlines()[0] == "SO.E"


def test_render_with_axes():
    grid = parse_grid("#S.E#\n#####")
    assert render_grid(grid, axes=True) == " 01234\n0#S.E#\n1#####"
