"""Flask backend exposing the maze engine over HTTP and Socket.IO.

``POST /api/run/maze`` answers synchronously with the optimal cost and the
cells on optimal routes.  The ``run_maze`` Socket.IO event runs the same
computation and streams the forward search snapshots back to the caller
(``maze_history``) before the final ``maze_done`` result.
"""
from __future__ import annotations

from threading import Lock
from typing import Any, Dict, List, Optional, Tuple

from flask import Flask, request, jsonify
from flask_socketio import SocketIO, emit
from flask_cors import CORS

from backend.algorithms.maze_grid import GridModel, parse_grid, render_grid
from backend.algorithms.oriented_search import OrientedSearch, SearchResult
from backend.algorithms.oriented_states import CostModel, MOVE_COST, TURN_COST
from backend.algorithms.path_membership import InconsistencyError, PathMembership

app = Flask(__name__)
app.config.from_mapping(
    SECRET_KEY="change-me",  # in production override via MAZE_SECRET_KEY
    MOVE_COST=MOVE_COST,
    TURN_COST=TURN_COST,
    MAX_GRID_CELLS=250_000,
    SNAPSHOT_INTERVAL=500,
)
app.config.from_prefixed_env("MAZE")
socketio = SocketIO(app, cors_allowed_origins="*")

# Enable CORS for /api/* endpoints so that a local frontend can POST
CORS(app, resources={r"/api/*": {"origins": "*"}})

# run id -> last result body
_runs: Dict[str, Dict[str, Any]] = {}
_runs_lock = Lock()


class BadRequest(ValueError):
    pass


def _load_request(data: Any) -> Tuple[GridModel, PathMembership]:
    if not isinstance(data, dict) or not isinstance(data.get("grid"), str):
        raise BadRequest("body must be a JSON object with a 'grid' string")
    if data.get("run_id") is not None and not isinstance(data["run_id"], str):
        raise BadRequest("'run_id' must be a string")
    grid = parse_grid(data["grid"])
    if grid.width * grid.height > app.config["MAX_GRID_CELLS"]:
        raise BadRequest(f"grid has {grid.width * grid.height} cells, limit is {app.config['MAX_GRID_CELLS']}")
    costs = CostModel(move=app.config["MOVE_COST"], turn=app.config["TURN_COST"])
    membership = PathMembership(grid, costs=costs, method=data.get("method", "oriented"))
    return grid, membership


def _result_body(
    run_id: str, grid: GridModel, membership: PathMembership, forward: Optional[SearchResult] = None
) -> Dict[str, Any]:
    result = membership.solve(forward)
    tiles: List[List[int]] = [[x, y] for x, y in sorted(result.tiles)]
    body = {
        "run_id": run_id,
        "best_cost": result.best_cost,
        "reachable": result.reachable,
        "tile_count": result.tile_count,
        "tiles": tiles,
        "rendered": render_grid(grid, result.tiles),
    }
    with _runs_lock:
        _runs[run_id] = body
    return body


@app.route("/api/run/maze", methods=["POST"])
def run_maze():
    data = request.get_json(force=True, silent=True)
    run_id = data.get("run_id") if isinstance(data, dict) else None
    try:
        grid, membership = _load_request(data)
        run_id = run_id or f"maze_{id(membership)}"
        return jsonify(_result_body(run_id, grid, membership))
    except ValueError as exc:  # BadRequest, MalformedGridError, unknown method
        return jsonify({"run_id": run_id, "error": str(exc)}), 400
    except InconsistencyError as exc:
        return jsonify({"run_id": run_id, "error": str(exc)}), 500


@app.route("/api/runs", methods=["GET"])
def list_runs():
    with _runs_lock:
        return jsonify(list(_runs.keys()))


# --------------------------------------------------------
# Socket.IO: same computation, with search progress
# --------------------------------------------------------


@socketio.on("run_maze")
def on_run_maze(data):
    run_id = data.get("run_id") if isinstance(data, dict) else None
    try:
        grid, membership = _load_request(data)
        run_id = run_id or f"maze_{id(membership)}"
        search = OrientedSearch(
            grid, costs=membership.costs, snapshot_interval=app.config["SNAPSHOT_INTERVAL"]
        )
        history = list(search.run_iter())
        emit("maze_history", {"run_id": run_id, "history": history})
        emit("maze_done", _result_body(run_id, grid, membership, search.result()))
    except (ValueError, InconsistencyError) as exc:
        emit("maze_error", {"run_id": run_id, "error": str(exc)})


if __name__ == "__main__":
    socketio.run(app, host="0.0.0.0", port=5000, debug=True)
