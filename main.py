"""
main.py — Algorithm Trace Replayer Flask App
==============================================
JSON API over the trace generators and the playback controller.  Every
renderer (board, graph, array, recursion tree) lives in the client; this
server only generates traces and drives playback.

Routes:
  GET  /api/algorithms         – registry cards (label, pseudocode, complexity)
  POST /api/run                – generate a trace and start playing it
  GET  /api/trace              – full trace of the current run
  POST /api/play               – toggle play/pause
  POST /api/pause              – pause playback
  POST /api/resume             – resume playback
  POST /api/step/next          – advance one step
  POST /api/step/prev          – rewind one step
  POST /api/step/goto          – jump to step N
  POST /api/speed              – set speed multiplier or preset
  POST /api/reset              – discard the session
  GET  /api/state              – current playback state (polls the timer first)
  GET  /api/tree               – recursion tree of the current run
  GET  /api/solutions          – aggregated, de-duplicated solutions

State management:
  Each browser gets a session id in the Flask session cookie.  The
  Stepper/Recorder pair for that id lives in an in-process dict on the
  app (in-memory only), capped at MAX_SESSIONS with the least recently
  used evicted first.  Starting a new run resets the old Stepper first,
  which cancels its timer before the session is replaced.  Every playback
  route applies due timer ticks before acting.

Configuration:
  Defaults below, overridable by TRACEVIZ_* environment variables
  (e.g. TRACEVIZ_MAX_BOARD_SIZE=12) or the mapping passed to create_app().
"""

import logging
import random
import secrets
import time
from collections import OrderedDict
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Optional

from flask import Blueprint, Flask, current_app, jsonify, request, session

from algorithms import AlgoInfo, AlgorithmKind, Family, get_algorithm, list_algorithms
from algorithms.base import require_int
from algorithms.errors import ConfigurationError
from algorithms.inputs import majority_array, random_array, sorted_random_array, subset_sum_problem
from algorithms.step import call_to_dict, trace_to_dict
from engine import PollingScheduler, Recorder, Stepper
from graph import Graph

logger = logging.getLogger(__name__)

SESSIONS_KEY = "traceviz.sessions"

DEFAULT_CONFIG: Dict[str, Any] = {
    "MAX_BOARD_SIZE":  10,
    "MAX_ARRAY_SIZE":  64,
    "MAX_SUBSET_SIZE": 16,
    "MAX_GRAPH_NODES": 10,
    "MAX_COLORS":      6,
    "MAX_MATRIX_SIZE": 8,
    "MAX_SESSIONS":    256,
    "DEFAULT_SIZE":    8,
    "BASE_INTERVAL":   1.0,
    "CLOCK":           time.monotonic,
}


# ---------------------------------------------------------------------------
# Per-client state
# ---------------------------------------------------------------------------
@dataclass
class ClientSession:
    stepper:  Stepper
    recorder: Recorder = field(default_factory=Recorder)


def _client() -> ClientSession:
    """
    Look up (or create) the ClientSession behind this browser's cookie.

    The registry is least-recently-used ordered and holds at most
    MAX_SESSIONS entries; the oldest is reset (cancelling its timer) and
    dropped when a new one would exceed that.
    """
    sessions: "OrderedDict[str, ClientSession]" = current_app.extensions[SESSIONS_KEY]
    sid = session.get("sid")
    if sid is not None and sid in sessions:
        sessions.move_to_end(sid)
        return sessions[sid]

    sid = sid or secrets.token_hex(16)
    session["sid"] = sid
    scheduler = PollingScheduler(clock=current_app.config["CLOCK"])
    sessions[sid] = ClientSession(
        stepper=Stepper(scheduler, base_interval=current_app.config["BASE_INTERVAL"]),
    )
    logger.debug("Created playback session %s", sid)

    while len(sessions) > current_app.config["MAX_SESSIONS"]:
        old_sid, old = sessions.popitem(last=False)
        old.stepper.reset()
        logger.info("Evicted idle playback session %s", old_sid)
    return sessions[sid]


def _polled() -> ClientSession:
    """The caller's session with any due timer ticks applied."""
    client = _client()
    client.stepper.poll()
    return client


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("request body must be a JSON object", field="body")
    return data


def _state_response(ok: bool = True):
    client = _client()
    return jsonify({"ok": ok, "state": client.stepper.to_dict()})


# ---------------------------------------------------------------------------
# Parameter building (input limits are enforced here, at the boundary)
# ---------------------------------------------------------------------------
def _limit(count: int, name: str, maximum: int) -> None:
    if count > maximum:
        raise ConfigurationError(f"{name} must be at most {maximum}, got {count}", field=name)


def _values(data: dict, rng: random.Random, make: Callable[[int, random.Random], list]) -> list:
    cfg = current_app.config
    values = data.get("values")
    if values is None:
        size = require_int(data.get("size", cfg["DEFAULT_SIZE"]), "size", minimum=1)
        values = make(size, rng)
    if not isinstance(values, list):
        raise ConfigurationError("values must be a list", field="values")
    _limit(len(values), "values", cfg["MAX_ARRAY_SIZE"])
    return values


def build_params(info: AlgoInfo, data: dict, rng: random.Random) -> Dict[str, Any]:
    """Turn a /api/run body into keyword arguments for the generator."""
    cfg = current_app.config
    kind = AlgorithmKind(info.key)

    if kind is AlgorithmKind.NQUEENS:
        size = require_int(data.get("board_size", 4), "board_size", minimum=1)
        _limit(size, "board_size", cfg["MAX_BOARD_SIZE"])
        return {"board_size": size}

    if kind is AlgorithmKind.GRAPH_COLORING:
        nodes = require_int(data.get("num_nodes", 5), "num_nodes", minimum=1)
        _limit(nodes, "num_nodes", cfg["MAX_GRAPH_NODES"])
        colors = require_int(data.get("max_colors", 3), "max_colors", minimum=1)
        _limit(colors, "max_colors", cfg["MAX_COLORS"])
        edges = data.get("edges")
        if edges is None:
            edges = Graph.generate_random(nodes, rng=rng).edge_list()
        return {"num_nodes": nodes, "edges": edges, "max_colors": colors}

    if kind is AlgorithmKind.SUBSET_SUM:
        values, target = data.get("values"), data.get("target")
        if values is None:
            size = require_int(data.get("size", 6), "size", minimum=1)
            values, generated = subset_sum_problem(size, rng)
            target = generated if target is None else target
        if not isinstance(values, list):
            raise ConfigurationError("values must be a list", field="values")
        _limit(len(values), "values", cfg["MAX_SUBSET_SIZE"])
        return {"values": values, "target": target}

    # -- divide & conquer --
    params: Dict[str, Any] = {"rng": rng}
    if kind is AlgorithmKind.BINARY_SEARCH:
        params["values"] = _values(data, rng, sorted_random_array)
        if data.get("target") is not None:
            params["target"] = data["target"]
    elif kind is AlgorithmKind.MAJORITY_ELEMENT:
        params["values"] = _values(data, rng, majority_array)
        ensure = data.get("ensure_majority", False)
        if not isinstance(ensure, bool):
            raise ConfigurationError(
                f"ensure_majority must be true or false, got {ensure!r}", field="ensure_majority",
            )
        params["ensure_majority"] = ensure
    elif kind is AlgorithmKind.ORDER_STATISTICS:
        params["values"] = _values(data, rng, random_array)
        if data.get("k") is not None:
            params["k"] = data["k"]
    elif kind is AlgorithmKind.STRASSEN and (data.get("a") is not None or data.get("b") is not None):
        for name in ("a", "b"):
            matrix = data.get(name)
            if isinstance(matrix, list):
                _limit(len(matrix), name, cfg["MAX_MATRIX_SIZE"])
            params[name] = matrix
    else:
        params["values"] = _values(data, rng, random_array)
    return params


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------
api = Blueprint("api", __name__, url_prefix="/api")


@api.route("/algorithms", methods=["GET"])
def api_algorithms():
    family = request.args.get("family")
    cards = [a.to_dict() for a in list_algorithms()]
    if family:
        try:
            Family(family)
        except ValueError:
            raise ConfigurationError(f"Unknown family: {family}", field="family") from None
        cards = [c for c in cards if c["family"] == family]
    return jsonify({"algorithms": cards})


@api.route("/run", methods=["POST"])
def api_run():
    data = _json_body()
    key = data.get("algorithm")
    info = get_algorithm(key) if isinstance(key, str) else None
    if info is None:
        raise ConfigurationError(f"Unknown algorithm: {key}", field="algorithm")

    seed = data.get("seed")
    rng = random.Random(seed)
    params = build_params(info, data, rng)

    client = _client()
    trace = client.recorder.run(info.key, **params)
    client.stepper.start(trace)

    return jsonify({
        "algorithm":  info.to_dict(),
        "metrics":    asdict(client.recorder.metrics),
        "result":     trace_to_dict(trace, include_steps=False)["result"],
        "state":      client.stepper.to_dict(),
    })


@api.route("/trace", methods=["GET"])
def api_trace():
    client = _client()
    trace = client.stepper.session.trace
    if trace is None:
        return jsonify({"trace": None})
    return jsonify({"trace": trace_to_dict(trace)})


@api.route("/play", methods=["POST"])
def api_play():
    return _state_response(_polled().stepper.toggle_play())


@api.route("/pause", methods=["POST"])
def api_pause():
    return _state_response(_polled().stepper.pause())


@api.route("/resume", methods=["POST"])
def api_resume():
    return _state_response(_polled().stepper.resume())


@api.route("/step/next", methods=["POST"])
def api_step_next():
    return _state_response(_polled().stepper.step_forward())


@api.route("/step/prev", methods=["POST"])
def api_step_prev():
    return _state_response(_polled().stepper.step_backward())


@api.route("/step/goto", methods=["POST"])
def api_step_goto():
    data = _json_body()
    index = require_int(data.get("index"), "index")
    return _state_response(_polled().stepper.seek(index))


@api.route("/speed", methods=["POST"])
def api_speed():
    data = _json_body()
    stepper = _polled().stepper
    if "preset" in data:
        ok = stepper.set_speed_preset(data["preset"])
    else:
        ok = stepper.set_speed(data.get("multiplier"))
    return _state_response(ok)


@api.route("/reset", methods=["POST"])
def api_reset():
    _client().stepper.reset()
    return _state_response()


@api.route("/state", methods=["GET"])
def api_state():
    _polled()
    return _state_response()


@api.route("/tree", methods=["GET"])
def api_tree():
    trace = _client().stepper.session.trace
    calls = trace.recursion_tree if trace is not None else ()
    levels = sorted({c.level for c in calls})
    return jsonify({"nodes": [call_to_dict(c) for c in calls], "levels": levels})


@api.route("/solutions", methods=["GET"])
def api_solutions():
    state = _client().stepper.to_dict(include_step=False)
    return jsonify({"count": len(state["solutions"]), "solutions": state["solutions"]})


def handle_configuration_error(exc: ConfigurationError):
    logger.warning("Rejected parameters: %s", exc)
    return jsonify(exc.to_dict()), 400


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------
def create_app(config: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config.from_mapping(DEFAULT_CONFIG)
    app.config["SECRET_KEY"] = secrets.token_hex(32)
    app.config.from_prefixed_env("TRACEVIZ")
    if config:
        app.config.update(config)

    app.extensions[SESSIONS_KEY] = OrderedDict()
    app.register_blueprint(api)
    app.register_error_handler(ConfigurationError, handle_configuration_error)
    return app


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )
    logger.info("Algorithm Trace Replayer on http://localhost:5000")
    create_app().run(debug=True, host="0.0.0.0", port=5000)
