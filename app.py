# app.py
from __future__ import annotations

import logging
import math
import threading
import traceback
from typing import Dict

from flask import Flask, jsonify, request
from flask_socketio import SocketIO, emit
from pydantic import ValidationError

# local imports
from motion_backend.config import load_config
from motion_backend.curves import CURVE_KINDS
from motion_backend.schemas import LandmarkIn, StartRoundIn, TrackingOut
from protocols.trace_round import TraceRound
from trackers.lateral import LateralClassifier

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# --------------------- Config ---------------------
cfg = load_config()

# --------------------- Flask/SocketIO ---------------------
app = Flask(__name__)
# events of one client are handled in arrival order, one at a time
socketio = SocketIO(app, cors_allowed_origins="*", async_handlers=False)

# one round + one lateral classifier per connected client
rounds: Dict[str, TraceRound] = {}
laterals: Dict[str, LateralClassifier] = {}
_locks: Dict[str, threading.RLock] = {}
_registry_lock = threading.Lock()

def _lock_for(sid: str) -> threading.RLock:
    with _registry_lock:
        return _locks.setdefault(sid, threading.RLock())

def _round_for(sid: str) -> TraceRound:
    with _registry_lock:
        if sid not in rounds:
            rounds[sid] = TraceRound(cfg)
        return rounds[sid]

def _lateral_for(sid: str) -> LateralClassifier:
    with _registry_lock:
        if sid not in laterals:
            lc = cfg.get("lateral", {})
            laterals[sid] = LateralClassifier(lc.get("enter", 0.12), lc.get("leave", 0.08), lc.get("alpha", 0.3))
        return laterals[sid]

# --------------------- Routes ---------------------
@app.get("/api/health")
def api_health():
    return jsonify({"ok": True, "curve_kinds": list(CURVE_KINDS), "tracking": cfg["tracking"]})

# --------------------- Socket events ---------------------
@socketio.on("start_round")
def start_round(data):
    try:
        params = StartRoundIn(**(data or {}))
        with _lock_for(request.sid):
            rnd = _round_for(request.sid)
            state = rnd.start(params.width, params.height, params.difficulty, params.kind)
            _lateral_for(request.sid).reset()
            curve = [[round(p.x, 1), round(p.y, 1)] for p in rnd.curve]
        emit("round_state", TrackingOut.ok(state, curve=curve), json=True)
    except (ValidationError, ValueError) as e:
        logger.error(f"start_round rejected: {e}")
        emit("round_state", TrackingOut.paused(f"{type(e).__name__}: {e}"), json=True)

@socketio.on("landmark")
def on_landmark(data):
    try:
        with _lock_for(request.sid):
            rnd = _round_for(request.sid)
            state = rnd.on_sample(LandmarkIn(**(data or {})).sample())
            final = None
            # round ends on reaching the target or on running out of time
            if state.get("active") and (state.get("complete") or state.get("timed_out")):
                final = rnd.stop()
        emit("round_state", TrackingOut.ok(state), json=True)
        if final is not None:
            emit("final_report", final, json=True)
    except Exception as e:
        traceback.print_exc()
        emit("round_state", TrackingOut.paused(f"{type(e).__name__}: {e}"), json=True)

@socketio.on("lateral")
def on_lateral(data):
    try:
        amount = float((data or {}).get("amount", 0.0))
    except (TypeError, ValueError):
        amount = math.nan
    if not math.isfinite(amount):
        emit("lateral_state", TrackingOut.paused("Bad lateral amount"), json=True)
        return
    with _lock_for(request.sid):
        lc = _lateral_for(request.sid)
        position = lc.update(amount)
        smoothed = lc.amount
    emit("lateral_state", TrackingOut.ok({"position": position, "amount": smoothed}), json=True)

@socketio.on("stop_round")
def stop_round(_):
    with _lock_for(request.sid):
        final = _round_for(request.sid).stop()
    emit("final_report", final, json=True)

@socketio.on("disconnect")
def on_disconnect(*_):
    with _registry_lock:
        rounds.pop(request.sid, None)
        laterals.pop(request.sid, None)
        _locks.pop(request.sid, None)

@socketio.on("frame_ping")
def frame_ping(_):
    emit("pong", {"ok": True})

# --------------------- Main ---------------------
if __name__ == "__main__":
    socketio.run(app, host=cfg["server"]["host"], port=cfg["server"]["port"])
