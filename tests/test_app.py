import types

from protocols import trace_round
from app import _round_for, app, socketio

def _events(client, name):
    return [r["args"][0] for r in client.get_received() if r["name"] == name]

def test_health_lists_curve_kinds():
    resp = app.test_client().get("/api/health")
    assert resp.status_code == 200
    assert "figure8" in resp.get_json()["curve_kinds"]

def test_round_over_socket():
    client = socketio.test_client(app)
    client.emit("start_round", {"width": 800, "height": 600, "difficulty": 2, "kind": "wave"})
    started = _events(client, "round_state")[-1]
    assert started["status"] == "ok"
    assert started["state"]["active"] is True
    assert len(started["curve"]) == 125

    client.emit("landmark", {"x": 0.5, "y": 0.5})
    tick = _events(client, "round_state")[-1]
    assert tick["state"]["detecting"] is True

    client.emit("landmark", {})
    lost = _events(client, "round_state")[-1]
    assert lost["state"]["detecting"] is False

    client.emit("stop_round", {})
    final = _events(client, "final_report")[-1]
    assert final["done"] is True
    assert "stars" in final["report"]
    client.disconnect()

def test_bad_start_is_reported_not_raised():
    client = socketio.test_client(app)
    client.emit("start_round", {"width": -5, "height": 600})
    assert _events(client, "round_state")[-1]["status"] == "paused"
    client.emit("start_round", {"width": 800, "height": 600, "kind": "spiral"})
    assert _events(client, "round_state")[-1]["status"] == "paused"
    client.disconnect()

def test_lateral_event():
    client = socketio.test_client(app)
    client.emit("lateral", {"amount": 0.9})
    out = _events(client, "lateral_state")[-1]
    assert out["state"]["position"] in ("center", "right")
    client.disconnect()

def test_non_finite_lateral_amount_is_rejected():
    client = socketio.test_client(app)
    for bad in ("nan", "inf", "left", None):
        client.emit("lateral", {"amount": bad})
        out = _events(client, "lateral_state")[-1]
        assert out["status"] == "paused"
    client.emit("lateral", {"amount": 0.0})
    assert _events(client, "lateral_state")[-1]["state"]["position"] == "center"
    client.disconnect()

def test_handlers_run_in_arrival_order():
    assert socketio.server.async_handlers is False
    assert _round_for("sid-a") is _round_for("sid-a")
    assert _round_for("sid-a") is not _round_for("sid-b")

def test_round_ends_with_final_report_when_time_runs_out(monkeypatch):
    clock = [1000.0]
    monkeypatch.setattr(trace_round, "time", types.SimpleNamespace(time=lambda: clock[0]))
    client = socketio.test_client(app)
    client.emit("start_round", {"width": 800, "height": 600, "kind": "wave"})
    client.emit("landmark", {"x": 0.5, "y": 0.5})
    assert _events(client, "final_report") == []

    clock[0] += 60
    client.emit("landmark", {"x": 0.5, "y": 0.5})
    received = client.get_received()
    state = [r["args"][0] for r in received if r["name"] == "round_state"][-1]
    assert state["state"]["timed_out"] is True
    final = [r["args"][0] for r in received if r["name"] == "final_report"][-1]
    assert final["done"] is True
    assert final["report"]["timed_out"] is True
    client.disconnect()
