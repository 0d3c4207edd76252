"""Tests for the Flask JSON host."""

import pytest

from breach.engine.game_state import EconomyState
from breach.web.server import Session, create_app


@pytest.fixture
def session(tmp_path):
    state = EconomyState(credits=100_000.0, gems=100.0)
    return Session(state=state, save_path=tmp_path / "save.json", autosave=False)


@pytest.fixture
def client(session):
    app = create_app(session)
    app.config["TESTING"] = True
    return app.test_client()


def _first_mission(session):
    return next(c for c in session.state.contracts if not c.is_trade)


def test_state_lists_offers(client):
    resp = client.get("/api/state")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["credits"] >= 100_000.0
    assert 0 < len(data["offers"]) <= 9
    assert data["run"] is None
    assert data["credits_per_s"] == pytest.approx(1.0)


def test_staff_gacha_and_toggle(client, session):
    data = client.post("/api/gacha/staff").get_json()
    assert len(data["staff"]) == 1
    sid = data["staff"][0]["id"]
    data = client.post(f"/api/staff/{sid}/toggle").get_json()
    assert data["staff"][0]["active"] is True
    assert session.state.active_staff_ids == [sid]


def test_declined_action_is_reported(client):
    data = client.post("/api/research/alchemy").get_json()
    assert data["notifications"][-1]["kind"] == "action_declined"


def test_full_contract_run(client, session):
    mission = _first_mission(session)
    data = client.post(f"/api/contracts/{mission.id}/start").get_json()
    assert data["run"]["status"] == "RUNNING"
    assert session.game is not None

    frame = client.post("/api/run/frame", json={"delta_ms": 16}).get_json()
    assert frame["run"]["status"] == "RUNNING"
    assert len(frame["cells"]) == 1

    cell_id = frame["cells"][0]["id"]
    frame = client.post("/api/run/frame", json={"delta_ms": 16, "cell_id": cell_id}).get_json()
    assert frame["events"]

    assert client.post("/api/run/finalize").status_code == 409

    frame = client.post("/api/run/end", json={}).get_json()
    assert frame["finished"] is True
    assert frame["run"]["status"] == "LOST"

    data = client.post("/api/run/finalize").get_json()
    assert data["result"]["success"] is False
    assert session.game is None
    assert all(c.id != mission.id for c in session.state.contracts)
    assert session.save_path.exists()


def test_frame_without_run(client):
    assert client.post("/api/run/frame", json={"delta_ms": 16}).status_code == 409
    assert client.post("/api/run/finalize").status_code == 409


def test_pause_endpoint(client, session):
    mission = _first_mission(session)
    client.post(f"/api/contracts/{mission.id}/start")
    frame = client.post("/api/run/pause", json={"paused": True}).get_json()
    assert frame["run"]["status"] == "PAUSED"
    frame = client.post("/api/run/pause", json={}).get_json()
    assert frame["run"]["status"] == "RUNNING"


def test_simulation_extracts(client, session):
    data = client.post("/api/simulation", json={"duration_s": 5}).get_json()
    assert data["run"]["grid_size"] == 3
    assert session.contract.duration_s == 30
    client.post("/api/run/frame", json={"delta_ms": 16})
    frame = client.post("/api/run/end", json={"extract": True}).get_json()
    assert frame["run"]["status"] == "WON"
    data = client.post("/api/run/finalize").get_json()
    assert data["result"]["success"] is True


def test_second_run_is_declined(client, session):
    missions = [c for c in session.state.contracts if not c.is_trade]
    client.post(f"/api/contracts/{missions[0].id}/start")
    data = client.post(f"/api/contracts/{missions[1].id}/start").get_json()
    assert data["notifications"][-1]["kind"] == "action_declined"
    assert not missions[1].accepted


def test_save_endpoint(client, session):
    assert client.post("/api/save").get_json() == {"saved": True}
    assert session.save_path.exists()


def test_malformed_frame_is_rejected(client, session):
    mission = _first_mission(session)
    client.post(f"/api/contracts/{mission.id}/start")
    assert client.post("/api/run/frame", json={"delta_ms": "soon"}).status_code == 400
    assert client.post("/api/run/frame", json={"delta_ms": 16, "cell_id": "abc"}).status_code == 400
    assert client.post("/api/run/frame", json={"delta_ms": [1]}).status_code == 400
    frame = client.post("/api/run/frame", json={"delta_ms": 16}).get_json()
    assert frame["run"]["status"] == "RUNNING"


def test_malformed_simulation_duration_is_rejected(client, session):
    assert client.post("/api/simulation", json={"duration_s": "long"}).status_code == 400
    assert session.game is None
