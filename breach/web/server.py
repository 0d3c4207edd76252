"""Breach Web — Flask server that wraps the Python game engine.

Exposes a JSON API for the lab economy and the breach run.  The economy is
driven lazily: each API request catches up on elapsed wall-clock time
before acting.  A running breach is advanced by the client, one
``/api/run/frame`` call per animation frame.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import asdict
from pathlib import Path

from flask import Flask, jsonify, request
from rich.logging import RichHandler

from breach.data.research import ALL_RESEARCH
from breach.data.roster import ALL_CREATURES, ALL_STAFF
from breach.engine.contracts import (
    complete_contract,
    fulfill_trade,
    generate_contract,
    listed_offers,
    qualifying_creatures,
    run_config_for,
    simulation_cost,
    start_contract,
    start_simulation,
)
from breach.engine.economy import (
    EconomyDriver,
    buy_research,
    catch_up_offline,
    compute_bonuses,
    passive_rates,
    replenish_contracts,
    research_cost,
    toggle_staff,
    treat_staff,
)
from breach.engine.events import Notice, declined
from breach.engine.gacha import perform_creature_gacha, perform_staff_gacha
from breach.engine.game_state import Contract, EconomyState
from breach.engine.minigame import Click, MiniGame
from breach.engine.save import SAVE_FILE, load_state, save_state

logger = logging.getLogger(__name__)

# Auto-save every N seconds
AUTO_SAVE_INTERVAL = 30.0


# ---------------------------------------------------------------------------
# Session (single-player)
# ---------------------------------------------------------------------------


class Session:
    """Everything one player's browser talks to.  Guard with ``lock``."""

    def __init__(
        self,
        state: EconomyState | None = None,
        save_path: Path = SAVE_FILE,
        autosave: bool = True,
    ) -> None:
        self.lock = threading.Lock()
        self.save_path = save_path
        self.autosave = autosave
        if state is None:
            state = load_state(save_path) or EconomyState()
            catch_up_offline(state, contract_factory=generate_contract)
        replenish_contracts(state, generate_contract)
        self.state = state
        self.driver = EconomyDriver(state, contract_factory=generate_contract)
        self.driver.tick()
        self.game: MiniGame | None = None
        self.contract: Contract | None = None
        self.pending: list[Notice] = []
        self._last_autosave = time.time()

    def catch_up(self) -> None:
        """Tick the economy up to now and auto-save when due."""
        self.pending.extend(self.driver.tick())
        now = time.time()
        if self.autosave and now - self._last_autosave >= AUTO_SAVE_INTERVAL:
            save_state(self.state, self.save_path)
            self._last_autosave = now

    def launch(self, contract: Contract) -> None:
        config = run_config_for(contract, compute_bonuses(self.state))
        self.contract = contract
        self.game = MiniGame(config)

    def save(self) -> bool:
        return save_state(self.state, self.save_path)

    def drain(self) -> list[dict]:
        notices = [n.to_dict() for n in self.pending]
        self.pending.clear()
        return notices


def _state_json(session: Session) -> dict:
    """Build the JSON blob sent to the frontend."""
    s = session.state
    credit_rate, data_rate = passive_rates(s)

    offers = []
    for contract in listed_offers(s):
        entry = {
            "id": contract.id,
            "faction": contract.faction_id,
            "title": contract.title,
            "kind": contract.kind,
            "difficulty": contract.difficulty,
            "tier": contract.tier,
            "deposit": contract.deposit,
            "reward_credits": contract.reward_credits,
            "reward_data": contract.reward_data,
            "reward_gems": contract.reward_gems,
            "duration_s": contract.duration_s,
            "quota": contract.quota,
            "modifiers": list(contract.modifiers),
            "expires_at": contract.expires_at,
        }
        if contract.is_trade:
            entry["requirement"] = {
                "type": contract.trade_req_type,
                "stat": contract.trade_req_stat,
                "value": contract.trade_req_value,
            }
            entry["qualifying"] = qualifying_creatures(s, contract)
        offers.append(entry)

    staff = []
    for sid in s.owned_staff_ids:
        sdef = ALL_STAFF.get(sid)
        if sdef is None:
            continue
        progress = s.progress(sid)
        staff.append({
            "id": sid,
            "name": sdef.name,
            "role": sdef.role,
            "rarity": sdef.rarity,
            "bonus": sdef.bonus.name.lower(),
            "level": progress.level,
            "health": progress.health,
            "fatigue": progress.fatigue,
            "disease": progress.disease,
            "active": sid in s.active_staff_ids,
        })

    research = [
        {"id": rid, "name": rdef.name, "level": s.research_levels.get(rid, 0),
         "cost": research_cost(s, rid), "cost_type": rdef.cost_type}
        for rid, rdef in ALL_RESEARCH.items()
    ]

    return {
        "credits": s.credits,
        "data": s.data,
        "gems": s.gems,
        "credits_per_s": credit_rate,
        "data_per_s": data_rate,
        "bonuses": asdict(compute_bonuses(s)),
        "factions": {fid: asdict(f) for fid, f in s.factions.items()},
        "offers": offers,
        "staff": staff,
        "creatures": [
            {"id": cid, "variant": ALL_CREATURES[cid].variant, "type": ALL_CREATURES[cid].type}
            for cid in s.owned_creature_ids if cid in ALL_CREATURES
        ],
        "research": research,
        "simulation_cost_60s": simulation_cost(60),
        "contracts_completed": s.contracts_completed,
        "run": session.game.snapshot().run if session.game is not None else None,
        "notifications": session.drain(),
    }


def _run_json(session: Session, notices: list[Notice]) -> dict:
    game = session.game
    assert game is not None
    frame = game.snapshot(notices)
    return {
        "cells": frame.cells,
        "run": frame.run,
        "events": [n.to_dict() for n in frame.events],
        "finished": game.finished,
    }


def _no_run():
    return jsonify({"error": "No run in progress"}), 409


def _bad_request(message: str):
    return jsonify({"error": message}), 400


# ---------------------------------------------------------------------------
# Flask app
# ---------------------------------------------------------------------------


def create_app(session: Session | None = None) -> Flask:
    """Build the Flask app around *session* (a fresh one from disk by default)."""
    app = Flask(__name__)
    app.config["SEND_FILE_MAX_AGE_DEFAULT"] = 0
    session = session if session is not None else Session()
    app.config["BREACH_SESSION"] = session

    def _action(notices: list[Notice]):
        session.pending.extend(notices)
        return jsonify(_state_json(session))

    @app.route("/api/state")
    def api_state():
        with session.lock:
            session.catch_up()
            return jsonify(_state_json(session))

    @app.route("/api/contracts/<contract_id>/start", methods=["POST"])
    def action_start_contract(contract_id: str):
        with session.lock:
            session.catch_up()
            if session.game is not None and not session.game.finished:
                return _action([declined("start", "a run is already in progress")])
            contract, notices = start_contract(session.state, contract_id)
            if contract is not None:
                session.launch(contract)
            return _action(notices)

    @app.route("/api/simulation", methods=["POST"])
    def action_simulation():
        with session.lock:
            session.catch_up()
            if session.game is not None and not session.game.finished:
                return _action([declined("simulation", "a run is already in progress")])
            body = request.get_json(silent=True) or {}
            try:
                duration_s = float(body.get("duration_s", 60))
            except (TypeError, ValueError):
                return _bad_request("duration_s must be a number")
            if not math.isfinite(duration_s):
                return _bad_request("duration_s must be finite")
            contract, notices = start_simulation(session.state, duration_s)
            if contract is not None:
                session.launch(contract)
            return _action(notices)

    @app.route("/api/run/frame", methods=["POST"])
    def action_frame():
        with session.lock:
            game = session.game
            if game is None:
                return _no_run()
            body = request.get_json(silent=True) or {}
            try:
                delta_ms = float(body.get("delta_ms", 0))
                cell_id = None if body.get("cell_id") is None else int(body["cell_id"])
            except (TypeError, ValueError):
                return _bad_request("delta_ms and cell_id must be numbers")
            if not math.isfinite(delta_ms):
                return _bad_request("delta_ms must be finite")
            click = None
            if cell_id is not None:
                click = Click(cell_id)
            elif body.get("empty"):
                click = Click()
            frame = game.advance_frame(delta_ms, click)
            contract = session.contract
            # Simulations run until the bought time is used up
            if contract is not None and contract.is_infinite and game.state.elapsed_s >= contract.duration_s:
                game.extract()
                frame.events.extend(game.advance_frame(0).events)
            return jsonify(_run_json(session, frame.events))

    @app.route("/api/run/pause", methods=["POST"])
    def action_pause():
        with session.lock:
            game = session.game
            if game is None:
                return _no_run()
            body = request.get_json(silent=True) or {}
            if body.get("paused") is None:
                game.toggle_pause()
            elif body["paused"]:
                game.pause()
            else:
                game.resume()
            return jsonify(_run_json(session, game.advance_frame(0).events))

    @app.route("/api/run/end", methods=["POST"])
    def action_end():
        with session.lock:
            game = session.game
            if game is None:
                return _no_run()
            body = request.get_json(silent=True) or {}
            if body.get("extract"):
                game.extract()
            else:
                game.abandon()
            return jsonify(_run_json(session, game.advance_frame(0).events))

    @app.route("/api/run/finalize", methods=["POST"])
    def action_finalize():
        with session.lock:
            game = session.game
            if game is None:
                return _no_run()
            result = game.finalize()
            if result is None:
                return jsonify({"error": "Run is still in progress"}), 409
            contract = session.contract
            session.game = None
            session.contract = None
            session.catch_up()
            if contract is not None:
                session.pending.extend(complete_contract(session.state, contract, result))
            session.save()
            data = _state_json(session)
            data["result"] = {"success": result.success, "score": result.score, "gems": result.gems}
            return jsonify(data)

    @app.route("/api/gacha/staff", methods=["POST"])
    def action_staff_gacha():
        with session.lock:
            session.catch_up()
            return _action(perform_staff_gacha(session.state))

    @app.route("/api/gacha/creature", methods=["POST"])
    def action_creature_gacha():
        with session.lock:
            session.catch_up()
            return _action(perform_creature_gacha(session.state))

    @app.route("/api/research/<research_id>", methods=["POST"])
    def action_research(research_id: str):
        with session.lock:
            session.catch_up()
            return _action(buy_research(session.state, research_id))

    @app.route("/api/staff/<staff_id>/toggle", methods=["POST"])
    def action_toggle_staff(staff_id: str):
        with session.lock:
            session.catch_up()
            return _action(toggle_staff(session.state, staff_id))

    @app.route("/api/staff/<staff_id>/treat", methods=["POST"])
    def action_treat_staff(staff_id: str):
        with session.lock:
            session.catch_up()
            body = request.get_json(silent=True) or {}
            return _action(treat_staff(session.state, staff_id, str(body.get("treatment", "heal"))))

    @app.route("/api/trade/<contract_id>", methods=["POST"])
    def action_trade(contract_id: str):
        with session.lock:
            session.catch_up()
            body = request.get_json(silent=True) or {}
            creature_id = body.get("creature_id")
            if creature_id is None:
                contract = session.state.find_contract(contract_id)
                matches = qualifying_creatures(session.state, contract) if contract is not None else []
                creature_id = matches[0] if matches else ""
            return _action(fulfill_trade(session.state, contract_id, str(creature_id)))

    @app.route("/api/save", methods=["POST"])
    def action_save():
        with session.lock:
            session.catch_up()
            return jsonify({"saved": session.save()})

    return app


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def run_server(host: str = "127.0.0.1", port: int = 5000, debug: bool = False) -> None:
    """Start the Flask development server."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    app = create_app()
    logger.info("Breach web host on http://%s:%d/", host, port)
    app.run(host=host, port=port, debug=debug, use_reloader=False)
