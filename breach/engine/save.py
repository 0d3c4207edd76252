"""Save/load — persists the economy as one JSON blob between sessions.

Old saves are brought up to date once, by ``migrate``, before any field
is read.  Nothing downstream has to guess at missing keys.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict
from pathlib import Path

from breach.engine.game_state import (
    SAVE_VERSION,
    Contract,
    CreatureStatus,
    EconomyState,
    FactionState,
    StaffProgress,
)

logger = logging.getLogger(__name__)

SAVE_DIR = Path.home() / ".breach"
SAVE_FILE = SAVE_DIR / "save.json"


# ── Serialisation helpers ────────────────────────────────────────


def state_to_dict(state: EconomyState) -> dict:
    return asdict(state)


def _with_defaults(record: dict, default: dict) -> dict:
    """*default* overlaid with the known keys of *record*."""
    return {**default, **{k: v for k, v in record.items() if k in default}}


def _contract_defaults() -> dict:
    return asdict(Contract(id="", faction_id="omnicorp", title=""))


def migrate(data: dict) -> dict:
    """Bring a raw save dict of any known version up to ``SAVE_VERSION``.

    Version 1 (unversioned) saves called the tick timestamp
    ``last_save_time`` and had no emergency cooldown or accepted flags.
    """
    data = dict(data)
    version = data.get("version", 1)

    if version < 2:
        data["last_tick_time"] = data.pop("last_save_time", time.time())
        data.setdefault("emergency_cooldown_s", 0.0)
        for contract in data.get("contracts", []):
            contract.setdefault("accepted", False)

    defaults = state_to_dict(EconomyState())
    defaults["last_tick_time"] = time.time()
    data = _with_defaults(data, defaults)

    data["staff_progress"] = {
        sid: _with_defaults(p, asdict(StaffProgress()))
        for sid, p in data["staff_progress"].items()
    }
    data["creature_status"] = {
        cid: _with_defaults(c, asdict(CreatureStatus()))
        for cid, c in data["creature_status"].items()
    }
    factions = defaults["factions"]
    factions.update({
        fid: _with_defaults(f, asdict(FactionState()))
        for fid, f in data["factions"].items()
    })
    data["factions"] = factions
    contract_defaults = _contract_defaults()
    data["contracts"] = [_with_defaults(c, contract_defaults) for c in data["contracts"]]
    # Runs are not saved, so no offer can still be in progress after a load
    data["contracts"] = [c for c in data["contracts"] if not c["is_infinite"]]
    for contract in data["contracts"]:
        contract["accepted"] = False

    data["version"] = SAVE_VERSION
    return data


def dict_to_state(data: dict) -> EconomyState:
    """Build state from an already-migrated dict."""
    return EconomyState(
        credits=data["credits"],
        data=data["data"],
        gems=data["gems"],
        owned_staff_ids=list(data["owned_staff_ids"]),
        active_staff_ids=list(data["active_staff_ids"]),
        staff_progress={sid: StaffProgress(**p) for sid, p in data["staff_progress"].items()},
        free_recruit_available=data["free_recruit_available"],
        owned_creature_ids=list(data["owned_creature_ids"]),
        creature_status={cid: CreatureStatus(**c) for cid, c in data["creature_status"].items()},
        research_levels=dict(data["research_levels"]),
        factions={fid: FactionState(**f) for fid, f in data["factions"].items()},
        contracts=[Contract(**c) for c in data["contracts"]],
        contracts_completed=data["contracts_completed"],
        last_tick_time=data["last_tick_time"],
        emergency_cooldown_s=data["emergency_cooldown_s"],
        version=data["version"],
    )


# ── Public API ───────────────────────────────────────────────────


def save_state(state: EconomyState, path: Path = SAVE_FILE) -> bool:
    """Persist the economy to disk.  Returns False if the write failed."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(state_to_dict(state), indent=2))
    except OSError as exc:
        logger.warning("Could not save to %s: %s", path, exc)
        return False
    return True


def load_state(path: Path = SAVE_FILE) -> EconomyState | None:
    """Load a saved economy.  Returns None if there is no usable save."""
    if not path.exists():
        return None
    try:
        return dict_to_state(migrate(json.loads(path.read_text())))
    except (OSError, ValueError, TypeError, KeyError, AttributeError) as exc:
        logger.warning("Corrupt save at %s, starting fresh: %s", path, exc)
        return None


def delete_save(path: Path = SAVE_FILE) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        pass
