"""
Local JSON snapshot of the session.

Snapshot layout (version 1.0.0):
    rules              GameRules.to_dict()
    balance            int
    statistics         SessionStats fields
    countingSystem     counting system id
    balanceHistory     [{balance, timestamp, hand_number}, ...]
    selectedPresetId   preset id or 'custom'
    lastSaved          ISO-8601 timestamp
    version            '1.0.0'

Loading never raises on bad data. A missing, unreadable or structurally
invalid snapshot yields None (load) or a default state (restore); fields
an older snapshot lacks fall back to their defaults.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Union

from blackjack_trainer.counting.systems import DEFAULT_SYSTEM_ID, is_valid_system_id
from blackjack_trainer.engine.table_rules import (
    DEFAULT_RULES,
    PRESET_NAMES,
    GameRules,
    RulesError,
    preset_id_for,
)

from blackjack_trainer.settings import get_settings

from .state import (
    BALANCE_HISTORY_LIMIT,
    BalanceSnapshot,
    GameState,
    SessionStats,
    initial_state,
)

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = '1.0.0'


def to_snapshot(state: GameState, saved_at: datetime | None = None) -> dict[str, Any]:
    saved_at = saved_at or datetime.now(timezone.utc)
    return {
        'rules': state.rules.to_dict(),
        'balance': state.balance,
        'statistics': dataclasses.asdict(state.statistics),
        'countingSystem': state.counting_system,
        'balanceHistory': [dataclasses.asdict(s) for s in state.balance_history],
        'selectedPresetId': state.selected_preset_id,
        'lastSaved': saved_at.isoformat(),
        'version': SNAPSHOT_VERSION,
    }


def _is_number(value: Any) -> bool:
    """A real, finite number. json.loads accepts NaN and Infinity."""
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def is_valid_snapshot(data: Any) -> bool:
    """Rules and statistics present, balance a finite number."""
    return (
        isinstance(data, dict)
        and isinstance(data.get('rules'), dict)
        and _is_number(data.get('balance'))
        and isinstance(data.get('statistics'), dict)
    )


# ─── Restore ──────────────────────────────────────────────────────────────────

def _restore_rules(data: dict) -> GameRules:
    try:
        return GameRules.from_dict(data, base=DEFAULT_RULES)
    except (RulesError, TypeError, ValueError) as exc:
        logger.warning("Saved rules rejected (%s); using defaults", exc)
        return DEFAULT_RULES


def _restore_statistics(data: dict, balance: int, session_start: float | None) -> SessionStats:
    defaults = initial_state(starting_balance=balance, session_start=session_start).statistics
    values = {}
    for f in dataclasses.fields(SessionStats):
        raw = data.get(f.name)
        if not _is_number(raw):
            continue
        try:
            values[f.name] = type(getattr(defaults, f.name))(raw)
        except (TypeError, ValueError, OverflowError):
            logger.warning("Saved statistic %s=%r rejected; using default", f.name, raw)
    return dataclasses.replace(defaults, **values)


def _restore_history(data: Any) -> tuple[BalanceSnapshot, ...]:
    if not isinstance(data, list):
        return ()
    snapshots = []
    for item in data[-BALANCE_HISTORY_LIMIT:]:
        try:
            if not all(_is_number(item[k]) for k in ('balance', 'timestamp', 'hand_number')):
                continue
            snapshots.append(BalanceSnapshot(
                balance=int(item['balance']),
                timestamp=float(item['timestamp']),
                hand_number=int(item['hand_number']),
            ))
        except (KeyError, TypeError, ValueError):
            continue
    return tuple(snapshots)


def restore_state(snapshot: Any, session_start: float | None = None) -> GameState:
    """Build a fresh betting-phase state from a snapshot.

    Anything unusable is replaced by its default; a snapshot that fails
    is_valid_snapshot() yields a completely fresh state.
    """
    if not is_valid_snapshot(snapshot):
        if snapshot is not None:
            logger.warning("Invalid snapshot structure; starting a fresh session")
        return initial_state(session_start=session_start)

    rules = _restore_rules(snapshot['rules'])
    balance = int(snapshot['balance'])

    system_id = snapshot.get('countingSystem')
    if not isinstance(system_id, str) or not is_valid_system_id(system_id):
        system_id = DEFAULT_SYSTEM_ID

    preset_id = snapshot.get('selectedPresetId')
    if not isinstance(preset_id, str) or preset_id not in PRESET_NAMES:
        preset_id = preset_id_for(rules)

    state = initial_state(
        rules=rules,
        starting_balance=balance,
        counting_system=system_id,
        preset_id=preset_id,
        session_start=session_start,
    )
    return dataclasses.replace(
        state,
        statistics=_restore_statistics(snapshot['statistics'], balance, session_start),
        balance_history=_restore_history(snapshot.get('balanceHistory')),
    )


# ─── Files ────────────────────────────────────────────────────────────────────

PathLike = Union[str, Path, None]


def snapshot_path(path: PathLike = None) -> Path:
    """``path`` as a Path, or the BJ_SNAPSHOT_PATH setting when None."""
    return Path(path) if path is not None else Path(get_settings().snapshot_path)


def save_snapshot(state: GameState, path: PathLike = None) -> bool:
    """Write the snapshot as JSON. Returns False (and logs) on I/O failure."""
    path = snapshot_path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(to_snapshot(state), indent=2), encoding='utf-8')
    except OSError:
        logger.exception("Failed to save snapshot to %s", path)
        return False
    return True


def load_snapshot(path: PathLike = None) -> dict[str, Any] | None:
    """Read and validate a snapshot; None if missing, unreadable or invalid."""
    path = snapshot_path(path)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, ValueError):
        logger.exception("Failed to load snapshot from %s", path)
        return None
    if not is_valid_snapshot(data):
        logger.warning("Invalid snapshot structure in %s; ignoring", path)
        return None
    return data


def load_state(path: PathLike = None, session_start: float | None = None) -> GameState:
    return restore_state(load_snapshot(path), session_start)


def clear_snapshot(path: PathLike = None) -> None:
    snapshot_path(path).unlink(missing_ok=True)


def has_snapshot(path: PathLike = None) -> bool:
    return snapshot_path(path).exists()


def last_saved(path: PathLike = None) -> datetime | None:
    data = load_snapshot(path)
    if data is None:
        return None
    try:
        return datetime.fromisoformat(data['lastSaved'])
    except (KeyError, TypeError, ValueError):
        return None
