"""
Closed pairing between counting systems and deviation sets.

The pairing is fixed: a system is always played with its own set and the
two can never be chosen independently. A lookup miss means the tables
themselves are inconsistent and raises PairingError.
"""

from __future__ import annotations

from .deviations import ALL_STRATEGY_SETS, StrategySet
from .systems import ALL_COUNTING_SYSTEMS

SYSTEM_STRATEGY_MAP: dict[str, str] = {s.id: s.strategy_set_id for s in ALL_COUNTING_SYSTEMS}

STRATEGY_SETS: dict[str, StrategySet] = {s.id: s for s in ALL_STRATEGY_SETS}


class PairingError(LookupError):
    """Raised when a counting system or strategy set is not registered."""


def get_strategy_set_for_system(system_id: str) -> StrategySet:
    """Return the deviation set locked to a counting system.

    Raises:
        PairingError: If the system id is unknown or its set is missing.

    Examples:
        >>> get_strategy_set_for_system('hi-lo').name
        'Illustrious 18'
    """
    set_id = SYSTEM_STRATEGY_MAP.get(system_id)
    if set_id is None:
        raise PairingError(f"No strategy set registered for counting system {system_id!r}")
    return get_strategy_set_by_id(set_id)


def get_strategy_set_by_id(set_id: str) -> StrategySet:
    """Raises PairingError if ``set_id`` is not a registered set."""
    try:
        return STRATEGY_SETS[set_id]
    except KeyError:
        raise PairingError(f"Unknown strategy set {set_id!r}") from None


def validate_system_strategy_pairing(system_id: str, set_id: str) -> bool:
    """Return True if ``set_id`` is the set locked to ``system_id``."""
    return SYSTEM_STRATEGY_MAP.get(system_id) == set_id


def get_system_for_strategy_set(set_id: str) -> str:
    """Reverse lookup: the counting system id that owns a set.

    Raises:
        PairingError: If no system is paired with ``set_id``.
    """
    for system_id, paired in SYSTEM_STRATEGY_MAP.items():
        if paired == set_id:
            return system_id
    raise PairingError(f"No counting system paired with strategy set {set_id!r}")
