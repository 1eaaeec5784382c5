"""
Process settings read from the environment (and a .env file if present).

    BJ_STARTING_BALANCE   25000
    BJ_MIN_BET            25
    BJ_MAX_BET            5000
    BJ_AI_SPEED_MS        500
    BJ_SNAPSHOT_PATH      data/blackjack_snapshot.json
    BJ_LOG_LEVEL          INFO

Malformed numbers fall back to the default.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'


@dataclass(frozen=True)
class Settings:
    starting_balance: int
    min_bet: int
    max_bet: int
    ai_speed_ms: int
    snapshot_path: str
    log_level: str


def _get_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def get_settings() -> Settings:
    return Settings(
        starting_balance=_get_int('BJ_STARTING_BALANCE', 25_000),
        min_bet=_get_int('BJ_MIN_BET', 25),
        max_bet=_get_int('BJ_MAX_BET', 5000),
        ai_speed_ms=_get_int('BJ_AI_SPEED_MS', 500),
        snapshot_path=os.getenv('BJ_SNAPSHOT_PATH') or 'data/blackjack_snapshot.json',
        log_level=(os.getenv('BJ_LOG_LEVEL') or 'INFO').upper(),
    )


def configure_logging(level: str | int = 'INFO') -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
