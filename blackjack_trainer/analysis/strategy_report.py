"""Text reports for basic strategy charts and index plays.

    format_strategy_chart(rules, kind)  — one chart ('hard', 'soft', 'pairs')
    print_strategy_charts(rules)        — all three charts plus the house edge
    format_index_plays(system_id)       — the deviation set paired with a system

Usage (standalone report):
    python -m blackjack_trainer.analysis.strategy_report [preset_id] [system_id]
"""

from __future__ import annotations

from blackjack_trainer.counting.registry import get_strategy_set_for_system
from blackjack_trainer.counting.systems import get_counting_system
from blackjack_trainer.engine.cards import RANK_KEYS
from blackjack_trainer.engine.dealer import rule_label
from blackjack_trainer.engine.table_rules import GameRules
from blackjack_trainer.strategy.basic import BasicStrategy
from blackjack_trainer.strategy.house_edge import calculate_house_edge, payout_label

_TITLES = {'hard': 'Hard Totals', 'soft': 'Soft Totals', 'pairs': 'Pairs'}
_CELL = 3


def _rules_summary(rules: GameRules) -> str:
    parts = [
        f"{rules.deck_count} deck{'s' if rules.deck_count > 1 else ''}",
        rule_label(rules),
        f"BJ {payout_label(rules.blackjack_payout)}",
        'DAS' if rules.double_after_split else 'no DAS',
    ]
    if rules.late_surrender:
        parts.append('LS')
    return ', '.join(parts)


def format_strategy_chart(rules: GameRules, kind: str) -> str:
    """Render one basic strategy table as fixed-width text.

    Args:
        rules: Table rules the chart is built for.
        kind:  'hard', 'soft' or 'pairs'.

    Raises:
        ValueError: If ``kind`` is not a known table.
    """
    rows = BasicStrategy(rules).chart(kind)
    header = f"{'':>6} " + ''.join(f"{k:>{_CELL}}" for k in RANK_KEYS)
    lines = [
        f"{_TITLES[kind]}  ({_rules_summary(rules)})",
        header,
        '-' * len(header),
    ]
    for label, codes in rows:
        lines.append(f"{label:>6} " + ''.join(f"{c:>{_CELL}}" for c in codes))
    return '\n'.join(lines)


def print_strategy_charts(rules: GameRules) -> None:
    print("=" * 40)
    print(f"Basic Strategy  —  house edge {calculate_house_edge(rules):.2f}%")
    print("=" * 40)
    for kind in ('hard', 'soft', 'pairs'):
        print(format_strategy_chart(rules, kind))
        print()


def format_index_plays(system_id: str) -> str:
    """Render the deviation set paired with a counting system.

    Raises:
        KeyError: If ``system_id`` is not a known counting system.
    """
    system = get_counting_system(system_id)
    strategy_set = get_strategy_set_for_system(system_id)
    count = 'true count' if strategy_set.uses_true_count else 'running count'

    lines = [
        f"{strategy_set.name}  ({system.name}, {count})",
        f"  Insurance at {system.insurance_index:+d}",
        f"  {'Hand':>6} {'vs':>3}  {'Basic':>5} {'Play':>5}  Index",
    ]
    for dev in strategy_set.play_deviations:
        lines.append(
            f"  {dev.hand:>6} {dev.dealer:>3}  {dev.basic_action:>5} "
            f"{dev.deviation_action:>5}  {dev.comparator} {dev.threshold:+g}"
            + (f"  ({dev.note})" if dev.note else '')
        )
    return '\n'.join(lines)


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    from blackjack_trainer.counting.systems import DEFAULT_SYSTEM_ID
    from blackjack_trainer.engine.table_rules import DEFAULT_PRESET_ID, get_preset

    preset = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_PRESET_ID
    system = sys.argv[2] if len(sys.argv) > 2 else DEFAULT_SYSTEM_ID

    print_strategy_charts(get_preset(preset))
    print(format_index_plays(system))
