"""Damage application.

Damage never passes through modifiers in this engine: a card's number is
the number that lands.  Each hit is absorbed by defense first and the
remainder comes off health.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deckbattle.sim.core.entities import Combatant, DamageResult


def deal_damage(target: Combatant, amount: int, hits: int = 1) -> list[DamageResult]:
    """Hit *target* for *amount*, *hits* times.

    Stops early once the target dies.  Returns one result per hit that
    landed.
    """
    results: list[DamageResult] = []
    for _ in range(hits):
        if target.is_dead:
            break
        results.append(target.take_damage(amount))
    return results


def total_applied(results: list[DamageResult]) -> int:
    """Sum of damage that reached health across *results*."""
    return sum(r.applied for r in results)


def total_blocked(results: list[DamageResult]) -> int:
    return sum(r.blocked for r in results)
