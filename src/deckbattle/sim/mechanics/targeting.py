"""Target resolution -- translate a card's targeting mode to enemy indices."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deckbattle.ir.cards import CardDefinition
    from deckbattle.sim.core.game_state import BattleSession


def resolve_targets(
    session: BattleSession,
    card: CardDefinition,
    chosen_target: int | None = None,
) -> list[int]:
    """Return the enemy indices a card's damage should hit.

    All-enemy cards hit every active enemy in roster order.  Single-target
    cards hit *chosen_target* if it names an active enemy.  Cards without
    damage hit nothing.
    """
    if not card.deals_damage:
        return []
    if card.all_enemies:
        return session.active_enemy_indices()
    if session.is_valid_target(chosen_target):
        return [chosen_target]
    return []
