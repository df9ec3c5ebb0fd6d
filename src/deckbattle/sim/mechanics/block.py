"""Defense (block) mechanics -- gain and clear."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deckbattle.sim.core.entities import Combatant


def gain_block(combatant: Combatant, amount: int) -> int:
    """Add defense to a combatant.  Returns the amount gained."""
    amount = max(0, amount)
    combatant.apply_defense(amount)
    return amount


def clear_block(combatant: Combatant) -> None:
    """Drop all defense.  Only the player's defense is cleared each turn."""
    combatant.reset_defense()
