"""Energy system -- reset, pay, and gain.

Rules:
    - The player starts each turn with ``max_energy``.
    - Playing a card pays its cost.  Whether the player can afford it is
      checked by the orchestrator beforehand; paying never refuses.
    - Cards may grant bonus energy above ``max_energy`` for the turn.
    - Energy does not carry over between turns.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deckbattle.sim.core.entities import Player


def reset_energy(player: Player) -> None:
    """Refill the player's energy to ``max_energy``."""
    player.energy = player.max_energy


def can_afford(player: Player, cost: int) -> bool:
    return cost <= player.energy


def pay_energy(player: Player, cost: int) -> None:
    """Deduct *cost* from the player's energy.

    Callers must check ``can_afford`` first; the pool is only floored at 0.
    """
    player.energy = max(0, player.energy - cost)


def gain_energy(player: Player, amount: int) -> None:
    """Add *amount* energy.  Not capped at ``max_energy``."""
    player.energy += amount


def lower_max_energy(player: Player, amount: int, floor: int = 1) -> int:
    """Permanently lower ``max_energy`` by *amount*, never below *floor*.

    Current energy is clamped to the new maximum.  Returns the new maximum.
    """
    player.max_energy = max(floor, player.max_energy - amount)
    player.energy = min(player.energy, player.max_energy)
    return player.max_energy
