"""Dungeon module -- stage progression and post-battle rewards."""

from deckbattle.sim.dungeon.progression import Campaign
from deckbattle.sim.dungeon.rewards import (
    generate_card_reward,
    heal_amount,
    heal_fraction,
    reward_card_count,
)

__all__ = [
    "Campaign",
    "generate_card_reward",
    "heal_amount",
    "heal_fraction",
    "reward_card_count",
]
