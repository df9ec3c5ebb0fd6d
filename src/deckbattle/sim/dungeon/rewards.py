"""Post-battle rewards: card choices and recovery.

Values by stage type:
- Card choices offered: normal 3, mid-boss 4, boss 5.
- Health recovered: normal 25%, mid-boss 40%, boss 60% of max health
  (rounded down).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from deckbattle.ir.stages import StageType
from deckbattle.sim.core.rng import GameRNG

if TYPE_CHECKING:
    from deckbattle.ir.cards import CardDefinition
    from deckbattle.sim.content.registry import ContentRegistry

REWARD_CARD_COUNTS: dict[StageType, int] = {
    StageType.NORMAL: 3,
    StageType.MID_BOSS: 4,
    StageType.BOSS: 5,
}

HEAL_FRACTIONS: dict[StageType, float] = {
    StageType.NORMAL: 0.25,
    StageType.MID_BOSS: 0.40,
    StageType.BOSS: 0.60,
}


def reward_card_count(stage_type: StageType) -> int:
    return REWARD_CARD_COUNTS[stage_type]


def heal_fraction(stage_type: StageType) -> float:
    return HEAL_FRACTIONS[stage_type]


def heal_amount(max_health: int, fraction: float) -> int:
    """Health restored for *fraction* of *max_health*, rounded down."""
    return int(max_health * fraction)


def generate_card_reward(
    registry: ContentRegistry,
    rng: GameRNG,
    stage_type: StageType = StageType.NORMAL,
) -> list[CardDefinition]:
    """Pick distinct cards from the reward pool to offer after a win.

    Parameters
    ----------
    registry:
        Content registry holding the reward pool.
    rng:
        Seeded RNG for deterministic selection.
    stage_type:
        Tier of the stage just cleared; controls how many cards are offered.
        Fewer are offered if the pool is smaller than that.
    """
    pool = registry.get_reward_pool()
    picked = rng.sample(pool, reward_card_count(stage_type))
    return [registry.cards[card_id] for card_id in picked]
