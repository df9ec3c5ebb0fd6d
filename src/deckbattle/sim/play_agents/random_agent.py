"""Random action agent -- picks cards and targets uniformly at random.

The baseline for batch simulation.  It exercises the whole battle loop
and gives a floor on how winnable a stage is.

Behaviour:
    - Each time the agent is asked to play a card, there is a 10 % chance
      it ends the turn instead.
    - Otherwise it picks a random card from the playable set.
    - For single-target cards it picks a random living enemy.
    - For card rewards it picks a random card (never skips).
    - For stages it picks a random open stage.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from deckbattle.sim.core.rng import GameRNG
from deckbattle.sim.play_agents.base import PlayAgent

if TYPE_CHECKING:
    from deckbattle.ir.cards import CardDefinition
    from deckbattle.sim.core.game_state import BattleSession, CardInstance


class RandomAgent(PlayAgent):
    """Agent that plays random playable cards each turn.

    Parameters
    ----------
    rng:
        Seeded RNG for deterministic randomness.  If ``None``, a default
        ``GameRNG(seed=0)`` is created.
    end_turn_chance:
        Probability (0.0 -- 1.0) that the agent ends the turn instead of
        playing another card.
    """

    def __init__(
        self,
        rng: GameRNG | None = None,
        end_turn_chance: float = 0.10,
    ) -> None:
        self._rng = rng or GameRNG(seed=0)
        self._end_turn_chance = end_turn_chance

    def choose_card_to_play(
        self,
        session: BattleSession,
        playable_cards: list[tuple[int, CardInstance]],
    ) -> tuple[int, int | None] | None:
        if not playable_cards:
            return None
        if self._rng.chance(self._end_turn_chance):
            return None

        hand_index, card = self._rng.random_choice(playable_cards)
        target: int | None = None
        if card.definition.requires_target:
            living = session.active_enemy_indices()
            if not living:
                return None
            target = self._rng.random_choice(living)
        return hand_index, target

    def choose_card_reward(
        self,
        cards: list[CardDefinition],
        deck: list[str],
    ) -> CardDefinition | None:
        if not cards:
            return None
        return self._rng.random_choice(cards)

    def choose_stage(self, available: list[str]) -> str:
        return self._rng.random_choice(available)
