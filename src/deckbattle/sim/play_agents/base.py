"""Base class for agents that play battles headlessly.

The combat simulator asks an agent what to do at each decision point:
which card to play (or whether to end the turn), which reward card to
take, and which open stage to enter next.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deckbattle.ir.cards import CardDefinition
    from deckbattle.sim.core.game_state import BattleSession, CardInstance


class PlayAgent(ABC):
    """Base class for agents that play the game."""

    @abstractmethod
    def choose_card_to_play(
        self,
        session: BattleSession,
        playable_cards: list[tuple[int, CardInstance]],
    ) -> tuple[int, int | None] | None:
        """Choose a card to play from the playable cards.

        Parameters
        ----------
        session:
            The current battle state, giving the agent full observability.
        playable_cards:
            ``(hand_index, card_instance)`` for every card in hand the
            player can currently afford.

        Returns
        -------
        tuple[int, int | None] | None
            ``(hand_index, target)`` where *target* is an enemy index for
            single-target damage cards and ``None`` otherwise.

            Return ``None`` to end the turn.
        """

    @abstractmethod
    def choose_card_reward(
        self,
        cards: list[CardDefinition],
        deck: list[str],
    ) -> CardDefinition | None:
        """Choose a card from the reward screen (or ``None`` to skip).

        Parameters
        ----------
        cards:
            Card definitions on offer.
        deck:
            The player's current deck as card ids.
        """

    @abstractmethod
    def choose_stage(self, available: list[str]) -> str:
        """Pick the next stage from the non-empty list of open stage ids."""
