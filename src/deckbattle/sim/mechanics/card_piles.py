"""Card zone helpers.

Wraps ``BattleSession.piles`` so callers draw and discard with the
session's own RNG.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deckbattle.sim.core.game_state import BattleSession, CardInstance


def draw_cards(session: BattleSession, n: int) -> list[CardInstance]:
    """Draw up to *n* cards into the hand.  Returns the cards drawn."""
    return session.piles.draw(n, session.rng)


def discard_card(session: BattleSession, card: CardInstance) -> None:
    session.piles.discard_card(card)


def discard_hand(session: BattleSession) -> list[CardInstance]:
    """Move the whole hand to the discard pile."""
    return session.piles.discard_hand()


def shuffle_deck(session: BattleSession) -> None:
    session.piles.shuffle(session.rng)
