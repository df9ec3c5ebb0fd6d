"""Battle and run state.

Houses the card zones (``CardPiles``), the single authoritative state of
one battle (``BattleSession``), and the state that persists between
battles (``RunState``).
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from deckbattle.ir.cards import CardDefinition
from deckbattle.sim.core.entities import Enemy, Player
from deckbattle.sim.core.rng import GameRNG


# ---------------------------------------------------------------------------
# CardInstance
# ---------------------------------------------------------------------------

class CardInstance(BaseModel):
    """A single physical card.

    Each copy has its own ``id`` so it can be tracked across zones even
    when several copies of the same definition exist.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    definition: CardDefinition

    @property
    def card_id(self) -> str:
        return self.definition.id

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def cost(self) -> int:
        return self.definition.cost


# ---------------------------------------------------------------------------
# CardPiles
# ---------------------------------------------------------------------------

class CardPiles(BaseModel):
    """Owns the three card zones that exist during a battle.

    The deck is drawn from its end.  When it runs dry mid-draw the
    discard pile is shuffled back into it and drawing continues.
    """

    deck: list[CardInstance] = Field(default_factory=list)
    hand: list[CardInstance] = Field(default_factory=list)
    discard: list[CardInstance] = Field(default_factory=list)
    reshuffle_count: int = 0
    """How many times the discard pile has been shuffled into the deck."""

    # -- queries -------------------------------------------------------------

    @property
    def hand_size(self) -> int:
        return len(self.hand)

    @property
    def total(self) -> int:
        return len(self.deck) + len(self.hand) + len(self.discard)

    def all_cards(self) -> list[CardInstance]:
        return [*self.deck, *self.hand, *self.discard]

    # -- drawing -------------------------------------------------------------

    def draw(self, n: int, rng: GameRNG) -> list[CardInstance]:
        """Draw up to *n* cards into the hand.

        Returns the cards actually drawn, in draw order.  If both the deck
        and the discard pile run out, fewer than *n* cards are drawn.
        """
        drawn: list[CardInstance] = []
        for _ in range(n):
            if not self.deck:
                if not self.discard:
                    break
                self._reshuffle_discard_into_deck(rng)
            card = self.deck.pop()
            self.hand.append(card)
            drawn.append(card)
        return drawn

    def _reshuffle_discard_into_deck(self, rng: GameRNG) -> None:
        self.deck.extend(self.discard)
        self.discard.clear()
        rng.shuffle(self.deck)
        self.reshuffle_count += 1

    def shuffle(self, rng: GameRNG) -> None:
        """Shuffle the deck in place."""
        rng.shuffle(self.deck)

    # -- pile movement -------------------------------------------------------

    def take_from_hand(self, index: int) -> CardInstance:
        """Remove and return the card at *index* in the hand."""
        return self.hand.pop(index)

    def discard_card(self, card: CardInstance) -> None:
        """Move *card* to the discard pile, removing it from the hand if present."""
        for i, c in enumerate(self.hand):
            if c.id == card.id:
                self.hand.pop(i)
                break
        self.discard.append(card)

    def discard_hand(self) -> list[CardInstance]:
        """Move every card in the hand to the discard pile.  Returns them."""
        moved = list(self.hand)
        self.discard.extend(moved)
        self.hand.clear()
        return moved

    def add_to_hand(self, card: CardInstance) -> None:
        """Put a new card straight into the hand (explicit insertion)."""
        self.hand.append(card)


# ---------------------------------------------------------------------------
# BattleSession
# ---------------------------------------------------------------------------

class BattlePhase(str, Enum):
    PLAYER_TURN = "player_turn"
    ENEMY_TURN = "enemy_turn"
    VICTORY = "victory"
    DEFEAT = "defeat"


class VictoryReward(BaseModel):
    """What winning a stage grants, as decided by campaign progression."""

    model_config = ConfigDict(frozen=True)

    heal_fraction: float = Field(ge=0.0, le=1.0)
    unlocked_stage_ids: list[str] = Field(default_factory=list)


class BattleSession(BaseModel):
    """Full mutable state of one battle.  The only source of truth.

    Enemies keep their position in ``enemies`` for the whole battle, so
    an index always names the same enemy.  Dead enemies stay in the list
    but drop out of ``active_enemies``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    player: Player
    enemies: list[Enemy]
    piles: CardPiles = Field(default_factory=CardPiles)
    phase: BattlePhase = BattlePhase.PLAYER_TURN
    turn_number: int = 0
    """Player turns started so far."""

    stage_id: str | None = None
    victory_reward: VictoryReward | None = None
    rng: Any = Field(default=None, exclude=True)
    """Battle-specific ``GameRNG``.  Excluded from serialization."""

    # -- queries -------------------------------------------------------------

    @property
    def turn(self) -> str:
        """``"player"`` or ``"enemy"``: whose side the battle is on."""
        return "enemy" if self.phase == BattlePhase.ENEMY_TURN else "player"

    @property
    def is_over(self) -> bool:
        return self.phase in (BattlePhase.VICTORY, BattlePhase.DEFEAT)

    @property
    def active_enemies(self) -> list[Enemy]:
        return [e for e in self.enemies if e.is_active]

    def active_enemy_indices(self) -> list[int]:
        return [i for i, e in enumerate(self.enemies) if e.is_active]

    def is_valid_target(self, index: int | None) -> bool:
        return (
            index is not None
            and 0 <= index < len(self.enemies)
            and self.enemies[index].is_active
        )

    @property
    def is_battle_won(self) -> bool:
        return all(e.is_dead or e.pending_removal for e in self.enemies)

    @property
    def is_battle_lost(self) -> bool:
        return self.player.is_dead

    def check_outcome(self) -> BattlePhase | None:
        """Move to a terminal phase if the battle just ended.

        Victory is checked before defeat, so an action that kills the last
        enemy and the player at once is a win.  Returns the terminal phase
        entered, or ``None``.
        """
        if self.is_over:
            return None
        if self.is_battle_won:
            self.phase = BattlePhase.VICTORY
        elif self.is_battle_lost:
            self.phase = BattlePhase.DEFEAT
        else:
            return None
        return self.phase


# ---------------------------------------------------------------------------
# RunState
# ---------------------------------------------------------------------------

class RunState(BaseModel):
    """State that persists across battles in a campaign."""

    player: Player
    deck: list[CardInstance] = Field(default_factory=list)
    stages_cleared: list[str] = Field(default_factory=list)
    available_stages: list[str] = Field(default_factory=list)
    current_stage: str | None = None
