"""Card definitions -- the immutable templates every card instance points at."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CardType(str, Enum):
    """Card families shown on the card frame."""

    ATTACK = "attack"
    SKILL = "skill"


class CardRarity(str, Enum):
    """Controls which pool a card is offered from."""

    BASIC = "basic"
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"


class CardDefinition(BaseModel):
    """Complete mechanical description of a single card.

    Every effect field is optional and any subset may be present at once.
    When a card is resolved the effects fire in a fixed order: damage,
    block, heal, energy gain, self damage.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    """Unique identifier used for cross-references (e.g. ``"strike"``)."""

    name: str
    """Display name shown on the card."""

    cost: int = Field(default=0, ge=0)
    """Energy cost to play."""

    type: CardType = CardType.SKILL

    rarity: CardRarity = CardRarity.COMMON

    damage: int | None = Field(default=None, ge=0)
    """Damage dealt per hit."""

    block: int | None = Field(default=None, ge=0)
    """Defense the player gains."""

    heal: int | None = Field(default=None, ge=0)
    """Health the player recovers (capped at max health)."""

    energy_gain: int | None = Field(default=None, ge=0, alias="energy")
    """Bonus energy for the current turn.  Not capped at max energy."""

    hits: int = Field(default=1, ge=1)
    """How many times ``damage`` is applied to each target."""

    all_enemies: bool = Field(default=False, alias="allEnemies")
    """If True, damage hits every living enemy and no target is chosen."""

    self_damage: int | None = Field(default=None, ge=0, alias="selfDamage")
    """Damage the player takes after the other effects resolve."""

    description: str = ""
    """Card body text.  Display only."""

    @property
    def deals_damage(self) -> bool:
        return self.damage is not None

    @property
    def requires_target(self) -> bool:
        """True when the card must be aimed at a single enemy."""
        return self.deals_damage and not self.all_enemies
