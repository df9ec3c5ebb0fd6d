"""Enemy and boss-pattern definitions."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class BossAction(str, Enum):
    """Action vocabulary used by scripted boss patterns."""

    # attack-like: deal ``damage`` (and gain ``defense`` as block if set)
    ATTACK = "attack"
    DEVASTATE = "devastate"
    METEOR = "meteor"
    INFERNO = "inferno"
    DARK_POWER = "dark_power"
    APOCALYPSE = "apocalypse"
    SHADOW_BLAST = "shadow_blast"

    # pure defense: gain ``defense`` as block, no damage
    CHARGE = "charge"
    FIRE_SHIELD = "fire_shield"
    DARK_RITUAL = "dark_ritual"

    # specials
    SUMMON = "summon"
    CURSE = "curse"
    REGENERATE = "regenerate"


ATTACK_ACTIONS = frozenset({
    BossAction.ATTACK,
    BossAction.DEVASTATE,
    BossAction.METEOR,
    BossAction.INFERNO,
    BossAction.DARK_POWER,
    BossAction.APOCALYPSE,
    BossAction.SHADOW_BLAST,
})

DEFEND_ACTIONS = frozenset({
    BossAction.CHARGE,
    BossAction.FIRE_SHIELD,
    BossAction.DARK_RITUAL,
})

SPECIAL_ACTIONS = frozenset({
    BossAction.SUMMON,
    BossAction.CURSE,
    BossAction.REGENERATE,
})


class BossPatternEntry(BaseModel):
    """One step of a boss's cyclic script."""

    model_config = ConfigDict(frozen=True)

    turn: int = Field(ge=1)
    """1-based position in the script, as written in the data table."""

    action: BossAction
    damage: int = Field(default=0, ge=0)
    defense: int = Field(default=0, ge=0)
    intent: str = ""
    """Telegraph text shown above the boss."""

    summon: str | None = None
    """Enemy id spawned by a ``summon`` step.  ``None`` uses the configured
    default."""

    heal: int | None = Field(default=None, ge=0)
    """Health restored by a ``regenerate`` step.  ``None`` uses the
    configured default."""


class EnemyDefinition(BaseModel):
    """Static stats for one enemy type."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    health: int = Field(gt=0)
    attack: int | None = Field(default=None, ge=0)
    defense: int | None = Field(default=None, ge=0)
    is_boss: bool = Field(default=False, alias="isBoss")
    intent: str = ""
    """Flavour text for the enemy's default telegraph."""
