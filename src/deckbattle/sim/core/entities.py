"""Combatant state for the battle engine.

All classes are Pydantic v2 models.  They are mutable: the orchestrator
and the effect interpreter update them in place during a battle.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from deckbattle.ir.enemies import BossAction, BossPatternEntry


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------

class DamageResult(BaseModel):
    """How one instance of damage was split between defense and health."""

    model_config = ConfigDict(frozen=True)

    blocked: int = 0
    """Damage absorbed by defense."""

    applied: int = 0
    """Damage that reached health."""

    @property
    def fully_blocked(self) -> bool:
        return self.applied == 0 and self.blocked > 0


class IntentKind(str, Enum):
    ATTACK = "attack"
    DEFEND = "defend"
    SPECIAL = "special"


class EnemyIntent(BaseModel):
    """The action an enemy telegraphs for its next turn."""

    model_config = ConfigDict(frozen=True)

    kind: IntentKind
    value: int = 0
    """Damage for attacks, defense for defends, 0 for most specials."""

    block: int = 0
    """Secondary defense gained alongside an attack (boss steps only)."""

    action: BossAction | None = None
    """The scripted boss action behind this intent, if any."""

    label: str = ""


# ---------------------------------------------------------------------------
# Combatant base
# ---------------------------------------------------------------------------

class Combatant(BaseModel):
    """Anything with health and defense."""

    name: str
    max_health: int = Field(gt=0)
    health: int
    defense: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_health(self) -> Combatant:
        if not 0 <= self.health <= self.max_health:
            raise ValueError(
                f"health must be within [0, {self.max_health}], got {self.health}"
            )
        return self

    @property
    def is_dead(self) -> bool:
        return self.health <= 0

    def take_damage(self, amount: int) -> DamageResult:
        """Apply *amount* damage: defense absorbs first, remainder to health.

        Health never drops below 0.  Non-positive amounts do nothing.
        """
        if amount <= 0:
            return DamageResult()

        blocked = min(self.defense, amount)
        self.defense -= blocked
        remaining = amount - blocked

        applied = min(self.health, remaining)
        self.health -= applied
        return DamageResult(blocked=blocked, applied=applied)

    def apply_defense(self, amount: int) -> None:
        """Add *amount* defense.  Defense stacks without a cap."""
        if amount < 0:
            raise ValueError(f"apply_defense amount must be >= 0, got {amount}")
        self.defense += amount

    def reset_defense(self) -> None:
        self.defense = 0

    def heal(self, amount: int) -> int:
        """Heal up to *amount*, capped at ``max_health``.  Returns health gained."""
        if amount <= 0:
            return 0
        before = self.health
        self.health = min(self.max_health, self.health + amount)
        return self.health - before


# ---------------------------------------------------------------------------
# Player
# ---------------------------------------------------------------------------

class Player(Combatant):
    """The player character.

    ``energy`` may exceed ``max_energy`` for the rest of a turn when a card
    grants bonus energy.
    """

    energy: int = Field(default=0, ge=0)
    max_energy: int = Field(default=3, gt=0)

    def snapshot(self) -> dict[str, int]:
        """Plain-dict view for presentation layers."""
        return {
            "health": self.health,
            "max_health": self.max_health,
            "energy": self.energy,
            "max_energy": self.max_energy,
            "defense": self.defense,
        }


# ---------------------------------------------------------------------------
# Enemy
# ---------------------------------------------------------------------------

class Enemy(Combatant):
    """A single enemy in a battle."""

    enemy_id: str
    """Ties this instance back to its enemy-table entry."""

    base_attack: int | None = None
    base_defense: int | None = None
    """Telegraphed attack/defense values.  Boss steps overwrite these."""

    is_boss: bool = False
    boss_pattern: list[BossPatternEntry] | None = None
    pattern_index: int = 0
    turn_count: int = 0
    """Number of intents chosen so far.  Drives boss pattern cycling."""

    intent: EnemyIntent | None = None

    pending_removal: bool = False
    """Set the moment health reaches 0.  The enemy can no longer be
    targeted or mutated, even before its defeat has been announced."""

    removed: bool = False
    """Set once the deferred defeat notification has fired."""

    @property
    def is_active(self) -> bool:
        """True while the enemy is part of the active roster."""
        return not self.pending_removal and not self.is_dead

    @property
    def has_pattern(self) -> bool:
        return bool(self.boss_pattern)

    def take_damage(self, amount: int) -> DamageResult:
        if self.pending_removal:
            return DamageResult()
        result = super().take_damage(amount)
        if self.is_dead:
            self.pending_removal = True
        return result

    def heal(self, amount: int) -> int:
        if self.pending_removal:
            return 0
        return super().heal(amount)
