"""Tunable constants for a battle.

Everything here has a default matching the shipped content, so
``BattleConfig()`` is a complete configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

DIFFICULTY_MULTIPLIERS: dict[str, float] = {
    "very_easy": 0.5,
    "easy": 0.75,
    "normal": 1.0,
    "hard": 1.25,
    "very_hard": 1.5,
}
"""Enemy stat multipliers offered on the difficulty screen."""


class PlayerConfig(BaseModel):
    """Starting stats for a fresh run."""

    model_config = ConfigDict(frozen=True)

    name: str = "Hero"
    max_health: int = Field(default=80, gt=0)
    max_energy: int = Field(default=3, gt=0)


class BattleConfig(BaseModel):
    """Rules and timings for a single battle."""

    model_config = ConfigDict(frozen=True)

    hand_size: int = Field(default=5, ge=0)
    """Cards drawn at the start of every player turn."""

    enemy_action_interval_ms: int = Field(default=1000, ge=0)
    """Stagger between consecutive enemy actions."""

    enemy_turn_settle_ms: int = Field(default=500, ge=0)
    """Pause after the last enemy acts before the player turn begins."""

    defend_chance: float = Field(default=0.30, ge=0.0, le=1.0)
    """Chance a non-boss enemy with a defense stat telegraphs a defend."""

    fallback_attack_min: int = Field(default=5, ge=0)
    fallback_attack_max: int = Field(default=10, ge=0)
    """Inclusive damage range for enemies with no configured attack."""

    max_energy_floor: int = Field(default=1, ge=1)
    """A curse never lowers max energy below this."""

    summon_enemy_id: str = "shadow"
    """Enemy spawned by a ``summon`` step that names no enemy."""

    regenerate_amount: int = Field(default=20, ge=0)
    """Health restored by a ``regenerate`` step that names no amount."""

    difficulty: float = Field(default=1.0, gt=0.0)
    """Multiplier applied to enemy health, attack, and defense."""

    @model_validator(mode="after")
    def _check_attack_range(self) -> BattleConfig:
        if self.fallback_attack_min > self.fallback_attack_max:
            raise ValueError(
                "fallback_attack_min must be <= fallback_attack_max, got "
                f"{self.fallback_attack_min} > {self.fallback_attack_max}"
            )
        return self

    @classmethod
    def for_difficulty(cls, name: str, **overrides) -> BattleConfig:
        """Build a config from a named difficulty preset."""
        try:
            multiplier = DIFFICULTY_MULTIPLIERS[name]
        except KeyError:
            raise ValueError(
                f"Unknown difficulty {name!r}; expected one of "
                f"{sorted(DIFFICULTY_MULTIPLIERS)}"
            ) from None
        return cls(difficulty=multiplier, **overrides)
