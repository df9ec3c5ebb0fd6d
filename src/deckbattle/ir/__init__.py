"""Static content schema for the battle engine.

Cards, enemies, boss patterns, and stages are Pydantic models that
load cleanly from the JSON tables in ``deckbattle/data``.
"""

from .cards import CardDefinition, CardRarity, CardType
from .enemies import (
    ATTACK_ACTIONS,
    DEFEND_ACTIONS,
    SPECIAL_ACTIONS,
    BossAction,
    BossPatternEntry,
    EnemyDefinition,
)
from .stages import StageDefinition, StageType

__all__ = [
    # cards
    "CardDefinition",
    "CardRarity",
    "CardType",
    # enemies
    "BossAction",
    "BossPatternEntry",
    "EnemyDefinition",
    "ATTACK_ACTIONS",
    "DEFEND_ACTIONS",
    "SPECIAL_ACTIONS",
    # stages
    "StageDefinition",
    "StageType",
]
