"""Core state primitives for the battle engine."""

from deckbattle.sim.core.entities import (
    Combatant,
    DamageResult,
    Enemy,
    EnemyIntent,
    IntentKind,
    Player,
)
from deckbattle.sim.core.game_state import (
    BattlePhase,
    BattleSession,
    CardInstance,
    CardPiles,
    RunState,
    VictoryReward,
)
from deckbattle.sim.core.rng import GameRNG
from deckbattle.sim.core.scheduler import ManualScheduler, ScheduledCall, Scheduler

__all__ = [
    # rng
    "GameRNG",
    # entities
    "Combatant",
    "DamageResult",
    "Player",
    "Enemy",
    "EnemyIntent",
    "IntentKind",
    # game_state
    "CardInstance",
    "CardPiles",
    "BattlePhase",
    "BattleSession",
    "VictoryReward",
    "RunState",
    # scheduler
    "Scheduler",
    "ScheduledCall",
    "ManualScheduler",
]
