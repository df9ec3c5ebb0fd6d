"""Enemy intent selection.

Ordinary enemies pick between attacking and defending at random each
turn.  Bosses follow their scripted pattern, one step per turn, wrapping
around when the script runs out.

The chosen intent is stored on the enemy before it acts so the player
can see it coming.
"""

from __future__ import annotations

import logging

from deckbattle.ir.enemies import (
    ATTACK_ACTIONS,
    DEFEND_ACTIONS,
    BossAction,
    BossPatternEntry,
)
from deckbattle.sim.config import BattleConfig
from deckbattle.sim.core.entities import Enemy, EnemyIntent, IntentKind
from deckbattle.sim.core.rng import GameRNG

logger = logging.getLogger(__name__)


class EnemyAI:
    """Chooses and stores the next intent for each enemy.

    Parameters
    ----------
    rng:
        Stream used for the attack/defend roll and the fallback damage.
    config:
        Battle tunables (defend chance, fallback damage range).
    """

    def __init__(self, rng: GameRNG, config: BattleConfig | None = None) -> None:
        self.rng = rng
        self.config = config or BattleConfig()

    def determine_intent(self, enemy: Enemy) -> EnemyIntent:
        """Pick *enemy*'s next intent, store it on the enemy, and return it."""
        enemy.turn_count += 1
        if enemy.has_pattern:
            intent = self._pattern_intent(enemy)
        else:
            intent = self._random_intent(enemy)
        enemy.intent = intent
        logger.debug(
            "%s intends %s %d (turn %d)",
            enemy.name, intent.kind.value, intent.value, enemy.turn_count,
        )
        return intent

    # ------------------------------------------------------------------
    # Boss scripts
    # ------------------------------------------------------------------

    def _pattern_intent(self, enemy: Enemy) -> EnemyIntent:
        pattern = enemy.boss_pattern
        enemy.pattern_index = (enemy.turn_count - 1) % len(pattern)
        entry = pattern[enemy.pattern_index]

        # The telegraphed numbers follow the current script step.
        enemy.base_attack = entry.damage
        enemy.base_defense = entry.defense
        return self.intent_for_entry(entry, self.config)

    @staticmethod
    def intent_for_entry(entry: BossPatternEntry, config: BattleConfig) -> EnemyIntent:
        """Translate one script step into the intent it telegraphs."""
        if entry.action in ATTACK_ACTIONS:
            return EnemyIntent(
                kind=IntentKind.ATTACK,
                value=entry.damage,
                block=entry.defense,
                action=entry.action,
                label=entry.intent,
            )
        if entry.action in DEFEND_ACTIONS:
            return EnemyIntent(
                kind=IntentKind.DEFEND,
                value=entry.defense,
                action=entry.action,
                label=entry.intent,
            )
        value = 0
        if entry.action == BossAction.REGENERATE:
            value = entry.heal if entry.heal is not None else config.regenerate_amount
        return EnemyIntent(
            kind=IntentKind.SPECIAL,
            value=value,
            action=entry.action,
            label=entry.intent,
        )

    # ------------------------------------------------------------------
    # Ordinary enemies
    # ------------------------------------------------------------------

    def _random_intent(self, enemy: Enemy) -> EnemyIntent:
        if enemy.base_defense is not None and self.rng.chance(self.config.defend_chance):
            return EnemyIntent(
                kind=IntentKind.DEFEND,
                value=enemy.base_defense,
                label=f"Defend ({enemy.base_defense})",
            )
        if enemy.base_attack is not None:
            damage = enemy.base_attack
        else:
            damage = self.rng.random_int(
                self.config.fallback_attack_min, self.config.fallback_attack_max,
            )
        return EnemyIntent(
            kind=IntentKind.ATTACK,
            value=damage,
            label=f"Attack ({damage})",
        )
