"""Effect interpreter -- applies card data and enemy intents to a battle.

Cards carry their effects as plain optional fields rather than an action
tree, so resolving one is a fixed walk over those fields.  Enemy intents
are resolved here too, which keeps every state change a battle can see
in one place.

Usage::

    from deckbattle.sim.interpreter import EffectInterpreter

    interp = EffectInterpreter(registry=registry, config=config)
    resolution = interp.resolve_card(card_def, session, chosen_target=0)
    outcome = interp.resolve_intent(enemy_index=1, session=session)

The interpreter never checks legality.  The battle controller does that
before calling in.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from deckbattle.ir.cards import CardDefinition
from deckbattle.ir.enemies import BossAction
from deckbattle.sim.config import BattleConfig
from deckbattle.sim.core.entities import DamageResult, IntentKind
from deckbattle.sim.core.game_state import BattleSession
from deckbattle.sim.mechanics.block import gain_block
from deckbattle.sim.mechanics.damage import deal_damage, total_applied, total_blocked
from deckbattle.sim.mechanics.energy import gain_energy, lower_max_energy, pay_energy
from deckbattle.sim.mechanics.targeting import resolve_targets

if TYPE_CHECKING:
    from deckbattle.sim.content.registry import ContentRegistry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Resolution records
# ---------------------------------------------------------------------------

class HitRecord(BaseModel):
    """Damage one card dealt to one enemy, summed over its hits."""

    target: int
    hits: int = 0
    blocked: int = 0
    applied: int = 0
    killed: bool = False


class CardResolution(BaseModel):
    """Everything that happened when a card resolved."""

    card_id: str
    energy_spent: int = 0
    hits: list[HitRecord] = Field(default_factory=list)
    block_gained: int = 0
    healed: int = 0
    energy_gained: int = 0
    self_damage: DamageResult | None = None

    @property
    def killed(self) -> list[int]:
        """Indices of enemies this card killed."""
        return [h.target for h in self.hits if h.killed]

    @property
    def damage_applied(self) -> int:
        return sum(h.applied for h in self.hits)


class IntentResolution(BaseModel):
    """Everything that happened when one enemy carried out its intent."""

    enemy_index: int
    kind: IntentKind | None = None
    action: BossAction | None = None
    damage: DamageResult | None = None
    """Damage dealt to the player, for attacks."""

    block_gained: int = 0
    healed: int = 0
    summoned_index: int | None = None
    """Roster index of an enemy added by a summon."""

    max_energy: int | None = None
    """The player's new maximum energy after a curse."""


# ---------------------------------------------------------------------------
# Interpreter
# ---------------------------------------------------------------------------

class EffectInterpreter:
    """Applies cards and intents to a :class:`BattleSession`.

    Stateless between calls.

    Parameters
    ----------
    registry:
        Used to build summoned enemies.  Without one, summons do nothing.
    config:
        Battle tunables (summon default, curse floor, difficulty).
    """

    def __init__(
        self,
        registry: ContentRegistry | None = None,
        config: BattleConfig | None = None,
    ) -> None:
        self.registry = registry
        self.config = config or BattleConfig()

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    def resolve_card(
        self,
        card: CardDefinition,
        session: BattleSession,
        chosen_target: int | None = None,
    ) -> CardResolution:
        """Apply *card* to *session*.

        Effects fire in a fixed order: pay cost, damage, block, heal,
        energy gain, self damage.  Every field the card sets fires.
        """
        player = session.player
        resolution = CardResolution(card_id=card.id)

        pay_energy(player, card.cost)
        resolution.energy_spent = card.cost

        if card.damage is not None:
            for index in resolve_targets(session, card, chosen_target):
                enemy = session.enemies[index]
                results = deal_damage(enemy, card.damage, card.hits)
                resolution.hits.append(HitRecord(
                    target=index,
                    hits=len(results),
                    blocked=total_blocked(results),
                    applied=total_applied(results),
                    killed=enemy.is_dead,
                ))

        if card.block is not None:
            resolution.block_gained = gain_block(player, card.block)

        if card.heal is not None:
            resolution.healed = player.heal(card.heal)

        if card.energy_gain is not None:
            gain_energy(player, card.energy_gain)
            resolution.energy_gained = card.energy_gain

        if card.self_damage is not None:
            resolution.self_damage = player.take_damage(card.self_damage)

        return resolution

    # ------------------------------------------------------------------
    # Enemy intents
    # ------------------------------------------------------------------

    def resolve_intent(self, enemy_index: int, session: BattleSession) -> IntentResolution:
        """Carry out the stored intent of the enemy at *enemy_index*."""
        enemy = session.enemies[enemy_index]
        intent = enemy.intent
        resolution = IntentResolution(enemy_index=enemy_index)
        if intent is None:
            logger.debug("%s has no intent; skipping", enemy.name)
            return resolution

        resolution.kind = intent.kind
        resolution.action = intent.action

        if intent.kind == IntentKind.ATTACK:
            resolution.damage = session.player.take_damage(intent.value)
            if intent.block > 0:
                resolution.block_gained = gain_block(enemy, intent.block)
        elif intent.kind == IntentKind.DEFEND:
            resolution.block_gained = gain_block(enemy, intent.value)
        elif intent.action == BossAction.SUMMON:
            resolution.summoned_index = self._summon(enemy_index, session)
        elif intent.action == BossAction.CURSE:
            resolution.max_energy = lower_max_energy(
                session.player, 1, floor=self.config.max_energy_floor,
            )
        elif intent.action == BossAction.REGENERATE:
            resolution.healed = enemy.heal(intent.value)
        else:
            logger.warning(
                "Unhandled intent %s/%s from %s", intent.kind.value, intent.action, enemy.name,
            )

        return resolution

    def _summon(self, enemy_index: int, session: BattleSession) -> int | None:
        enemy = session.enemies[enemy_index]
        summon_id = self.config.summon_enemy_id
        if enemy.has_pattern:
            entry = enemy.boss_pattern[enemy.pattern_index]
            summon_id = entry.summon or summon_id

        if self.registry is None or self.registry.get_enemy(summon_id) is None:
            logger.warning("%s cannot summon unknown enemy %r", enemy.name, summon_id)
            return None

        minion = self.registry.build_enemy(summon_id, self.config.difficulty)
        session.enemies.append(minion)
        logger.debug("%s summoned %s", enemy.name, minion.name)
        return len(session.enemies) - 1
