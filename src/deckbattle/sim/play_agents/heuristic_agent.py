"""Heuristic agent that uses the visible intents to make decisions.

The ``HeuristicAgent`` is a hand-written policy built from a priority
waterfall, evaluated every time it is asked for a card:

1. Lethal: a damage card that kills an enemy outright, cheapest first.
2. Free energy: zero-cost energy cards before anything that costs energy.
3. Survival: defense (or healing) when the telegraphed damage would
   get through the current defense.
4. Damage: the highest damage-per-energy card, aimed at the weakest enemy.
5. Anything else affordable that does not hurt the player too much.

Card rewards are scored from the card's own numbers, so custom tables
work without a tier list.  Stages are chosen by type: normal stages
first, bosses only when nothing else is open.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from deckbattle.ir.stages import StageType
from deckbattle.sim.core.entities import IntentKind
from deckbattle.sim.play_agents.base import PlayAgent

if TYPE_CHECKING:
    from deckbattle.ir.cards import CardDefinition
    from deckbattle.sim.content.registry import ContentRegistry
    from deckbattle.sim.core.game_state import BattleSession, CardInstance

# Self damage is only accepted while health stays above this fraction.
_SELF_DAMAGE_HP_FLOOR = 0.5

_STAGE_PREFERENCE: dict[StageType, int] = {
    StageType.NORMAL: 0,
    StageType.MID_BOSS: 1,
    StageType.BOSS: 2,
}


def incoming_damage(session: BattleSession) -> int:
    """Total damage the active enemies telegraph for their next turn."""
    return sum(
        e.intent.value
        for e in session.active_enemies
        if e.intent is not None and e.intent.kind == IntentKind.ATTACK
    )


def card_damage(card: CardDefinition, n_targets: int) -> int:
    """Raw damage *card* deals across *n_targets* enemies, before defense."""
    if card.damage is None:
        return 0
    targets = n_targets if card.all_enemies else 1
    return card.damage * card.hits * targets


class HeuristicAgent(PlayAgent):
    """Priority-based agent.

    Parameters
    ----------
    registry:
        Optional; used to look up stage types when choosing a stage.
    """

    def __init__(self, registry: ContentRegistry | None = None) -> None:
        self.registry = registry

    # ------------------------------------------------------------------
    # Card play
    # ------------------------------------------------------------------

    def choose_card_to_play(
        self,
        session: BattleSession,
        playable_cards: list[tuple[int, CardInstance]],
    ) -> tuple[int, int | None] | None:
        if not playable_cards:
            return None

        living = session.active_enemy_indices()
        if not living:
            return None
        weakest = min(living, key=lambda i: session.enemies[i].health + session.enemies[i].defense)

        for chooser in (
            self._lethal,
            self._free_energy,
            self._survival,
            self._best_damage,
            self._anything,
        ):
            choice = chooser(session, playable_cards, weakest)
            if choice is not None:
                hand_index, card = choice
                target = None
                if card.definition.requires_target:
                    target = self._target_for(session, card.definition, weakest)
                return hand_index, target
        return None

    def _target_for(self, session: BattleSession, card: CardDefinition, default: int) -> int:
        """Prefer an enemy this card kills; otherwise the weakest."""
        damage = card_damage(card, 1)
        for i in session.active_enemy_indices():
            enemy = session.enemies[i]
            if enemy.health + enemy.defense <= damage:
                return i
        return default

    def _lethal(self, session, playable, weakest):
        kills: list[tuple[int, int, CardInstance]] = []
        for hand_index, card in playable:
            d = card.definition
            if d.damage is None:
                continue
            killable = any(
                e.health + e.defense <= d.damage * d.hits for e in session.active_enemies
            )
            if killable and self._self_damage_ok(session, d):
                kills.append((d.cost, hand_index, card))
        if not kills:
            return None
        _, hand_index, card = min(kills, key=lambda k: (k[0], k[1]))
        return hand_index, card

    def _free_energy(self, session, playable, weakest):
        for hand_index, card in playable:
            d = card.definition
            if d.energy_gain and d.cost == 0 and self._self_damage_ok(session, d):
                return hand_index, card
        return None

    def _survival(self, session, playable, weakest):
        player = session.player
        threat = incoming_damage(session) - player.defense
        if threat <= 0:
            return None
        best: tuple[int, int, CardInstance] | None = None
        for hand_index, card in playable:
            d = card.definition
            value = (d.block or 0) + (d.heal or 0 if player.health < player.max_health else 0)
            if value <= 0:
                continue
            if best is None or value > best[0]:
                best = (value, hand_index, card)
        if best is None:
            return None
        return best[1], best[2]

    def _best_damage(self, session, playable, weakest):
        n_targets = len(session.active_enemies)
        best: tuple[float, int, CardInstance] | None = None
        for hand_index, card in playable:
            d = card.definition
            damage = card_damage(d, n_targets)
            if damage <= 0 or not self._self_damage_ok(session, d):
                continue
            ratio = damage / max(d.cost, 0.5)
            if best is None or ratio > best[0]:
                best = (ratio, hand_index, card)
        if best is None:
            return None
        return best[1], best[2]

    def _anything(self, session, playable, weakest):
        for hand_index, card in playable:
            d = card.definition
            if d.heal and session.player.health >= session.player.max_health and not d.block:
                continue
            if self._self_damage_ok(session, d):
                return hand_index, card
        return None

    @staticmethod
    def _self_damage_ok(session: BattleSession, card: CardDefinition) -> bool:
        if not card.self_damage:
            return True
        player = session.player
        after = player.health - max(0, card.self_damage - player.defense)
        return after > player.max_health * _SELF_DAMAGE_HP_FLOOR

    # ------------------------------------------------------------------
    # Rewards and stages
    # ------------------------------------------------------------------

    def choose_card_reward(
        self,
        cards: list[CardDefinition],
        deck: list[str],
    ) -> CardDefinition | None:
        """Take the card with the best effect-per-energy score."""
        if not cards:
            return None
        return max(cards, key=self._score_card)

    @staticmethod
    def _score_card(card: CardDefinition) -> float:
        damage = card_damage(card, 2)
        value = damage + (card.block or 0) + (card.heal or 0) * 0.8
        value += (card.energy_gain or 0) * 6 - (card.self_damage or 0)
        return value / max(card.cost, 0.5)

    def choose_stage(self, available: list[str]) -> str:
        if self.registry is None:
            return available[0]

        def preference(stage_id: str) -> int:
            stage = self.registry.get_stage(stage_id)
            return _STAGE_PREFERENCE[stage.type] if stage is not None else 0

        return min(available, key=preference)
