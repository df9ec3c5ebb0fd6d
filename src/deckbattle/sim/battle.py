"""Battle controller -- owns the turn flow of a single battle.

The controller is the only thing that moves a :class:`BattleSession`
between phases::

    PLAYER_TURN --end_turn--> ENEMY_TURN --(enemies act)--> PLAYER_TURN
         |                         |
         +----> VICTORY / DEFEAT <-+

Player input (``play_card``, ``end_turn``) is validated and applied
synchronously.  The enemy turn is asynchronous: it starts once the
presentation sink finishes the hand-discard effect, then each enemy acts
on its own scheduler tick, then the next player turn begins after a
short settle delay.  Nothing blocks; every wait is a callback.

Usage::

    controller = BattleController(
        session, enemy_ai, interpreter, scheduler, sink=NullSink(),
    )
    controller.start()
    controller.play_card(0, target=1)
    controller.end_turn()
    scheduler.run_until_idle()
"""

from __future__ import annotations

import logging
from enum import Enum
from functools import partial
from typing import Any, Callable, Protocol

from pydantic import BaseModel

from deckbattle.sim.config import BattleConfig
from deckbattle.sim.core.entities import DamageResult
from deckbattle.sim.core.game_state import (
    BattlePhase,
    BattleSession,
    CardInstance,
    VictoryReward,
)
from deckbattle.sim.core.scheduler import ScheduledCall, Scheduler
from deckbattle.sim.enemy_ai import EnemyAI
from deckbattle.sim.events import (
    BattleEvent,
    BattleEventType,
    EventBus,
    Listener,
    NullSink,
    PresentationSink,
)
from deckbattle.sim.interpreter import CardResolution, EffectInterpreter, IntentResolution
from deckbattle.sim.mechanics.block import clear_block
from deckbattle.sim.mechanics.card_piles import discard_card, discard_hand, draw_cards, shuffle_deck
from deckbattle.sim.mechanics.energy import can_afford, reset_energy

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class RejectReason(str, Enum):
    """Why a player action was refused."""

    INSUFFICIENT_ENERGY = "insufficient_energy"
    INVALID_CARD_INDEX = "invalid_card_index"
    INVALID_TARGET = "invalid_target"
    ILLEGAL_PHASE = "illegal_phase"


class ActionResult(BaseModel):
    """Outcome of a player action.  A refused action changed nothing."""

    ok: bool
    reason: RejectReason | None = None
    message: str = ""

    @classmethod
    def accepted(cls, message: str = "") -> ActionResult:
        return cls(ok=True, message=message)

    @classmethod
    def rejected(cls, reason: RejectReason, message: str) -> ActionResult:
        return cls(ok=False, reason=reason, message=message)

    def __bool__(self) -> bool:
        return self.ok


class ProgressionPolicy(Protocol):
    """Decides what winning a stage grants."""

    def on_victory(self, stage_id: str | None) -> VictoryReward: ...


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class BattleController:
    """Runs one battle over a :class:`BattleSession`.

    Parameters
    ----------
    session:
        The battle state.  The controller mutates it in place.
    enemy_ai:
        Chooses each enemy's next intent.
    interpreter:
        Applies card effects and enemy intents.
    scheduler:
        Runs the staggered enemy actions and the settle delay.
    sink:
        Presentation layer.  Defaults to :class:`NullSink`.
    progression:
        Asked for the victory reward when the battle is won.
    config:
        Battle tunables.  Defaults to the interpreter's config.
    """

    def __init__(
        self,
        session: BattleSession,
        enemy_ai: EnemyAI,
        interpreter: EffectInterpreter,
        scheduler: Scheduler,
        sink: PresentationSink | None = None,
        progression: ProgressionPolicy | None = None,
        config: BattleConfig | None = None,
    ) -> None:
        self.session = session
        self.enemy_ai = enemy_ai
        self.interpreter = interpreter
        self.scheduler = scheduler
        self.sink = sink or NullSink()
        self.progression = progression
        self.config = config or interpreter.config
        self.bus = EventBus()

        self._started = False
        self._scheduled: list[ScheduledCall] = []

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register an observer for every event.  Returns an unsubscribe hook."""
        return self.bus.subscribe(listener)

    def _emit(
        self,
        event_type: BattleEventType,
        on_complete: Callable[[], None] | None = None,
        **payload: Any,
    ) -> BattleEvent:
        event = BattleEvent(type=event_type, payload=payload)
        self.bus.publish(event)
        self.sink.play(event, on_complete)
        return event

    # ------------------------------------------------------------------
    # Start
    # ------------------------------------------------------------------

    def start(self) -> ActionResult:
        """Shuffle the deck, set every enemy's first intent, start turn 1."""
        if self._started or self.session.is_over:
            return ActionResult.rejected(
                RejectReason.ILLEGAL_PHASE, "battle has already started",
            )
        self._started = True

        shuffle_deck(self.session)
        self._emit(
            BattleEventType.BATTLE_STARTED,
            stage_id=self.session.stage_id,
            enemies=[e.enemy_id for e in self.session.enemies],
        )
        for index in self.session.active_enemy_indices():
            self._choose_intent(index)

        logger.debug(
            "Battle started: stage=%s enemies=%d deck=%d",
            self.session.stage_id, len(self.session.enemies), self.session.piles.total,
        )
        self._begin_player_turn()
        return ActionResult.accepted()

    @property
    def started(self) -> bool:
        return self._started

    # ------------------------------------------------------------------
    # Player turn
    # ------------------------------------------------------------------

    def _begin_player_turn(self) -> None:
        session = self.session
        session.phase = BattlePhase.PLAYER_TURN
        session.turn_number += 1

        clear_block(session.player)
        reset_energy(session.player)
        self._emit(
            BattleEventType.PLAYER_TURN_STARTED,
            turn_number=session.turn_number,
            energy=session.player.energy,
        )
        self.draw(self.config.hand_size)

    def draw(self, n: int) -> list[CardInstance]:
        """Draw up to *n* cards and report it.  A short draw is not an error."""
        piles = self.session.piles
        reshuffles_before = piles.reshuffle_count
        discard_before = len(piles.discard)
        drawn = draw_cards(self.session, n)

        if piles.reshuffle_count != reshuffles_before:
            self._emit(BattleEventType.DECK_RESHUFFLED, deck_size=discard_before)
        if len(drawn) < n:
            logger.debug("Short draw: requested %d, drew %d", n, len(drawn))
        self._emit(
            BattleEventType.CARDS_DRAWN,
            requested=n,
            drawn=len(drawn),
            card_ids=[c.card_id for c in drawn],
        )
        return drawn

    def validate_play(self, hand_index: int, target: int | None = None) -> ActionResult:
        """Check whether a play would be accepted, without performing it."""
        session = self.session
        if not self._started:
            return ActionResult.rejected(RejectReason.ILLEGAL_PHASE, "battle has not started")
        if session.phase != BattlePhase.PLAYER_TURN:
            return ActionResult.rejected(
                RejectReason.ILLEGAL_PHASE,
                f"cannot play cards during {session.phase.value}",
            )
        hand = session.piles.hand
        if not 0 <= hand_index < len(hand):
            return ActionResult.rejected(
                RejectReason.INVALID_CARD_INDEX,
                f"no card at hand index {hand_index} (hand size {len(hand)})",
            )
        card = hand[hand_index].definition
        if not can_afford(session.player, card.cost):
            return ActionResult.rejected(
                RejectReason.INSUFFICIENT_ENERGY,
                f"{card.name} costs {card.cost}, have {session.player.energy}",
            )
        if card.requires_target and not session.is_valid_target(target):
            return ActionResult.rejected(
                RejectReason.INVALID_TARGET,
                f"{card.name} needs a living enemy target, got {target}",
            )
        return ActionResult.accepted()

    def play_card(self, hand_index: int, target: int | None = None) -> ActionResult:
        """Play the card at *hand_index*, aimed at enemy *target* if it needs one."""
        check = self.validate_play(hand_index, target)
        if not check.ok:
            logger.debug("Rejected play: %s", check.message)
            return check

        session = self.session
        card = session.piles.take_from_hand(hand_index)
        resolution = self.interpreter.resolve_card(card.definition, session, target)
        discard_card(session, card)

        self._report_card(card, resolution, target)
        self._check_outcome()
        return ActionResult.accepted(f"played {card.name}")

    def _report_card(
        self,
        card: CardInstance,
        resolution: CardResolution,
        target: int | None,
    ) -> None:
        self._emit(
            BattleEventType.CARD_PLAYED,
            card_id=card.card_id,
            instance_id=card.id,
            target=target,
            energy_spent=resolution.energy_spent,
        )
        for hit in resolution.hits:
            self._emit(
                BattleEventType.DAMAGE_DEALT,
                source="player",
                target=hit.target,
                hits=hit.hits,
                blocked=hit.blocked,
                applied=hit.applied,
            )
        for index in resolution.killed:
            self._on_enemy_killed(index)
        if resolution.block_gained:
            self._emit(BattleEventType.BLOCK_GAINED, target="player", amount=resolution.block_gained)
        if resolution.healed:
            self._emit(BattleEventType.HEALED, target="player", amount=resolution.healed)
        if resolution.energy_gained:
            self._emit(BattleEventType.ENERGY_GAINED, amount=resolution.energy_gained)
        if resolution.self_damage is not None:
            self._report_player_damage(resolution.self_damage, source="self")

    def _report_player_damage(self, result: DamageResult, source: Any) -> None:
        self._emit(
            BattleEventType.DAMAGE_DEALT,
            source=source,
            target="player",
            hits=1,
            blocked=result.blocked,
            applied=result.applied,
        )

    # ------------------------------------------------------------------
    # End of turn / enemy turn
    # ------------------------------------------------------------------

    def end_turn(self) -> ActionResult:
        """Discard the hand and hand control to the enemies.

        The enemy sequence starts when the sink finishes the discard
        effect.
        """
        session = self.session
        if not self._started:
            return ActionResult.rejected(RejectReason.ILLEGAL_PHASE, "battle has not started")
        if session.phase != BattlePhase.PLAYER_TURN:
            return ActionResult.rejected(
                RejectReason.ILLEGAL_PHASE,
                f"cannot end turn during {session.phase.value}",
            )

        session.phase = BattlePhase.ENEMY_TURN
        discarded = discard_hand(session)
        logger.debug("Turn %d ended, discarded %d", session.turn_number, len(discarded))
        self._emit(
            BattleEventType.HAND_DISCARDED,
            on_complete=self._start_enemy_turn,
            card_ids=[c.card_id for c in discarded],
        )
        return ActionResult.accepted()

    def _start_enemy_turn(self) -> None:
        session = self.session
        if session.phase != BattlePhase.ENEMY_TURN:
            return

        acting = session.active_enemy_indices()
        self._emit(BattleEventType.ENEMY_TURN_STARTED, acting=acting)

        interval = self.config.enemy_action_interval_ms
        for order, index in enumerate(acting):
            self._schedule(order * interval, partial(self._enemy_act, index))
        self._schedule(
            len(acting) * interval + self.config.enemy_turn_settle_ms,
            self._finish_enemy_turn,
        )

    def _schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self._scheduled = [c for c in self._scheduled if not c.cancelled]
        self._scheduled.append(self.scheduler.call_later(delay_ms, callback))

    def _enemy_act(self, index: int) -> None:
        session = self.session
        if session.phase != BattlePhase.ENEMY_TURN:
            return
        enemy = session.enemies[index]
        if not enemy.is_active:
            return

        outcome = self.interpreter.resolve_intent(index, session)
        self._report_intent(outcome)
        self._choose_intent(index)

        if self._check_outcome() is not None:
            logger.debug("Battle ended during enemy turn; skipping remaining actions")

    def _report_intent(self, outcome: IntentResolution) -> None:
        index = outcome.enemy_index
        self._emit(
            BattleEventType.ENEMY_ACTED,
            enemy=index,
            kind=outcome.kind.value if outcome.kind else None,
            action=outcome.action.value if outcome.action else None,
        )
        if outcome.damage is not None:
            self._report_player_damage(outcome.damage, source=index)
        if outcome.block_gained:
            self._emit(BattleEventType.BLOCK_GAINED, target=index, amount=outcome.block_gained)
        if outcome.healed:
            self._emit(BattleEventType.HEALED, target=index, amount=outcome.healed)
        if outcome.max_energy is not None:
            self._emit(BattleEventType.PLAYER_CURSED, max_energy=outcome.max_energy)
        if outcome.summoned_index is not None:
            minion = self.session.enemies[outcome.summoned_index]
            self._emit(
                BattleEventType.ENEMY_SUMMONED,
                summoner=index,
                enemy=outcome.summoned_index,
                enemy_id=minion.enemy_id,
            )
            self._choose_intent(outcome.summoned_index)

    def _finish_enemy_turn(self) -> None:
        if self.session.phase != BattlePhase.ENEMY_TURN:
            return
        if self._check_outcome() is None:
            self._begin_player_turn()

    def _choose_intent(self, index: int) -> None:
        enemy = self.session.enemies[index]
        intent = self.enemy_ai.determine_intent(enemy)
        self._emit(
            BattleEventType.INTENT_CHANGED,
            enemy=index,
            kind=intent.kind.value,
            value=intent.value,
            label=intent.label,
        )

    # ------------------------------------------------------------------
    # Deaths and outcome
    # ------------------------------------------------------------------

    def _on_enemy_killed(self, index: int) -> None:
        """Play the death effect; announce the defeat once it completes."""
        enemy = self.session.enemies[index]
        logger.debug("%s (#%d) killed; defeat pending", enemy.name, index)
        self._emit(
            BattleEventType.ENEMY_KILLED,
            on_complete=partial(self._announce_defeat, index),
            enemy=index,
            enemy_id=enemy.enemy_id,
        )

    def _announce_defeat(self, index: int) -> None:
        enemy = self.session.enemies[index]
        if enemy.removed:
            return
        enemy.removed = True
        self._emit(BattleEventType.ENEMY_DEFEATED, enemy=index, enemy_id=enemy.enemy_id)

    def _check_outcome(self) -> BattlePhase | None:
        phase = self.session.check_outcome()
        if phase is not None:
            self._finish_battle()
        return phase

    def _finish_battle(self) -> None:
        session = self.session
        for call in self._scheduled:
            call.cancel()
        self._scheduled.clear()

        if session.phase == BattlePhase.VICTORY and self.progression is not None:
            session.victory_reward = self.progression.on_victory(session.stage_id)

        reward = session.victory_reward
        logger.debug("Battle over: %s on turn %d", session.phase.value, session.turn_number)
        self._emit(
            BattleEventType.BATTLE_ENDED,
            outcome=session.phase.value,
            turn_number=session.turn_number,
            heal_fraction=reward.heal_fraction if reward else None,
            unlocked_stage_ids=list(reward.unlocked_stage_ids) if reward else [],
        )

    # ------------------------------------------------------------------
    # Debug hooks
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        """Clamp player stats after an external edit and notify observers."""
        player = self.session.player
        player.max_health = max(1, player.max_health)
        player.health = max(0, min(player.health, player.max_health))
        player.energy = max(0, player.energy)
        player.defense = max(0, player.defense)
        self._emit(BattleEventType.STATE_CHANGED, player=player.snapshot())
        self._check_outcome()

    def damage_player(self, amount: int) -> DamageResult:
        result = self.session.player.take_damage(amount)
        self._report_player_damage(result, source="debug")
        self._check_outcome()
        return result

    def heal_player(self, amount: int) -> int:
        healed = self.session.player.heal(amount)
        if healed:
            self._emit(BattleEventType.HEALED, target="player", amount=healed)
        return healed

    def damage_enemy(self, index: int, amount: int) -> DamageResult | None:
        """Hit an active enemy directly.  Returns ``None`` for a bad index."""
        session = self.session
        if session.is_over or not session.is_valid_target(index):
            return None
        enemy = session.enemies[index]
        result = enemy.take_damage(amount)
        self._emit(
            BattleEventType.DAMAGE_DEALT,
            source="debug",
            target=index,
            hits=1,
            blocked=result.blocked,
            applied=result.applied,
        )
        if enemy.is_dead:
            self._on_enemy_killed(index)
        self._check_outcome()
        return result

    def heal_enemy(self, index: int, amount: int) -> int | None:
        session = self.session
        if not session.is_valid_target(index):
            return None
        healed = session.enemies[index].heal(amount)
        if healed:
            self._emit(BattleEventType.HEALED, target=index, amount=healed)
        return healed

    def inject_card(self, card: CardInstance) -> None:
        """Put a new card straight into the hand."""
        self.session.piles.add_to_hand(card)
        self._emit(BattleEventType.CARDS_DRAWN, requested=1, drawn=1, card_ids=[card.card_id])

    def force_player_turn(self) -> bool:
        """Cut the enemy turn short and start the next player turn."""
        if self.session.phase != BattlePhase.ENEMY_TURN:
            return False
        for call in self._scheduled:
            call.cancel()
        self._scheduled.clear()
        self._begin_player_turn()
        return True

    def force_outcome(self, phase: BattlePhase) -> bool:
        """End the battle immediately as *phase*.  False if already over."""
        if phase not in (BattlePhase.VICTORY, BattlePhase.DEFEAT):
            raise ValueError(f"force_outcome needs a terminal phase, got {phase}")
        if self.session.is_over:
            return False
        if phase == BattlePhase.VICTORY:
            for index in self.session.active_enemy_indices():
                enemy = self.session.enemies[index]
                enemy.take_damage(enemy.health + enemy.defense)
                self._on_enemy_killed(index)
        self.session.phase = phase
        self._finish_battle()
        return True
