"""Tests for the battle controller: turn flow, legality, timing, and outcome."""

from __future__ import annotations

import pytest

from deckbattle.ir.cards import CardDefinition
from deckbattle.sim.battle import BattleController, RejectReason
from deckbattle.sim.config import BattleConfig
from deckbattle.sim.core.entities import Enemy, EnemyIntent, IntentKind, Player
from deckbattle.sim.core.game_state import (
    BattlePhase,
    BattleSession,
    CardInstance,
    CardPiles,
    VictoryReward,
)
from deckbattle.sim.core.rng import GameRNG
from deckbattle.sim.core.scheduler import ManualScheduler
from deckbattle.sim.encounter import create_battle
from deckbattle.sim.enemy_ai import EnemyAI
from deckbattle.sim.events import BattleEvent, BattleEventType, DeferredSink
from deckbattle.sim.interpreter import EffectInterpreter


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

STRIKE = CardDefinition(id="strike", name="Strike", cost=1, damage=6)
IRON_WALL = CardDefinition(id="iron_wall", name="Iron Wall", cost=1, block=8)
WHIRLWIND = CardDefinition(id="whirlwind", name="Whirlwind", cost=1, damage=4, all_enemies=True)
FRENZY = CardDefinition(id="frenzy", name="Frenzy", cost=0, damage=8, self_damage=3)


def _cards(definition: CardDefinition, n: int = 7) -> list[CardInstance]:
    return [CardInstance(definition=definition) for _ in range(n)]


def _make_enemy(**kwargs) -> Enemy:
    defaults = dict(
        name="Goblin Warrior", enemy_id="goblin_warrior",
        max_health=25, health=25, base_attack=7,
    )
    defaults.update(kwargs)
    return Enemy(**defaults)


def _make_controller(
    enemies: list[Enemy] | None = None,
    deck: list[CardInstance] | None = None,
    sink=None,
    progression=None,
    registry=None,
    stage_id: str | None = None,
    **player_kwargs,
) -> BattleController:
    player_defaults = dict(name="Hero", max_health=80, health=80, max_energy=3, energy=3)
    player_defaults.update(player_kwargs)
    session = BattleSession(
        player=Player(**player_defaults),
        enemies=enemies if enemies is not None else [_make_enemy()],
        piles=CardPiles(deck=deck if deck is not None else _cards(STRIKE)),
        stage_id=stage_id,
        rng=GameRNG(42),
    )
    config = BattleConfig()
    return BattleController(
        session,
        EnemyAI(GameRNG(1), config),
        EffectInterpreter(registry, config),
        ManualScheduler(),
        sink=sink,
        progression=progression,
        config=config,
    )


def _record(controller: BattleController) -> list[BattleEvent]:
    seen: list[BattleEvent] = []
    controller.subscribe(seen.append)
    return seen


def _count(events: list[BattleEvent], kind: BattleEventType) -> int:
    return sum(1 for e in events if e.type == kind)


class _FixedProgression:
    def __init__(self) -> None:
        self.calls: list[str | None] = []

    def on_victory(self, stage_id: str | None) -> VictoryReward:
        self.calls.append(stage_id)
        return VictoryReward(heal_fraction=0.25, unlocked_stage_ids=["2", "3"])


# ---------------------------------------------------------------------------
# Start
# ---------------------------------------------------------------------------

class TestStart:
    def test_first_turn(self):
        c = _make_controller(enemies=[_make_enemy(), _make_enemy()])
        seen = _record(c)
        assert c.start().ok
        s = c.session
        assert s.phase == BattlePhase.PLAYER_TURN
        assert s.turn_number == 1
        assert s.player.energy == 3
        assert s.piles.hand_size == 5
        assert len(s.piles.deck) == 2
        assert all(e.intent is not None for e in s.enemies)
        assert seen[0].type == BattleEventType.BATTLE_STARTED
        assert _count(seen, BattleEventType.INTENT_CHANGED) == 2
        assert seen[-1].type == BattleEventType.CARDS_DRAWN
        assert seen[-1].payload["drawn"] == 5

    def test_start_twice_rejected(self):
        c = _make_controller()
        c.start()
        result = c.start()
        assert not result
        assert result.reason == RejectReason.ILLEGAL_PHASE
        assert c.session.turn_number == 1

    def test_starter_deck_battle(self, registry):
        c = create_battle(registry, GameRNG(5), enemy_ids=["goblin_warrior"])
        c.start()
        s = c.session
        assert s.player.health == s.player.max_health == 80
        assert s.piles.hand_size == 5
        assert s.piles.total == 7

    def test_short_deck_draws_what_it_can(self):
        c = _make_controller(deck=_cards(STRIKE, 3))
        seen = _record(c)
        c.start()
        assert c.session.piles.hand_size == 3
        drawn = [e for e in seen if e.type == BattleEventType.CARDS_DRAWN][-1]
        assert drawn.payload["requested"] == 5
        assert drawn.payload["drawn"] == 3


# ---------------------------------------------------------------------------
# A full turn
# ---------------------------------------------------------------------------

class TestTurnCycle:
    def test_play_then_end_turn(self):
        c = _make_controller()
        c.start()
        s = c.session

        assert c.play_card(0, target=0).ok
        assert s.enemies[0].health == 19
        assert s.player.energy == 2
        assert s.piles.hand_size == 4
        assert len(s.piles.discard) == 1

        assert c.end_turn().ok
        assert s.phase == BattlePhase.ENEMY_TURN
        assert s.piles.hand_size == 0
        assert len(s.piles.discard) == 5

        c.scheduler.run_until_idle()
        assert s.phase == BattlePhase.PLAYER_TURN
        assert s.turn_number == 2
        assert s.player.health == 73
        assert s.piles.hand_size == 5
        assert s.player.energy == 3
        assert s.player.defense == 0
        assert s.piles.total == 7

    def test_reshuffle_reported(self):
        c = _make_controller()
        seen = _record(c)
        c.start()
        c.end_turn()
        c.scheduler.run_until_idle()
        assert c.session.piles.reshuffle_count == 1
        assert _count(seen, BattleEventType.DECK_RESHUFFLED) == 1

    def test_player_defense_resets_each_turn(self):
        c = _make_controller(deck=_cards(IRON_WALL))
        c.start()
        c.play_card(0)
        assert c.session.player.defense == 8
        c.end_turn()
        c.scheduler.advance(0)
        assert c.session.player.defense == 1
        assert c.session.player.health == 80
        c.scheduler.run_until_idle()
        assert c.session.player.defense == 0

    def test_enemy_defense_carries_over(self):
        c = _make_controller()
        c.start()
        goblin = c.session.enemies[0]
        goblin.intent = EnemyIntent(kind=IntentKind.DEFEND, value=5)
        c.end_turn()
        c.scheduler.run_until_idle()
        assert goblin.defense == 5

        goblin.intent = EnemyIntent(kind=IntentKind.ATTACK, value=7)
        c.end_turn()
        c.scheduler.run_until_idle()
        assert goblin.defense == 5
        assert c.session.player.health == 73

        c.play_card(0, target=0)
        assert goblin.defense == 0
        assert goblin.health == 24

    def test_reshuffle_reports_cards_moved(self):
        c = _make_controller()
        c.start()
        assert len(c.session.piles.deck) == 2
        c.session.piles.discard.extend(_cards(STRIKE, 5))
        c.session.piles.hand.clear()
        seen = _record(c)
        assert len(c.draw(5)) == 5
        (reshuffled,) = [e for e in seen if e.type == BattleEventType.DECK_RESHUFFLED]
        assert reshuffled.payload == {"deck_size": 5}

    def test_cards_conserved_over_many_turns(self):
        c = _make_controller(enemies=[_make_enemy(max_health=500, health=500, base_attack=1)])
        c.start()
        ids = {card.id for card in c.session.piles.all_cards()}
        for _ in range(6):
            c.play_card(0, target=0)
            c.end_turn()
            c.scheduler.run_until_idle()
            assert c.session.piles.total == 7
            assert {card.id for card in c.session.piles.all_cards()} == ids

    def test_event_order_for_a_play(self):
        c = _make_controller()
        c.start()
        seen = _record(c)
        c.play_card(0, target=0)
        assert [e.type for e in seen] == [
            BattleEventType.CARD_PLAYED,
            BattleEventType.DAMAGE_DEALT,
        ]
        assert seen[1].payload == {
            "source": "player", "target": 0, "hits": 1, "blocked": 0, "applied": 6,
        }


# ---------------------------------------------------------------------------
# Legality
# ---------------------------------------------------------------------------

class TestLegality:
    def test_insufficient_energy_changes_nothing(self):
        c = _make_controller()
        c.start()
        c.session.player.energy = 0
        before = c.session.model_dump()
        seen = _record(c)
        result = c.play_card(0, target=0)
        assert result.reason == RejectReason.INSUFFICIENT_ENERGY
        assert c.session.model_dump() == before
        assert seen == []

    @pytest.mark.parametrize("index", [-1, 5, 99])
    def test_invalid_card_index(self, index):
        c = _make_controller()
        c.start()
        before = c.session.model_dump()
        assert c.play_card(index, target=0).reason == RejectReason.INVALID_CARD_INDEX
        assert c.session.model_dump() == before

    def test_missing_target(self):
        c = _make_controller()
        c.start()
        assert c.play_card(0).reason == RejectReason.INVALID_TARGET
        assert c.play_card(0, target=3).reason == RejectReason.INVALID_TARGET

    def test_dead_target(self):
        c = _make_controller(enemies=[_make_enemy(), _make_enemy()])
        c.start()
        c.damage_enemy(0, 100)
        before = c.session.model_dump()
        assert c.play_card(0, target=0).reason == RejectReason.INVALID_TARGET
        assert c.session.model_dump() == before

    def test_untargeted_card_needs_no_target(self):
        c = _make_controller(deck=_cards(IRON_WALL))
        c.start()
        assert c.play_card(0).ok

    def test_no_play_during_enemy_turn(self):
        c = _make_controller()
        c.start()
        c.end_turn()
        assert c.play_card(0, target=0).reason == RejectReason.ILLEGAL_PHASE
        assert c.end_turn().reason == RejectReason.ILLEGAL_PHASE

    def test_actions_before_start_rejected(self):
        c = _make_controller()
        before = c.session.model_dump()
        assert c.end_turn().reason == RejectReason.ILLEGAL_PHASE
        assert c.validate_play(0).reason == RejectReason.ILLEGAL_PHASE
        assert c.play_card(0, target=0).reason == RejectReason.ILLEGAL_PHASE
        c.scheduler.run_until_idle()
        assert c.session.model_dump() == before

        assert c.start().ok
        assert c.session.turn_number == 1
        assert c.session.piles.hand_size == 5

    def test_validate_play_does_not_play(self):
        c = _make_controller()
        c.start()
        assert c.validate_play(0, 0).ok
        assert c.session.piles.hand_size == 5
        assert c.session.player.energy == 3


# ---------------------------------------------------------------------------
# Damage to several enemies
# ---------------------------------------------------------------------------

class TestAllEnemies:
    def test_hits_every_enemy(self):
        enemies = [_make_enemy(max_health=10, health=10) for _ in range(3)]
        c = _make_controller(enemies=enemies, deck=_cards(WHIRLWIND))
        c.start()
        assert c.play_card(0).ok
        assert [e.health for e in c.session.enemies] == [6, 6, 6]

    def test_kills_several(self):
        enemies = [_make_enemy(max_health=4, health=4), _make_enemy(max_health=10, health=10)]
        c = _make_controller(enemies=enemies, deck=_cards(WHIRLWIND))
        seen = _record(c)
        c.start()
        c.play_card(0)
        assert _count(seen, BattleEventType.ENEMY_KILLED) == 1
        assert c.session.active_enemy_indices() == [1]


# ---------------------------------------------------------------------------
# Enemy turn timing
# ---------------------------------------------------------------------------

class TestEnemyTurnTiming:
    def test_enemies_act_one_second_apart(self):
        c = _make_controller(enemies=[_make_enemy() for _ in range(3)])
        seen = _record(c)
        c.start()
        c.end_turn()
        sched = c.scheduler

        sched.advance(0)
        assert _count(seen, BattleEventType.ENEMY_ACTED) == 1
        assert c.session.player.health == 73
        sched.advance(999)
        assert _count(seen, BattleEventType.ENEMY_ACTED) == 1
        sched.advance(1)
        assert _count(seen, BattleEventType.ENEMY_ACTED) == 2
        sched.advance(1000)
        assert _count(seen, BattleEventType.ENEMY_ACTED) == 3
        assert c.session.player.health == 59

        sched.advance(1499)
        assert c.session.phase == BattlePhase.ENEMY_TURN
        sched.advance(1)
        assert c.session.phase == BattlePhase.PLAYER_TURN

    def test_dead_enemies_do_not_act(self):
        c = _make_controller(enemies=[_make_enemy(), _make_enemy()])
        seen = _record(c)
        c.start()
        c.damage_enemy(0, 100)
        c.end_turn()
        started = [e for e in seen if e.type == BattleEventType.ENEMY_TURN_STARTED][0]
        assert started.payload["acting"] == [1]
        c.scheduler.run_until_idle()
        assert _count(seen, BattleEventType.ENEMY_ACTED) == 1

    def test_enemy_turn_waits_for_discard_effect(self):
        sink = DeferredSink()
        c = _make_controller(sink=sink)
        c.start()
        c.end_turn()
        assert c.scheduler.pending == 0
        sink.complete_all()
        assert c.scheduler.pending == 2
        c.scheduler.run_until_idle()
        assert c.session.phase == BattlePhase.PLAYER_TURN

    def test_new_intents_after_acting(self):
        c = _make_controller()
        seen = _record(c)
        c.start()
        c.end_turn()
        c.scheduler.run_until_idle()
        assert _count(seen, BattleEventType.INTENT_CHANGED) == 2
        assert c.session.enemies[0].turn_count == 2


# ---------------------------------------------------------------------------
# Deferred defeat
# ---------------------------------------------------------------------------

class TestPendingRemoval:
    def test_defeat_announced_after_effect(self):
        sink = DeferredSink()
        c = _make_controller(
            enemies=[_make_enemy(max_health=5, health=5), _make_enemy()], sink=sink,
        )
        seen = _record(c)
        c.start()
        c.play_card(0, target=0)

        dying = c.session.enemies[0]
        assert dying.pending_removal
        assert not dying.removed
        assert _count(seen, BattleEventType.ENEMY_KILLED) == 1
        assert _count(seen, BattleEventType.ENEMY_DEFEATED) == 0
        assert c.session.phase == BattlePhase.PLAYER_TURN
        assert c.play_card(0, target=0).reason == RejectReason.INVALID_TARGET

        sink.complete_all()
        assert dying.removed
        assert _count(seen, BattleEventType.ENEMY_DEFEATED) == 1
        sink.complete_all()
        assert _count(seen, BattleEventType.ENEMY_DEFEATED) == 1

    def test_last_enemy_pending_is_a_win(self):
        sink = DeferredSink()
        c = _make_controller(enemies=[_make_enemy(max_health=5, health=5)], sink=sink)
        c.start()
        c.play_card(0, target=0)
        assert c.session.phase == BattlePhase.VICTORY
        assert not c.session.enemies[0].removed

    def test_null_sink_removes_immediately(self):
        c = _make_controller(enemies=[_make_enemy(max_health=5, health=5), _make_enemy()])
        c.start()
        c.play_card(0, target=0)
        assert c.session.enemies[0].removed


# ---------------------------------------------------------------------------
# Outcome
# ---------------------------------------------------------------------------

class TestOutcome:
    def test_victory(self):
        c = _make_controller(enemies=[_make_enemy(max_health=5, health=5)])
        seen = _record(c)
        c.start()
        assert c.play_card(0, target=0).ok
        assert c.session.phase == BattlePhase.VICTORY
        ended = seen[-1]
        assert ended.type == BattleEventType.BATTLE_ENDED
        assert ended.payload["outcome"] == "victory"
        assert c.play_card(0, target=0).reason == RejectReason.ILLEGAL_PHASE
        assert c.end_turn().reason == RejectReason.ILLEGAL_PHASE
        assert c.scheduler.is_idle

    def test_victory_wins_double_knockout(self):
        c = _make_controller(
            enemies=[_make_enemy(max_health=5, health=5)], deck=_cards(FRENZY), health=3,
        )
        c.start()
        c.play_card(0, target=0)
        assert c.session.player.is_dead
        assert c.session.phase == BattlePhase.VICTORY

    def test_victory_reward(self):
        progression = _FixedProgression()
        c = _make_controller(
            enemies=[_make_enemy(max_health=5, health=5)],
            progression=progression,
            stage_id="1",
        )
        seen = _record(c)
        c.start()
        c.play_card(0, target=0)
        assert progression.calls == ["1"]
        assert c.session.victory_reward.unlocked_stage_ids == ["2", "3"]
        assert seen[-1].payload["heal_fraction"] == 0.25
        assert seen[-1].payload["unlocked_stage_ids"] == ["2", "3"]

    def test_defeat_skips_remaining_enemies(self):
        progression = _FixedProgression()
        c = _make_controller(
            enemies=[_make_enemy(), _make_enemy()], progression=progression, health=5,
        )
        seen = _record(c)
        c.start()
        c.end_turn()
        c.scheduler.run_until_idle()
        assert c.session.phase == BattlePhase.DEFEAT
        assert c.session.player.health == 0
        assert _count(seen, BattleEventType.ENEMY_ACTED) == 1
        assert seen[-1].payload["outcome"] == "defeat"
        assert progression.calls == []
        assert c.scheduler.is_idle
        assert c.session.turn_number == 1


# ---------------------------------------------------------------------------
# Boss specials
# ---------------------------------------------------------------------------

class TestBossBattle:
    def test_summon(self, registry):
        c = _make_controller(enemies=[registry.build_enemy("shadow_lord")], registry=registry)
        seen = _record(c)
        c.start()

        c.end_turn()
        c.scheduler.run_until_idle()
        assert c.session.player.health == 60
        assert c.session.enemies[0].defense == 20

        c.end_turn()
        c.scheduler.run_until_idle()
        assert len(c.session.enemies) == 2
        assert _count(seen, BattleEventType.ENEMY_SUMMONED) == 1
        assert c.session.enemies[1].enemy_id == "shadow"
        assert c.session.enemies[1].intent is not None
        assert c.session.player.health == 60

        c.end_turn()
        started = [e for e in seen if e.type == BattleEventType.ENEMY_TURN_STARTED][-1]
        assert started.payload["acting"] == [0, 1]

    def test_curse(self, registry):
        c = _make_controller(enemies=[registry.build_enemy("demon_king")], registry=registry)
        seen = _record(c)
        c.start()
        c.end_turn()
        c.scheduler.run_until_idle()
        assert c.session.player.health == 55

        c.end_turn()
        c.scheduler.run_until_idle()
        assert c.session.player.max_energy == 2
        assert c.session.player.energy == 2
        cursed = [e for e in seen if e.type == BattleEventType.PLAYER_CURSED]
        assert cursed[0].payload == {"max_energy": 2}


# ---------------------------------------------------------------------------
# Observers and debug hooks
# ---------------------------------------------------------------------------

class TestObservers:
    def test_unsubscribe(self):
        c = _make_controller()
        seen: list[BattleEvent] = []
        unsubscribe = c.subscribe(seen.append)
        c.start()
        count = len(seen)
        unsubscribe()
        c.play_card(0, target=0)
        assert len(seen) == count


class TestDebugHooks:
    def test_force_outcome_needs_terminal_phase(self):
        c = _make_controller()
        c.start()
        with pytest.raises(ValueError):
            c.force_outcome(BattlePhase.ENEMY_TURN)

    def test_force_victory_kills_enemies(self):
        c = _make_controller(enemies=[_make_enemy(defense=5), _make_enemy()])
        c.start()
        assert c.force_outcome(BattlePhase.VICTORY)
        assert all(e.is_dead for e in c.session.enemies)
        assert not c.force_outcome(BattlePhase.DEFEAT)

    def test_force_player_turn(self):
        c = _make_controller()
        c.start()
        assert not c.force_player_turn()
        c.end_turn()
        assert c.force_player_turn()
        assert c.session.phase == BattlePhase.PLAYER_TURN
        assert c.scheduler.is_idle
        assert c.session.player.health == 80

    def test_refresh_clamps(self):
        c = _make_controller()
        c.start()
        c.session.player.health = 500
        c.refresh()
        assert c.session.player.health == 80

    def test_refresh_detects_death(self):
        c = _make_controller()
        c.start()
        c.session.player.health = 0
        c.refresh()
        assert c.session.phase == BattlePhase.DEFEAT

    def test_damage_enemy_bad_index(self):
        c = _make_controller()
        c.start()
        assert c.damage_enemy(4, 10) is None
