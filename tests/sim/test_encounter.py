"""Tests for session and controller assembly."""

from __future__ import annotations

import pytest

from deckbattle.sim.config import BattleConfig, PlayerConfig
from deckbattle.sim.core.game_state import BattlePhase
from deckbattle.sim.core.rng import GameRNG
from deckbattle.sim.core.scheduler import ManualScheduler
from deckbattle.sim.encounter import (
    build_battle_session,
    build_player,
    build_starting_deck,
    create_battle,
)


class TestBuildPlayer:
    def test_defaults(self):
        player = build_player()
        assert player.health == player.max_health == 80
        assert player.energy == player.max_energy == 3
        assert player.defense == 0

    def test_custom(self):
        player = build_player(PlayerConfig(name="Tank", max_health=120, max_energy=4))
        assert player.name == "Tank"
        assert player.health == 120
        assert player.max_energy == 4


class TestBuildSession:
    def test_from_stage(self, registry):
        session = build_battle_session(registry, GameRNG(1), stage_id="1")
        assert [e.enemy_id for e in session.enemies] == [
            "goblin_warrior", "orc_shieldbearer", "mage",
        ]
        assert session.stage_id == "1"
        assert session.piles.total == 7
        assert session.piles.hand == []

    def test_explicit_enemies_override_stage(self, registry):
        session = build_battle_session(
            registry, GameRNG(1), stage_id="1", enemy_ids=["shadow"],
        )
        assert [e.enemy_id for e in session.enemies] == ["shadow"]

    def test_needs_stage_or_enemies(self, registry):
        with pytest.raises(ValueError):
            build_battle_session(registry, GameRNG(1))

    def test_unknown_stage(self, registry):
        with pytest.raises(KeyError):
            build_battle_session(registry, GameRNG(1), stage_id="99")

    def test_unknown_enemy(self, registry):
        with pytest.raises(KeyError):
            build_battle_session(registry, GameRNG(1), enemy_ids=["nope"])

    def test_player_is_copied(self, registry):
        player = build_player()
        session = build_battle_session(registry, GameRNG(1), enemy_ids=["mage"], player=player)
        session.player.take_damage(30)
        assert player.health == 80

    def test_difficulty(self, registry):
        session = build_battle_session(
            registry, GameRNG(1), enemy_ids=["mage"],
            config=BattleConfig.for_difficulty("very_easy"),
        )
        assert session.enemies[0].max_health == 10

    def test_custom_deck(self, registry):
        deck = [registry.build_card("storm_blade") for _ in range(3)]
        session = build_battle_session(registry, GameRNG(1), enemy_ids=["mage"], deck=deck)
        assert [c.card_id for c in session.piles.deck] == ["storm_blade"] * 3
        session.piles.deck.pop()
        assert len(deck) == 3

    def test_starting_deck(self, registry):
        deck = build_starting_deck(registry)
        assert len(deck) == 7
        assert len({c.id for c in deck}) == 7


class TestCreateBattle:
    def test_unstarted(self, registry):
        controller = create_battle(registry, GameRNG(1), stage_id="1")
        assert not controller.started
        assert controller.session.turn_number == 0
        assert isinstance(controller.scheduler, ManualScheduler)

    def test_same_seed_same_battle(self, registry):
        def play(seed: int) -> tuple[list[str], int]:
            c = create_battle(registry, GameRNG(seed), stage_id="1")
            c.start()
            c.end_turn()
            c.scheduler.run_until_idle()
            return [card.card_id for card in c.session.piles.hand], c.session.player.health

        assert play(17) == play(17)

    def test_full_stage_is_winnable_by_force(self, registry):
        c = create_battle(registry, GameRNG(2), stage_id="4")
        c.start()
        c.force_outcome(BattlePhase.VICTORY)
        assert c.session.phase == BattlePhase.VICTORY
