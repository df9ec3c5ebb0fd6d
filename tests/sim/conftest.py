"""Shared fixtures and helpers for simulation tests."""

from __future__ import annotations

import pytest

from deckbattle.sim.content.registry import ContentRegistry
from deckbattle.sim.core.entities import Enemy, Player
from deckbattle.sim.core.game_state import BattleSession, CardPiles
from deckbattle.sim.core.rng import GameRNG


@pytest.fixture(scope="module")
def registry() -> ContentRegistry:
    """Module-scoped registry with the shipped tables loaded once."""
    reg = ContentRegistry()
    reg.load_all()
    return reg


@pytest.fixture
def player() -> Player:
    return Player(name="Hero", max_health=80, health=80, max_energy=3, energy=3)


@pytest.fixture
def goblin() -> Enemy:
    return Enemy(
        name="Goblin Warrior", enemy_id="goblin_warrior",
        max_health=25, health=25, base_attack=7,
    )


@pytest.fixture
def session(player: Player, goblin: Enemy) -> BattleSession:
    """A one-enemy session with empty piles."""
    return BattleSession(
        player=player,
        enemies=[goblin],
        piles=CardPiles(),
        rng=GameRNG(42),
    )
