"""Battle assembly -- builds sessions and controllers from content tables."""

from __future__ import annotations

import logging

from deckbattle.sim.battle import BattleController, ProgressionPolicy
from deckbattle.sim.config import BattleConfig, PlayerConfig
from deckbattle.sim.content.registry import ContentRegistry
from deckbattle.sim.core.entities import Player
from deckbattle.sim.core.game_state import BattleSession, CardInstance, CardPiles
from deckbattle.sim.core.rng import GameRNG
from deckbattle.sim.core.scheduler import ManualScheduler, Scheduler
from deckbattle.sim.enemy_ai import EnemyAI
from deckbattle.sim.events import PresentationSink
from deckbattle.sim.interpreter import EffectInterpreter

logger = logging.getLogger(__name__)


def build_player(config: PlayerConfig | None = None) -> Player:
    """Create a full-health player from *config*."""
    config = config or PlayerConfig()
    return Player(
        name=config.name,
        max_health=config.max_health,
        health=config.max_health,
        max_energy=config.max_energy,
        energy=config.max_energy,
    )


def build_starting_deck(registry: ContentRegistry) -> list[CardInstance]:
    return [registry.build_card(card_id) for card_id in registry.get_starter_deck()]


def build_battle_session(
    registry: ContentRegistry,
    rng: GameRNG,
    *,
    stage_id: str | None = None,
    enemy_ids: list[str] | None = None,
    player: Player | None = None,
    deck: list[CardInstance] | None = None,
    config: BattleConfig | None = None,
) -> BattleSession:
    """Assemble a :class:`BattleSession`.

    Enemies come from *enemy_ids* if given, otherwise from the stage's
    roster.  The session gets its own copy of *player*, so damage taken
    in battle only reaches the run when the caller copies it back.  The
    deck is not shuffled here; ``BattleController.start`` does that.

    Raises
    ------
    KeyError
        If the stage or any enemy id is unknown.
    ValueError
        If neither a stage nor enemy ids are given.
    """
    config = config or BattleConfig()
    if enemy_ids is None:
        if stage_id is None:
            raise ValueError("build_battle_session needs a stage_id or enemy_ids")
        stage = registry.get_stage(stage_id)
        if stage is None:
            raise KeyError(f"Unknown stage id {stage_id!r}")
        enemy_ids = stage.enemy_ids

    enemies = [registry.build_enemy(eid, config.difficulty) for eid in enemy_ids]
    player = player.model_copy(deep=True) if player is not None else build_player()
    if deck is None:
        deck = build_starting_deck(registry)

    logger.debug(
        "Built session: stage=%s enemies=%s deck=%d difficulty=%.2f",
        stage_id, enemy_ids, len(deck), config.difficulty,
    )
    return BattleSession(
        player=player,
        enemies=enemies,
        piles=CardPiles(deck=list(deck)),
        stage_id=stage_id,
        rng=rng.fork("deck"),
    )


def create_battle(
    registry: ContentRegistry,
    rng: GameRNG,
    *,
    stage_id: str | None = None,
    enemy_ids: list[str] | None = None,
    player: Player | None = None,
    deck: list[CardInstance] | None = None,
    scheduler: Scheduler | None = None,
    sink: PresentationSink | None = None,
    progression: ProgressionPolicy | None = None,
    config: BattleConfig | None = None,
) -> BattleController:
    """Build a session and wire a :class:`BattleController` around it.

    The controller is returned unstarted.  Without an explicit scheduler
    a :class:`ManualScheduler` is used; reach it as
    ``controller.scheduler``.
    """
    config = config or BattleConfig()
    session = build_battle_session(
        registry, rng,
        stage_id=stage_id, enemy_ids=enemy_ids,
        player=player, deck=deck, config=config,
    )
    return BattleController(
        session,
        EnemyAI(rng.fork("intents"), config),
        EffectInterpreter(registry, config),
        scheduler if scheduler is not None else ManualScheduler(),
        sink=sink,
        progression=progression,
        config=config,
    )
