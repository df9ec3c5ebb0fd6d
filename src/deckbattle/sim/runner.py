"""Headless simulation runner -- drives battles with an agent instead of a UI.

Provides two key classes:

- **CombatSimulator**: Plays one battle (or a whole campaign) to the end.
- **BatchRunner**: Runs many seeded simulations, optionally in parallel.

Battles run on a :class:`ManualScheduler`, so the enemy turn's delays
cost no wall-clock time.
"""

from __future__ import annotations

import logging
import multiprocessing
from typing import TYPE_CHECKING

from deckbattle.sim.config import BattleConfig
from deckbattle.sim.core.game_state import BattlePhase
from deckbattle.sim.core.rng import GameRNG
from deckbattle.sim.core.scheduler import ManualScheduler
from deckbattle.sim.dungeon.progression import Campaign
from deckbattle.sim.encounter import create_battle
from deckbattle.sim.events import DeferredSink
from deckbattle.sim.play_agents.base import PlayAgent
from deckbattle.sim.play_agents.heuristic_agent import HeuristicAgent
from deckbattle.sim.play_agents.random_agent import RandomAgent
from deckbattle.sim.telemetry import BattleTelemetry, RunTelemetry, TelemetryCollector

if TYPE_CHECKING:
    from deckbattle.sim.battle import BattleController
    from deckbattle.sim.content.registry import ContentRegistry
    from deckbattle.sim.core.game_state import CardInstance

logger = logging.getLogger(__name__)

_MAX_TURNS = 200


class CombatSimulator:
    """Runs battles to completion with a :class:`PlayAgent` making choices."""

    def __init__(self, agent: PlayAgent) -> None:
        self.agent = agent

    def run_combat(self, controller: BattleController) -> BattleTelemetry:
        """Start *controller*'s battle and play it out, returning telemetry.

        A battle still running after ``_MAX_TURNS`` player turns is forced
        to a defeat and reported as ``"timeout"``.

        Raises
        ------
        TypeError
            If the controller is not driven by a :class:`ManualScheduler`.
        """
        scheduler = controller.scheduler
        if not isinstance(scheduler, ManualScheduler):
            raise TypeError("CombatSimulator needs a ManualScheduler-driven controller")

        session = controller.session
        telemetry = BattleTelemetry(
            enemy_ids=[e.enemy_id for e in session.enemies],
            stage_id=session.stage_id,
            player_hp_start=session.player.health,
        )
        unsubscribe = controller.subscribe(TelemetryCollector(telemetry))
        try:
            if not controller.started:
                controller.start()
            while not session.is_over and session.turn_number <= _MAX_TURNS:
                self._play_turn(controller)
                self._settle(controller)

            if not session.is_over:
                logger.warning(
                    "Battle at stage %s hit the %d-turn limit", session.stage_id, _MAX_TURNS,
                )
                controller.force_outcome(BattlePhase.DEFEAT)
                telemetry.result = "timeout"
        finally:
            unsubscribe()

        telemetry.player_hp_end = session.player.health
        return telemetry

    def _play_turn(self, controller: BattleController) -> None:
        session = controller.session
        while session.phase == BattlePhase.PLAYER_TURN:
            playable = self._get_playable_cards(controller)
            choice = self.agent.choose_card_to_play(session, playable)
            if choice is None:
                controller.end_turn()
                return
            hand_index, target = choice
            result = controller.play_card(hand_index, target)
            if not result.ok:
                logger.warning("Agent play rejected (%s): %s", result.reason, result.message)
                controller.end_turn()
                return

    @staticmethod
    def _settle(controller: BattleController) -> None:
        """Finish pending effects and run the enemy turn to completion."""
        if isinstance(controller.sink, DeferredSink):
            controller.sink.complete_all()
        controller.scheduler.run_until_idle()

    @staticmethod
    def _get_playable_cards(controller: BattleController) -> list[tuple[int, CardInstance]]:
        """Cards in hand the player can afford, paired with their hand index."""
        energy = controller.session.player.energy
        return [
            (i, card)
            for i, card in enumerate(controller.session.piles.hand)
            if card.cost <= energy
            and (not card.definition.requires_target or controller.session.active_enemies)
        ]

    def run_campaign(self, campaign: Campaign, seed: int = 0) -> RunTelemetry:
        """Play stages until the run is won or lost."""
        run = RunTelemetry(seed=seed)
        while not campaign.is_over:
            stage_id = self.agent.choose_stage(list(campaign.state.available_stages))
            controller = campaign.start_battle(stage_id, scheduler=ManualScheduler())
            battle = self.run_combat(controller)
            run.battles.append(battle)

            choices = campaign.conclude_battle(controller)
            if battle.result != "win":
                break
            deck_ids = [c.card_id for c in campaign.state.deck]
            run.card_offers.append([c.id for c in choices])
            pick = self.agent.choose_card_reward(choices, deck_ids)
            if pick is not None:
                campaign.add_reward_card(pick.id)
                run.card_picks.append(pick.id)

        run.final_result = "win" if campaign.is_complete else "loss"
        run.stages_cleared = list(campaign.state.stages_cleared)
        run.cards_in_deck = [c.card_id for c in campaign.state.deck]
        return run


def _run_single_battle(
    registry: ContentRegistry,
    agent: PlayAgent,
    seed: int,
    stage_id: str | None,
    enemy_ids: list[str] | None,
    config: BattleConfig,
) -> RunTelemetry:
    """Run one battle with the given seed and wrap it as a run."""
    controller = create_battle(
        registry,
        GameRNG(seed).fork("battle"),
        stage_id=stage_id,
        enemy_ids=enemy_ids,
        config=config,
    )
    battle = CombatSimulator(agent).run_combat(controller)
    return RunTelemetry(
        seed=seed,
        battles=[battle],
        final_result=battle.result,
        stages_cleared=[stage_id] if stage_id and battle.result == "win" else [],
        cards_in_deck=[c.card_id for c in controller.session.piles.all_cards()],
    )


def _worker_run_single(args: tuple) -> RunTelemetry:
    """Top-level worker function for multiprocessing (must be picklable)."""
    seed, stage_id, enemy_ids, config = args

    from deckbattle.sim.content.registry import ContentRegistry

    registry = ContentRegistry()
    registry.load_all()
    agent = RandomAgent(rng=GameRNG(seed).fork("agent"))
    return _run_single_battle(registry, agent, seed, stage_id, enemy_ids, config)


class BatchRunner:
    """Runs multiple seeded simulations, optionally in parallel."""

    def __init__(
        self,
        registry: ContentRegistry,
        agent_class: type[PlayAgent] = RandomAgent,
        config: BattleConfig | None = None,
    ) -> None:
        self.registry = registry
        self.agent_class = agent_class
        self.config = config or BattleConfig()

    def _make_agent(self, seed: int) -> PlayAgent:
        agent_rng = GameRNG(seed).fork("agent")
        if self.agent_class is RandomAgent:
            return RandomAgent(rng=agent_rng)
        if self.agent_class is HeuristicAgent:
            return HeuristicAgent(registry=self.registry)
        try:
            return self.agent_class(rng=agent_rng)  # type: ignore[call-arg]
        except TypeError:
            return self.agent_class()  # type: ignore[call-arg]

    def run_batch(
        self,
        n_runs: int,
        stage_id: str | None = None,
        enemy_ids: list[str] | None = None,
        base_seed: int = 42,
        parallel: bool = False,
    ) -> list[RunTelemetry]:
        """Fight the same battle *n_runs* times with consecutive seeds."""
        seeds = [base_seed + i for i in range(n_runs)]

        if parallel and n_runs > 1:
            if self.agent_class is not RandomAgent:
                raise ValueError("Parallel batches only support RandomAgent")
            return self._run_parallel(seeds, stage_id, enemy_ids)

        return [
            _run_single_battle(
                self.registry, self._make_agent(seed), seed, stage_id, enemy_ids, self.config,
            )
            for seed in seeds
        ]

    def run_campaigns(self, n_runs: int, base_seed: int = 42) -> list[RunTelemetry]:
        """Play *n_runs* full campaigns with consecutive seeds."""
        results: list[RunTelemetry] = []
        for seed in range(base_seed, base_seed + n_runs):
            campaign = Campaign(self.registry, GameRNG(seed), battle_config=self.config)
            simulator = CombatSimulator(self._make_agent(seed))
            results.append(simulator.run_campaign(campaign, seed=seed))
        return results

    def _run_parallel(
        self,
        seeds: list[int],
        stage_id: str | None,
        enemy_ids: list[str] | None,
    ) -> list[RunTelemetry]:
        """Run simulations in worker processes.

        Workers reload the shipped tables rather than receiving the
        registry.
        """
        work_items = [(seed, stage_id, enemy_ids, self.config) for seed in seeds]
        n_workers = min(len(seeds), multiprocessing.cpu_count() or 1)

        with multiprocessing.Pool(processes=n_workers) as pool:
            return pool.map(_worker_run_single, work_items)
