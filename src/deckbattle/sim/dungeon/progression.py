"""Campaign progression -- the stage map between battles.

A :class:`Campaign` owns the :class:`RunState`: the player's persistent
health and max energy, the deck, and which stages are open.  It builds
each battle, acts as the battle's progression policy, and folds the
result back into the run once the battle is over.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from deckbattle.ir.cards import CardDefinition
from deckbattle.ir.stages import StageDefinition, StageType
from deckbattle.sim.config import BattleConfig, PlayerConfig
from deckbattle.sim.core.game_state import BattlePhase, CardInstance, RunState, VictoryReward
from deckbattle.sim.core.rng import GameRNG
from deckbattle.sim.dungeon.rewards import generate_card_reward, heal_amount, heal_fraction
from deckbattle.sim.encounter import build_player, build_starting_deck, create_battle

if TYPE_CHECKING:
    from deckbattle.sim.battle import BattleController
    from deckbattle.sim.content.registry import ContentRegistry
    from deckbattle.sim.core.scheduler import Scheduler
    from deckbattle.sim.events import PresentationSink

logger = logging.getLogger(__name__)


class Campaign:
    """Drives a run across the stage map.

    Parameters
    ----------
    registry:
        The content registry with all tables loaded.
    rng:
        Master RNG for the run.  Forked for battles and rewards.
    player_config:
        Starting player stats.
    battle_config:
        Passed to every battle (difficulty, hand size, timings).
    start_stage:
        Stage the run opens with.  Defaults to the stage no other stage
        unlocks.
    """

    def __init__(
        self,
        registry: ContentRegistry,
        rng: GameRNG,
        player_config: PlayerConfig | None = None,
        battle_config: BattleConfig | None = None,
        start_stage: str | None = None,
    ) -> None:
        self.registry = registry
        self.rng = rng
        self.battle_config = battle_config or BattleConfig()
        self._reward_rng = rng.fork("rewards")
        self._defeated = False

        start_stage = start_stage or registry.first_stage_id
        if start_stage is None or registry.get_stage(start_stage) is None:
            raise ValueError(f"Unknown start stage {start_stage!r}")

        self.state = RunState(
            player=build_player(player_config),
            deck=build_starting_deck(registry),
            available_stages=[start_stage],
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def stage(self, stage_id: str) -> StageDefinition:
        stage = self.registry.get_stage(stage_id)
        if stage is None:
            raise KeyError(f"Unknown stage id {stage_id!r}")
        return stage

    @property
    def is_lost(self) -> bool:
        """True once a battle has been lost, by death or by a forced defeat."""
        return self._defeated or self.state.player.is_dead

    @property
    def is_complete(self) -> bool:
        """True once a boss stage has been cleared."""
        return any(
            self.stage(sid).type == StageType.BOSS for sid in self.state.stages_cleared
        )

    @property
    def is_over(self) -> bool:
        return self.is_lost or self.is_complete or not self.state.available_stages

    # ------------------------------------------------------------------
    # Battles
    # ------------------------------------------------------------------

    def start_battle(
        self,
        stage_id: str,
        scheduler: Scheduler | None = None,
        sink: PresentationSink | None = None,
    ) -> BattleController:
        """Build (but do not start) the battle for an open stage.

        Raises
        ------
        ValueError
            If *stage_id* is not currently available or the run is over.
        """
        if self.is_over:
            raise ValueError("The run is over")
        if stage_id not in self.state.available_stages:
            raise ValueError(
                f"Stage {stage_id!r} is not available; choose from "
                f"{self.state.available_stages}"
            )
        self.state.current_stage = stage_id
        battle_rng = self.rng.fork(f"battle:{len(self.state.stages_cleared)}:{stage_id}")
        logger.info("Starting stage %s (%s)", stage_id, self.stage(stage_id).name)
        return create_battle(
            self.registry,
            battle_rng,
            stage_id=stage_id,
            player=self.state.player,
            deck=self.state.deck,
            scheduler=scheduler,
            sink=sink,
            progression=self,
            config=self.battle_config,
        )

    def on_victory(self, stage_id: str | None) -> VictoryReward:
        """Reward for clearing *stage_id*: recovery and the stages it opens."""
        if stage_id is None:
            return VictoryReward(heal_fraction=heal_fraction(StageType.NORMAL))
        stage = self.stage(stage_id)
        return VictoryReward(
            heal_fraction=heal_fraction(stage.type),
            unlocked_stage_ids=list(stage.next_stage_ids),
        )

    def conclude_battle(self, controller: BattleController) -> list[CardDefinition]:
        """Fold a finished battle back into the run.

        Copies health and max energy back to the run's player.  On a win,
        applies the recovery, marks the stage cleared, opens the stages it
        unlocks, and returns the card choices on offer.  On a loss, returns
        no choices.

        Raises
        ------
        ValueError
            If the battle is not over yet.
        """
        session = controller.session
        if not session.is_over:
            raise ValueError("Cannot conclude a battle that is still running")

        player = self.state.player
        player.health = session.player.health
        player.max_energy = session.player.max_energy
        player.energy = player.max_energy
        player.defense = 0
        self.state.current_stage = None

        if session.phase == BattlePhase.DEFEAT:
            self._defeated = True
            logger.info("Run lost at stage %s", session.stage_id)
            return []

        reward = session.victory_reward or self.on_victory(session.stage_id)
        healed = player.heal(heal_amount(player.max_health, reward.heal_fraction))
        if session.stage_id is not None:
            self.state.stages_cleared.append(session.stage_id)
        self.state.available_stages = list(reward.unlocked_stage_ids)
        logger.info(
            "Cleared stage %s: healed %d, unlocked %s",
            session.stage_id, healed, reward.unlocked_stage_ids,
        )
        return self.reward_choices(session.stage_id)

    # ------------------------------------------------------------------
    # Rewards
    # ------------------------------------------------------------------

    def reward_choices(self, stage_id: str | None = None) -> list[CardDefinition]:
        stage_type = self.stage(stage_id).type if stage_id is not None else StageType.NORMAL
        return generate_card_reward(self.registry, self._reward_rng, stage_type)

    def add_reward_card(self, card_id: str) -> CardInstance:
        """Add a copy of *card_id* to the run's deck."""
        card = self.registry.build_card(card_id)
        self.state.deck.append(card)
        logger.debug("Added %s to the deck (%d cards)", card.name, len(self.state.deck))
        return card
