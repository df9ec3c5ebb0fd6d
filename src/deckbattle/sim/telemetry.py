"""Telemetry for per-battle and per-run statistics.

- **BattleTelemetry**: outcome, damage dealt/taken, cards played, turns.
- **RunTelemetry**: seed, ordered battle results, final outcome.
- **TelemetryCollector**: an observer that fills a ``BattleTelemetry``
  from the controller's event stream.

The records are plain ``dataclass`` instances (not Pydantic models) so
collecting them stays cheap during batch runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from deckbattle.sim.events import BattleEvent, BattleEventType


@dataclass
class BattleTelemetry:
    """Stats from a single battle.

    Attributes
    ----------
    enemy_ids:
        Enemies present at the start, in roster order.
    stage_id:
        Stage fought, if any.
    result:
        ``"win"`` or ``"loss"``; ``"timeout"`` if the turn limit was hit.
    turns:
        Number of player turns started.
    player_hp_start / player_hp_end:
        Player health at the start and end.
    damage_dealt:
        Health damage dealt to enemies.
    damage_taken:
        Health damage the player took from any source.
    block_gained:
        Defense gained by the player.
    cards_played:
        Total cards played; ``cards_played_by_id`` breaks it down.
    enemies_summoned:
        Enemies added mid-battle.
    """

    enemy_ids: list[str]
    stage_id: str | None = None
    result: str = "loss"
    turns: int = 0
    player_hp_start: int = 0
    player_hp_end: int = 0
    damage_dealt: int = 0
    damage_taken: int = 0
    block_gained: int = 0
    cards_played: int = 0
    cards_played_by_id: dict[str, int] = field(default_factory=dict)
    enemies_summoned: int = 0

    @property
    def hp_lost(self) -> int:
        return self.player_hp_start - self.player_hp_end


@dataclass
class RunTelemetry:
    """Stats from a campaign run.

    Attributes
    ----------
    seed:
        The master RNG seed used for this run.
    battles:
        Ordered battle telemetry, one per stage fought.
    final_result:
        ``"win"`` if the boss stage was cleared, ``"loss"`` otherwise.
    stages_cleared:
        Stage ids cleared, in order.
    cards_in_deck:
        The deck (as card ids) at the end of the run.
    card_offers:
        The card ids on offer at each reward screen.
    card_picks:
        The card id taken at each reward screen that was not skipped.
    """

    seed: int
    battles: list[BattleTelemetry] = field(default_factory=list)
    final_result: str = "loss"
    stages_cleared: list[str] = field(default_factory=list)
    cards_in_deck: list[str] = field(default_factory=list)
    card_offers: list[list[str]] = field(default_factory=list)
    card_picks: list[str] = field(default_factory=list)


class TelemetryCollector:
    """Observer that accumulates a :class:`BattleTelemetry`.

    Subscribe its bound ``__call__`` to a controller::

        collector = TelemetryCollector(telemetry)
        controller.subscribe(collector)
    """

    def __init__(self, telemetry: BattleTelemetry) -> None:
        self.telemetry = telemetry

    def __call__(self, event: BattleEvent) -> None:
        t = self.telemetry
        p = event.payload
        if event.type == BattleEventType.PLAYER_TURN_STARTED:
            t.turns = p["turn_number"]
        elif event.type == BattleEventType.CARD_PLAYED:
            t.cards_played += 1
            t.cards_played_by_id[p["card_id"]] = t.cards_played_by_id.get(p["card_id"], 0) + 1
        elif event.type == BattleEventType.DAMAGE_DEALT:
            if p["target"] == "player":
                t.damage_taken += p["applied"]
            else:
                t.damage_dealt += p["applied"]
        elif event.type == BattleEventType.BLOCK_GAINED and p["target"] == "player":
            t.block_gained += p["amount"]
        elif event.type == BattleEventType.ENEMY_SUMMONED:
            t.enemies_summoned += 1
        elif event.type == BattleEventType.BATTLE_ENDED:
            t.result = "win" if p["outcome"] == "victory" else "loss"
