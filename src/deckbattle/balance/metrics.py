"""Pure metric computation functions for balance analysis.

All functions take a list of RunTelemetry and return structured metrics.
No side effects, no I/O.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from deckbattle.balance.models import CardMetrics, GlobalMetrics, StageMetrics

if TYPE_CHECKING:
    from deckbattle.sim.telemetry import BattleTelemetry, RunTelemetry


def compute_global_metrics(runs: list[RunTelemetry]) -> GlobalMetrics:
    """Compute aggregate run statistics."""
    total = len(runs)
    if total == 0:
        return GlobalMetrics(
            total_runs=0, wins=0, losses=0, win_rate=0.0,
            avg_stages_cleared=0.0, avg_battles_won=0.0, avg_deck_size=0.0,
        )

    wins = sum(1 for r in runs if r.final_result == "win")
    avg_battles = sum(
        sum(1 for b in r.battles if b.result == "win")
        for r in runs
    ) / total

    return GlobalMetrics(
        total_runs=total,
        wins=wins,
        losses=total - wins,
        win_rate=wins / total,
        avg_stages_cleared=sum(len(r.stages_cleared) for r in runs) / total,
        avg_battles_won=avg_battles,
        avg_deck_size=sum(len(r.cards_in_deck) for r in runs) / total,
    )


def compute_card_metrics(
    runs: list[RunTelemetry],
    global_wr: float,
) -> list[CardMetrics]:
    """Compute per-card balance metrics from run telemetry."""
    if not runs:
        return []

    all_card_ids: set[str] = set()
    for r in runs:
        all_card_ids.update(r.cards_in_deck)

    results: list[CardMetrics] = []
    for card_id in sorted(all_card_ids):
        runs_with = [r for r in runs if card_id in r.cards_in_deck]
        times_in_deck = len(runs_with)
        wins_with = sum(1 for r in runs_with if r.final_result == "win")
        wr_with = wins_with / times_in_deck

        times_offered = sum(
            1 for r in runs for offer in r.card_offers if card_id in offer
        )
        times_picked = sum(r.card_picks.count(card_id) for r in runs)

        times_played = 0
        total_turns = 0
        for r in runs_with:
            for b in r.battles:
                times_played += b.cards_played_by_id.get(card_id, 0)
                total_turns += b.turns

        results.append(CardMetrics(
            card_id=card_id,
            times_in_deck=times_in_deck,
            wins_with=wins_with,
            win_rate_with=wr_with,
            win_rate_delta=wr_with - global_wr,
            times_offered=times_offered,
            times_picked=times_picked,
            pick_rate=times_picked / times_offered if times_offered else 0.0,
            times_played=times_played,
            play_rate=times_played / total_turns if total_turns else 0.0,
        ))

    return results


def compute_stage_metrics(runs: list[RunTelemetry]) -> list[StageMetrics]:
    """Win rate and cost of every stage that was fought at least once."""
    by_stage: dict[str, list[BattleTelemetry]] = defaultdict(list)
    for r in runs:
        for b in r.battles:
            if b.stage_id is not None:
                by_stage[b.stage_id].append(b)

    results: list[StageMetrics] = []
    for stage_id in sorted(by_stage, key=_stage_sort_key):
        battles = by_stage[stage_id]
        fought = len(battles)
        wins = sum(1 for b in battles if b.result == "win")
        results.append(StageMetrics(
            stage_id=stage_id,
            times_fought=fought,
            wins=wins,
            win_rate=wins / fought,
            avg_turns=sum(b.turns for b in battles) / fought,
            avg_hp_lost=sum(b.hp_lost for b in battles) / fought,
        ))
    return results


def _stage_sort_key(stage_id: str) -> tuple[int, str]:
    # Shipped stage ids are numeric strings; order "10" after "9".
    return (int(stage_id), "") if stage_id.isdigit() else (1 << 30, stage_id)
