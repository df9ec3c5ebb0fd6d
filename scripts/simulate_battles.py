"""Run a batch of headless battles or campaigns and print a summary.

Usage:
    python scripts/simulate_battles.py --stage 1 --runs 500
    python scripts/simulate_battles.py --campaign --runs 200 --agent heuristic --difficulty hard
"""

from __future__ import annotations

import argparse
import logging
import time

from deckbattle.balance.metrics import (
    compute_card_metrics,
    compute_global_metrics,
    compute_stage_metrics,
)
from deckbattle.balance.report import generate_text_report
from deckbattle.sim.config import DIFFICULTY_MULTIPLIERS, BattleConfig
from deckbattle.sim.content.registry import ContentRegistry
from deckbattle.sim.play_agents import HeuristicAgent, RandomAgent
from deckbattle.sim.runner import BatchRunner

_AGENTS = {"random": RandomAgent, "heuristic": HeuristicAgent}


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate battles headlessly")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--stage", type=str, default="1", help="Stage id to fight")
    target.add_argument("--enemies", nargs="+", help="Explicit enemy ids to fight")
    target.add_argument("--campaign", action="store_true", help="Play full campaigns")
    parser.add_argument("--runs", type=int, default=100, help="Number of simulations")
    parser.add_argument("--seed", type=int, default=42, help="Base seed")
    parser.add_argument("--agent", choices=sorted(_AGENTS), default="random")
    parser.add_argument(
        "--difficulty", choices=list(DIFFICULTY_MULTIPLIERS), default="normal",
    )
    parser.add_argument("--parallel", action="store_true", help="Use worker processes")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print("Loading registry...")
    registry = ContentRegistry()
    registry.load_all()

    config = BattleConfig.for_difficulty(args.difficulty)
    runner = BatchRunner(registry, agent_class=_AGENTS[args.agent], config=config)

    t0 = time.perf_counter()
    if args.campaign:
        print(f"Running {args.runs:,} campaigns ({args.agent}, {args.difficulty})...")
        runs = runner.run_campaigns(args.runs, base_seed=args.seed)
        title = "Campaign Simulation"
    else:
        label = f"enemies {args.enemies}" if args.enemies else f"stage {args.stage}"
        print(f"Running {args.runs:,} battles vs {label} ({args.agent}, {args.difficulty})...")
        runs = runner.run_batch(
            args.runs,
            stage_id=None if args.enemies else args.stage,
            enemy_ids=args.enemies,
            base_seed=args.seed,
            parallel=args.parallel,
        )
        title = f"Battle Simulation: {label}"
    elapsed = time.perf_counter() - t0
    print(f"Done in {elapsed:.1f}s ({elapsed / max(args.runs, 1) * 1000:.0f}ms/run)")

    global_metrics = compute_global_metrics(runs)
    print()
    print(generate_text_report(
        global_metrics,
        card_metrics=compute_card_metrics(runs, global_metrics.win_rate),
        stage_metrics=compute_stage_metrics(runs),
        title=title,
    ))


if __name__ == "__main__":
    main()
