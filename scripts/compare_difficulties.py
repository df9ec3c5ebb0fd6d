"""Compare campaign outcomes across difficulty presets.

Usage:
    python scripts/compare_difficulties.py [--runs N] [--agent heuristic]
"""

from __future__ import annotations

import argparse
import time

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from deckbattle.sim.config import DIFFICULTY_MULTIPLIERS, BattleConfig
from deckbattle.sim.content.registry import ContentRegistry
from deckbattle.sim.play_agents import HeuristicAgent, RandomAgent
from deckbattle.sim.runner import BatchRunner

_AGENTS = {"random": RandomAgent, "heuristic": HeuristicAgent}


def run_comparison(n_runs: int, agent: str, out_path: str) -> None:
    print("Loading registry...")
    registry = ContentRegistry()
    registry.load_all()

    results = {}
    for name in DIFFICULTY_MULTIPLIERS:
        print(f"\nRunning {n_runs} campaigns on {name}...")
        runner = BatchRunner(
            registry,
            agent_class=_AGENTS[agent],
            config=BattleConfig.for_difficulty(name),
        )
        t0 = time.time()
        telemetry = runner.run_campaigns(n_runs, base_seed=0)
        elapsed = time.time() - t0

        wins = sum(1 for r in telemetry if r.final_result == "win")
        cleared = [len(r.stages_cleared) for r in telemetry]
        hp_at_end = [r.battles[-1].player_hp_end for r in telemetry if r.battles]

        results[name] = {
            "wins": wins,
            "win_rate": wins / n_runs * 100,
            "cleared": cleared,
            "hp_at_end": hp_at_end,
            "elapsed": elapsed,
        }

        print(f"  Time: {elapsed:.1f}s ({elapsed/n_runs*1000:.0f}ms/run)")
        print(f"  Win rate: {wins}/{n_runs} ({wins/n_runs*100:.1f}%)")
        print(f"  Avg stages cleared: {np.mean(cleared):.1f} (median {np.median(cleared):.0f})")

    generate_charts(results, n_runs, agent, out_path)


def generate_charts(results: dict, n_runs: int, agent: str, out_path: str) -> None:
    fig, axes = plt.subplots(1, 2, figsize=(14, 5))
    fig.suptitle(f"{agent} agent by difficulty ({n_runs} campaigns each)", fontsize=14)

    labels = list(results.keys())
    colors = plt.cm.RdYlGn_r(np.linspace(0.1, 0.9, len(labels)))

    # --- Chart 1: Win Rate ---
    ax = axes[0]
    win_rates = [results[l]["win_rate"] for l in labels]
    bars = ax.bar(labels, win_rates, color=colors, edgecolor="black", linewidth=0.5)
    for bar, rate in zip(bars, win_rates):
        ax.text(bar.get_x() + bar.get_width()/2, bar.get_height() + 0.5,
                f"{rate:.1f}%", ha="center", va="bottom", fontsize=10)
    ax.set_ylabel("Win Rate (%)")
    ax.set_title("Campaign Win Rate")
    ax.set_ylim(0, max(win_rates) * 1.3 + 5)

    # --- Chart 2: Stages Cleared Distribution ---
    ax = axes[1]
    max_cleared = max(max(results[l]["cleared"]) for l in labels)
    bins = np.arange(-0.5, max_cleared + 1.5, 1)
    for label, color in zip(labels, colors):
        cleared = results[label]["cleared"]
        ax.hist(cleared, bins=bins, alpha=0.5, color=color, edgecolor="black", linewidth=0.3,
                label=f"{label} (avg={np.mean(cleared):.1f})")
    ax.set_xlabel("Stages Cleared")
    ax.set_ylabel("Count")
    ax.set_title("Stages Cleared Distribution")
    ax.legend()

    plt.tight_layout()
    plt.savefig(out_path, dpi=150, bbox_inches="tight")
    print(f"\nChart saved to {out_path}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--runs", type=int, default=200, help="Campaigns per difficulty")
    parser.add_argument("--agent", choices=sorted(_AGENTS), default="heuristic")
    parser.add_argument("--output", type=str, default="difficulty_comparison.png")
    args = parser.parse_args()
    run_comparison(args.runs, args.agent, args.output)
