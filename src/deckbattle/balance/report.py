"""Plain-text report for batch simulation results."""

from __future__ import annotations

from deckbattle.balance.models import CardMetrics, GlobalMetrics, StageMetrics


def generate_text_report(
    global_metrics: GlobalMetrics,
    card_metrics: list[CardMetrics] | None = None,
    stage_metrics: list[StageMetrics] | None = None,
    title: str = "Simulation Report",
) -> str:
    """Generate a human-readable summary for terminal/markdown."""
    g = global_metrics
    lines: list[str] = []

    lines.append("=" * 60)
    lines.append(title)
    lines.append("=" * 60)

    lines.append("")
    lines.append("## Global Stats")
    lines.append(f"  Win rate:           {g.win_rate:.1%} ({g.wins}/{g.total_runs})")
    lines.append(f"  Avg stages cleared: {g.avg_stages_cleared:.1f}")
    lines.append(f"  Avg battles won:    {g.avg_battles_won:.1f}")
    lines.append(f"  Avg deck size:      {g.avg_deck_size:.1f}")

    if stage_metrics:
        lines.append("")
        lines.append("## Stages")
        for s in stage_metrics:
            lines.append(
                f"  stage {s.stage_id:>4s}  fought={s.times_fought:<5d}"
                f"  wr={s.win_rate:.2f}  turns={s.avg_turns:.1f}"
                f"  hp_lost={s.avg_hp_lost:.1f}"
            )

    if card_metrics:
        ranked = sorted(card_metrics, key=lambda c: c.win_rate_delta, reverse=True)
        lines.append("")
        lines.append("## Cards by Win Rate Delta")
        for c in ranked:
            lines.append(
                f"  {c.card_id:16s}  wr_delta={c.win_rate_delta:+.3f}"
                f"  pick={c.pick_rate:.2f}  played={c.times_played}"
                f"  in_deck={c.times_in_deck}"
            )

    return "\n".join(lines)
