"""Output formatters for run summaries and plans."""

import json
from dataclasses import asdict

from timeslice.models.execution import ExecutionPlan
from timeslice.models.reporting import RunSummary
from timeslice.schedule.duration_parser import format_seconds


def format_summary_text(s: RunSummary) -> str:
    """Plain text summary for logging."""
    lines = [
        f"=== Run Complete ({s.mode}) | Run {s.run_id[:8]} ===",
        f"{s.side} {s.symbol} over {s.duration} ({s.total_seconds}s)",
        f"Plan: {s.plan_mode or '-'}, {s.slice_count} slices of {s.slice_size} "
        f"every {s.interval_seconds}s",
        f"Orders: {s.orders_attempted} attempted, "
        f"{s.orders_succeeded} succeeded, {s.orders_failed} failed",
        f"Budget: {s.initial_budget} initial, {s.remaining_budget} remaining",
        f"Executed qty: {s.executed_qty}",
        f"Stop reason: {s.stop_reason or '-'}",
    ]
    if s.errors:
        lines.append(f"Errors: {len(s.errors)}")
    lines.append(f"Elapsed: {s.duration_seconds:.1f}s")
    return "\n".join(lines)


def format_summary_json(s: RunSummary) -> str:
    """JSON summary for programmatic consumption."""
    return json.dumps(asdict(s), indent=2)


def format_plan_text(plan: ExecutionPlan, symbol: str, quote_asset: str) -> str:
    """Human-readable preview of a plan before it is run."""
    if plan.is_empty:
        return (
            f"{plan.side.value} {symbol}: nothing to execute "
            f"(budget {plan.total_budget:.2f} {quote_asset} over {plan.total_seconds}s)"
        )
    rate = f"{plan.rate_per_second:.2f}" if plan.rate_per_second is not None else "-"
    return "\n".join([
        f"{plan.side.value} {symbol} | {plan.mode.value}",
        f"Budget: {plan.total_budget:.8f} {quote_asset} over "
        f"{format_seconds(plan.total_seconds)} ({plan.total_seconds}s)",
        f"Rate: {rate} {quote_asset}/s",
        f"Slices: {plan.slice_count} x {plan.slice_size:.8f} {quote_asset} "
        f"every {plan.interval_seconds}s",
        f"Planned spend: {plan.planned_spend:.8f} {quote_asset}",
    ])
