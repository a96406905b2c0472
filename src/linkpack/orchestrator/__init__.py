"""Batch planning: canonicalize, apply privacy mode and deduplicate batch text."""

from linkpack.orchestrator.planner import build_plan, parse_batch_text, split_lines


__all__ = [
    "build_plan",
    "parse_batch_text",
    "split_lines",
]
