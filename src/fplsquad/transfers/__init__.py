"""Transfer planning across upcoming gameweeks."""

from .planner import (
    TransferOption,
    TransferPlan,
    TransferSettings,
    TransferStep,
    plan_transfers,
    priority_for,
    summarize,
)

__all__ = [
    "TransferOption",
    "TransferPlan",
    "TransferSettings",
    "TransferStep",
    "plan_transfers",
    "priority_for",
    "summarize",
]
