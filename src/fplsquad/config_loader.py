"""Persist and load CLI strategy profiles."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from fplsquad.config import FPL_RULES
from fplsquad.models import Strategy


@dataclass
class StrategyProfile:
    time_horizon: float = 0.0
    risk_tolerance: float = 0.0
    budget: int = FPL_RULES.default_budget
    horizon: int = 1

    @property
    def strategy(self) -> Strategy:
        return Strategy(time_horizon=self.time_horizon, risk_tolerance=self.risk_tolerance)

    @classmethod
    def load(cls, path: Path) -> "StrategyProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        strategy = Strategy(
            time_horizon=data.get("time_horizon", 0.0),
            risk_tolerance=data.get("risk_tolerance", 0.0),
        )
        return cls(
            time_horizon=strategy.time_horizon,
            risk_tolerance=strategy.risk_tolerance,
            budget=int(data.get("budget", FPL_RULES.default_budget)),
            horizon=int(data.get("horizon", 1)),
        )

    def save(self, path: Path) -> None:
        payload = {
            "time_horizon": self.time_horizon,
            "risk_tolerance": self.risk_tolerance,
            "budget": self.budget,
            "horizon": self.horizon,
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
