# run_history.py
"""Bounded, newest-first record of finished runs."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List

import pandas as pd

from Seating.config import Defaults

if TYPE_CHECKING:
    from Seating.seating_model import SeatingModel, TickResult

logger = logging.getLogger(__name__)

PERCENT_BIN_COUNT = 20
PERCENT_BIN_WIDTH = 5


@dataclass(frozen=True)
class RunSummary:
    time: int
    seated: int
    standing: int
    seated_percent: float
    seating_speed: float
    config: Dict[str, Any]
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_model(cls, model: "SeatingModel", result: "TickResult") -> "RunSummary":
        snapshot = model.config_snapshot
        spawned, time = model.spawned, model.ticks
        return cls(
            time=time,
            seated=result.seated,
            standing=result.standing,
            seated_percent=round(result.seated / spawned * 100, 1) if spawned else 0.0,
            seating_speed=round(result.seated / time, 2) if time else 0.0,
            config={
                "agents": snapshot["NUM_AGENTS"],
                "blocks": snapshot["NUM_BLOCKS"],
                "social_distance": snapshot["SOCIAL_DISTANCE"],
                "back_pref": snapshot["BACK_PREF"],
                "speed": snapshot["SPEED"],
            },
        )

    def describe(self) -> str:
        return (
            f"{self.seated} seated ({self.seated_percent}%), {self.standing} standing | "
            f"Speed: {self.seating_speed:.2f} people/tick | "
            f"Agents: {self.config['agents']}, Blocks: {self.config['blocks']}"
        )


class RunHistory:
    """Summaries of the last ``max_runs`` successful runs, newest first."""

    def __init__(self, max_runs: int = Defaults.HISTORY_MAX_RUNS):
        self.max_runs = max_runs
        self._entries: List[RunSummary] = []

    def record(self, model: "SeatingModel", result: "TickResult") -> RunSummary | None:
        if result.error:
            logger.info("Run ended with an error, not recorded")
            return None

        summary = RunSummary.from_model(model, result)
        self._entries.insert(0, summary)
        del self._entries[self.max_runs:]
        return summary

    @property
    def entries(self) -> List[RunSummary]:
        return list(self._entries)

    def __len__(self):
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def seated_counts(self) -> List[int]:
        return [entry.seated for entry in self._entries]

    def seating_speeds(self) -> List[float]:
        return [entry.seating_speed for entry in self._entries]

    def seated_percent_bins(self) -> List[int]:
        """Run counts per 5 % band of seated percentage; 100 % falls in the last band."""
        bins = [0] * PERCENT_BIN_COUNT
        for entry in self._entries:
            index = min(PERCENT_BIN_COUNT - 1, int(entry.seated_percent // PERCENT_BIN_WIDTH))
            bins[index] += 1
        return bins

    def to_frame(self) -> pd.DataFrame:
        """One row per run, newest first, config fields flattened."""
        rows = []
        for number, entry in zip(range(len(self._entries), 0, -1), self._entries):
            row = asdict(entry)
            row.update(row.pop("config"))
            row["run"] = number
            rows.append(row)
        return pd.DataFrame(rows)
