# runner.py
"""
Drives a :class:`SeatingModel` the way the interactive page does: build,
start, pause, reset and restart, with completion messages and the run
history kept up to date.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

from Seating.config import ConfigManager, Defaults
from Seating.seating_model import SeatingModel, TickResult
from Seating.statistics.run_history import RunHistory

logger = logging.getLogger(__name__)

TickCallback = Callable[[SeatingModel, TickResult], None]


class SimulationRunner:
    def __init__(self, config: Optional[ConfigManager] = None, seed=None, paced: bool = False,
                 on_tick: Optional[TickCallback] = None, history: Optional[RunHistory] = None):
        self.config = config if config is not None else ConfigManager()
        self.seed = seed
        self.paced = paced
        self.on_tick = on_tick
        self.history = history if history is not None else RunHistory()

        self.model: Optional[SeatingModel] = None
        self.is_built = False
        self.is_running = False
        self.stale = False
        self.completion_message: Optional[str] = None

        self.config.add_listener(self._on_config_change)

    def _on_config_change(self, key: str, value: Any) -> None:
        if key in Defaults.LAYOUT_KEYS and self.is_built:
            logger.info("%s changed to %r, layout will be rebuilt on next start", key, value)
            self.stale = True

    def close(self) -> None:
        self.pause()
        self.config.remove_listener(self._on_config_change)

    # ———— controls ————

    def build(self) -> bool:
        self.pause()
        self.completion_message = None

        model = SeatingModel(self.config, seed=self.seed)
        if not model.initialize():
            self.show_error("Failed to initialize simulation")
            self.model, self.is_built = None, False
            return False

        self.model = model
        self.is_built = True
        self.stale = False
        logger.info("Conference room built successfully")
        return True

    def start(self, max_ticks: Optional[int] = None) -> Optional[TickResult]:
        """
        Tick until the run completes, :meth:`pause` is called (e.g. from
        ``on_tick``) or *max_ticks* ticks have run in this call.
        """
        if (not self.is_built or self.stale) and not self.build():
            return None
        if self.is_running or self.model is None:
            return None
        if self.model.completed:
            return self.model.last_result

        self.is_running = True
        result = None
        ticks = 0
        while self.is_running:
            result = self.model.tick()
            ticks += 1
            if self.on_tick is not None:
                self.on_tick(self.model, result)

            if result.completed:
                self.pause()
                self._show_completion(result)
                break
            if max_ticks is not None and ticks >= max_ticks:
                self.pause()
                break
            if self.paced:
                time.sleep(self.config["SPEED"] / 1000)
        return result

    def pause(self) -> None:
        self.is_running = False

    def reset(self) -> None:
        self.pause()
        self.model = None
        self.is_built = False
        self.stale = False
        self.completion_message = None
        logger.info("Reset complete")

    def restart(self, max_ticks: Optional[int] = None) -> Optional[TickResult]:
        if not self.is_built:
            logger.warning("Cannot restart: simulation not built")
            return None

        logger.info("Restarting simulation...")
        if not self.build():
            return None
        return self.start(max_ticks)

    # ———— messages ————

    def show_error(self, message: str) -> None:
        logger.error(message)
        self.completion_message = f"Error: {message}"

    def _show_completion(self, result: TickResult) -> None:
        model = self.model
        if result.error:
            self.show_error("Simulation encountered an error")
            return

        stats = model.get_stats()
        self.completion_message = (
            f"Simulation Complete! Time: {model.ticks} ticks | "
            f"{result.seated} seated ({stats.seated_percent}%), {result.standing} standing | "
            f"Avg Speed: {stats.seating_speed:.2f} people/tick"
        )
        logger.info(self.completion_message)
        self.history.record(model, result)

    def stats_line(self) -> str:
        if self.model is None:
            return "Not built"
        stats = self.model.get_stats()
        return (
            f"Time: {stats.time} | Arrived: {stats.spawned} | Moving: {stats.moving} | "
            f"Seated: {stats.seated} ({stats.seated_percent}%) | Standing: {stats.standing} | "
            f"Speed: {stats.seating_speed} people/tick"
        )
