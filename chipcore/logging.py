"""Console logging utilities for chipcore hosts.

Provides a small leveled logger with optional colors and elapsed-time
timestamps, a register dump for debugging ROMs, and a tqdm progress bar for
headless runs.
"""

import time
import sys
from typing import Optional, TextIO

from tqdm import tqdm

LEVELS = {
    "DEBUG": 0,
    "INFO": 1,
    "WARNING": 2,
    "ERROR": 3,
    "CRITICAL": 4,
}

COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
RESET = "\033[0m"


class ConsoleLogger:
    """Leveled console logger with optional colors and timestamps."""

    def __init__(
        self,
        name: str = "chipcore",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream: Optional[TextIO] = None,
    ):
        self.name = name
        self.stream = stream or sys.stdout
        self.set_level(log_level)
        self.use_colors = (
            use_colors and hasattr(self.stream, "isatty") and self.stream.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    def set_level(self, log_level: str):
        level = log_level.upper()
        if level not in LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LEVELS)}")
        self.log_level = level

    def _should_log(self, level: str) -> bool:
        return LEVELS.get(level.upper(), 1) >= LEVELS[self.log_level]

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"

        if self.use_colors:
            level_str = f"{COLORS.get(level.upper(), '')}{level_str}{RESET}"

        return f"{timestamp}{level_str}[{self.name}] {message}"

    def log(self, level: str, message: str):
        if self._should_log(level):
            print(self._format_message(level, message), file=self.stream, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)

    def registers(self, state):
        """Dump PC, I, timers and V0-VF of an emulator state at DEBUG level."""
        if not self._should_log("DEBUG"):
            return
        registers = " ".join(f"V{i:X}={int(v):02X}" for i, v in enumerate(state.V))
        self.debug(
            f"PC={int(state.pc):03X} I={int(state.I):03X} "
            f"DT={int(state.delay_timer)} ST={int(state.sound_timer)} {registers}"
        )


def frame_progress(n: int, desc: Optional[str] = None, **kwargs) -> tqdm:
    """Progress bar over ``n`` emulated frames."""
    if desc is None:
        desc = f"Emulating ({n:,} frames)"
    return tqdm(range(n), total=n, desc=desc, unit="frame", **kwargs)
