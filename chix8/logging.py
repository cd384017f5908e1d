"""Console logging for the chix8 engine and driver.

Lines look like ``[    1.25s][   DEBUG][Engine] 200: 6005  LD V0, 05``: time
since the logger was created, level, logger name and message. Levels are
coloured when stdout is a terminal.
"""

import sys
import time

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ANSI_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
ANSI_RESET = "\033[0m"


class ConsoleLogger:
    """Levelled logger that prints to stdout."""

    def __init__(
        self,
        name: str = "chix8",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        level = log_level.upper()
        if level not in LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LEVELS)}")

        self.name = name
        self.log_level = level
        self.threshold = LEVELS.index(level)
        self.use_colors = use_colors and sys.stdout.isatty()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    def is_enabled_for(self, level: str) -> bool:
        """Whether a message at ``level`` would be printed."""
        level = level.upper()
        rank = LEVELS.index(level) if level in LEVELS else LEVELS.index("INFO")
        return rank >= self.threshold

    def _format_message(self, level: str, message: str) -> str:
        prefix = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        tag = f"[{level:>8s}]"
        if self.use_colors:
            tag = f"{ANSI_COLORS.get(level, '')}{tag}{ANSI_RESET}"
        return f"{prefix}{tag}[{self.name}] {message}"

    def log(self, level: str, message: str):
        level = level.upper()
        if self.is_enabled_for(level):
            print(self._format_message(level, message), flush=True)

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


def log_config(logger: ConsoleLogger, config: dict):
    """Log a configuration mapping, one key per line."""
    logger.info("=" * 60)
    logger.info("Configuration:")
    for key, value in config.items():
        logger.info(f"  {key}: {value}")
    logger.info("=" * 60)
