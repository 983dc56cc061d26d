"""
Logging configuration for the biztositok API client

The library only creates module loggers; handlers are attached by the
application (or the command line entry point) through setup_logging().
"""

import logging
import sys
from pathlib import Path


class BiztositokLogger:
    """Centralized logger for the client"""

    def __init__(
        self,
        name: str = "biztositok",
        log_file: Path | None = None,
        console_output: bool = True,
        level: int = logging.INFO,
    ):
        """
        Initialize logger

        Args:
            name: Logger name (usually "biztositok" for the package logger)
            log_file: Path to log file (optional)
            console_output: Whether to print to console
            level: Level for the console handler
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)

        # Clear existing handlers
        self.logger.handlers = []

        # Format: timestamp - module - level - message
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )

        if console_output:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(level)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def get_logger(self) -> logging.Logger:
        """Get the underlying logger instance"""
        return self.logger


def setup_logging(
    log_file: Path | None = None, verbose: bool = True, level: int | str = logging.INFO
) -> logging.Logger:
    """
    Setup logging for an application using the client

    Args:
        log_file: Optional file receiving DEBUG output
        verbose: Whether to also log to the console
        level: Console level, as a number or a name such as "DEBUG"

    Returns:
        Configured package logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger_wrapper = BiztositokLogger(
        name="biztositok", log_file=log_file, console_output=verbose, level=level
    )
    return logger_wrapper.get_logger()


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get logger for a specific module

    Args:
        module_name: Name of the module (e.g., 'client', 'http_client')

    Returns:
        Logger instance
    """
    return logging.getLogger(f"biztositok.{module_name}")
