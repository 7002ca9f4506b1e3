#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Logging setup for the workstation initialisation run.

Console lines are tagged with a per-level symbol and, when the stream is a
terminal, coloured green/yellow/red. A plain copy can also go to a log file.
"""

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from workstation_init.config_models import SYMBOLS_DEFAULT

SIMPLE_LOG_FORMAT_WITH_PREFIX_PLACEHOLDER = "{log_prefix}%(asctime)s - %(levelname)s - %(symbol)s %(message)s"
SIMPLE_LOG_FORMAT_NO_PREFIX = "%(asctime)s - %(levelname)s - %(symbol)s %(message)s"
FILE_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

LEVEL_COLOURS: Dict[int, str] = {
    logging.DEBUG: "\033[2m",
    logging.INFO: "\033[1;32m",
    logging.WARNING: "\033[1;33m",
    logging.ERROR: "\033[1;31m",
    logging.CRITICAL: "\033[1;31m",
}
RESET = "\033[0m"


class SymbolFormatter(logging.Formatter):
    """
    A formatter that adds a symbol per log level and optional ANSI colour.
    """

    def __init__(
        self,
        fmt=None,
        datefmt=None,
        style="%",
        validate=True,
        symbols=None,
        colour=False,
    ):
        super().__init__(fmt, datefmt, style, validate)
        self.symbols = symbols or SYMBOLS_DEFAULT
        self.colour = colour

    def format(self, record):
        if record.levelno == logging.DEBUG:
            record.symbol = "[.]"
        elif record.levelno == logging.INFO:
            record.symbol = "[+]"
        elif record.levelno == logging.WARNING:
            record.symbol = f"[!]{self.symbols.get('warning', '')}"
        elif record.levelno == logging.ERROR:
            record.symbol = f"[✗]{self.symbols.get('error', '')}"
        elif record.levelno == logging.CRITICAL:
            record.symbol = f"[✗]{self.symbols.get('critical', '')}"
        else:
            record.symbol = ""

        formatted = super().format(record)
        if self.colour:
            return f"{LEVEL_COLOURS.get(record.levelno, '')}{formatted}{RESET}"
        return formatted


def setup_logging(
    log_level: int = logging.INFO,
    log_file: Optional[str] = None,
    log_to_console: bool = True,
    log_prefix: Optional[str] = None,
    symbols: Optional[Dict[str, str]] = None,
) -> None:
    """
    Configures the root logger for a run.

    Parameters:
    log_level: int
        The logging level to configure. Defaults to logging.INFO.
    log_file: Optional[str]
        Also append plain (uncoloured) lines to this file.
    log_to_console: bool
        Whether to log to the console (stdout). Defaults to True.
    log_prefix: Optional[str]
        A string put in front of every console line.
    symbols: Optional[Dict[str, str]]
        Symbol table of the active settings.
    """
    handlers: List[logging.Handler] = []

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        actual_prefix = (
            (log_prefix.strip() + " ")
            if log_prefix and log_prefix.strip()
            else ""
        )
        console_format = (
            SIMPLE_LOG_FORMAT_WITH_PREFIX_PLACEHOLDER.format(
                log_prefix=actual_prefix
            )
            if actual_prefix
            else SIMPLE_LOG_FORMAT_NO_PREFIX
        )
        console_handler.setFormatter(
            SymbolFormatter(
                fmt=console_format,
                datefmt="%Y-%m-%d %H:%M:%S",
                symbols=symbols,
                colour=sys.stdout.isatty(),
            )
        )
        handlers.append(console_handler)

    if log_file:
        try:
            log_file_path = Path(log_file)
            log_file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file_path, mode="a")
            file_handler.setFormatter(
                logging.Formatter(FILE_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
            )
            handlers.append(file_handler)
        except OSError as e:
            print(
                f"Warning: Could not create file handler for log file {log_file}: {e}",
                file=sys.stderr,
            )

    if not handlers:  # pragma: no cover
        handlers.append(logging.StreamHandler(sys.stdout))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    for handler in handlers:
        root_logger.addHandler(handler)

    logging.getLogger(__name__).debug(
        f"Logging configured. Level: {logging.getLevelName(log_level)}."
    )
