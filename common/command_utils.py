# common/command_utils.py
# -*- coding: utf-8 -*-
"""
Utilities for executing host commands and logging their output.
"""

import logging
import os
import shutil
import subprocess
from typing import Dict, List, Optional

from workstation_init.config_models import SYMBOLS_DEFAULT, AppSettings

module_logger = logging.getLogger(__name__)


def _symbols(app_settings: Optional[AppSettings]) -> Dict[str, str]:
    return (
        app_settings.symbols
        if app_settings and app_settings.symbols
        else SYMBOLS_DEFAULT
    )


def log_workstation(
    message: str,
    level: str = "info",
    current_logger: Optional[logging.Logger] = None,
    app_settings: Optional[AppSettings] = None,
    exc_info: bool = False,
) -> None:
    """
    Logs a message at the named level.

    Args:
        message (str): The log message to be recorded.
        level (str): One of "debug", "info", "success", "warning", "error"
            or "critical". "success" is logged at INFO.
        current_logger (Optional[logging.Logger]): Logger to use. Defaults to
            the module logger.
        app_settings (Optional[AppSettings]): Settings of the current run.
            Accepted so every caller can pass them uniformly.
        exc_info (bool): Whether to attach the active exception's traceback.
    """
    effective_logger = current_logger if current_logger else module_logger

    if level == "warning":
        effective_logger.warning(message, exc_info=exc_info)
    elif level == "error":
        effective_logger.error(message, exc_info=exc_info)
    elif level == "critical":
        effective_logger.critical(message, exc_info=exc_info)
    elif level == "debug":
        effective_logger.debug(message, exc_info=exc_info)
    else:
        effective_logger.info(message, exc_info=exc_info)


def run_command(
    command: List[str],
    app_settings: Optional[AppSettings],
    check: bool = True,
    capture_output: bool = False,
    current_logger: Optional[logging.Logger] = None,
    env: Optional[Dict[str, str]] = None,
) -> subprocess.CompletedProcess:
    """
    Executes a host command, logging the command line and its result.

    The call blocks until the command exits; there is no timeout.

    Args:
        command (List[str]): The command and its arguments.
        app_settings (Optional[AppSettings]): Settings supplying log symbols.
        check (bool): Raise CalledProcessError on a non-zero exit code.
        capture_output (bool): Capture stdout/stderr as text.
        current_logger (Optional[logging.Logger]): Logger to use.
        env (Optional[Dict[str, str]]): Extra environment variables, layered
            over the inherited environment.

    Returns:
        subprocess.CompletedProcess: The finished process.

    Raises:
        subprocess.CalledProcessError: If `check` is True and the command
            returned non-zero.
        FileNotFoundError: If the executable is not on PATH.
    """
    effective_logger = current_logger if current_logger else module_logger
    symbols = _symbols(app_settings)
    command_to_log_str = subprocess.list2cmdline(command)
    run_env = {**os.environ, **env} if env else None

    log_workstation(
        f"{symbols.get('gear', '⚙️')} Executing: {command_to_log_str}",
        "info",
        effective_logger,
        app_settings,
    )
    try:
        result = subprocess.run(
            command,
            check=check,
            capture_output=capture_output,
            text=True,
            env=run_env,
        )
        if capture_output and result.stdout and result.stdout.strip():
            log_workstation(
                f"   stdout: {result.stdout.strip()}",
                "debug",
                effective_logger,
                app_settings,
            )
        if not check and result.returncode != 0:
            log_workstation(
                f"   `{command_to_log_str}` exited {result.returncode}",
                "debug",
                effective_logger,
                app_settings,
            )
        return result
    except subprocess.CalledProcessError as e:
        log_workstation(
            f"{symbols.get('error', '❌')} Command `{command_to_log_str}` failed (rc {e.returncode}).",
            "error",
            effective_logger,
            app_settings,
        )
        if e.stderr and hasattr(e.stderr, "strip") and e.stderr.strip():
            log_workstation(
                f"   stderr: {e.stderr.strip()}",
                "error",
                effective_logger,
                app_settings,
            )
        raise
    except FileNotFoundError as e:
        log_workstation(
            f"{symbols.get('error', '❌')} Command not found: {e.filename or command[0]}. Ensure it's installed and in PATH.",
            "error",
            effective_logger,
            app_settings,
        )
        raise


def command_exists(command_name: str) -> bool:
    """
    Check if a command exists in the system's PATH.

    Parameters:
        command_name (str): The name of the command to check for existence.

    Returns:
        bool: True if the command is found in the system's PATH.
    """
    return shutil.which(command_name) is not None
