# workstation_init/step_executor.py
# -*- coding: utf-8 -*-
"""
Provides functionality to execute an individual configuration step.

The executor runs the step's action, converts any exception it raises into
a failure result carrying the reason, attaches the backups the step made,
and logs a status-tagged line for the outcome.
"""

import dataclasses
import logging
import subprocess
from typing import Optional

from common.command_utils import log_workstation
from workstation_init.base_step import BaseStep
from workstation_init.config_models import AppSettings
from workstation_init.errors import StepError
from workstation_init.models import StepResult, StepStatus

module_logger = logging.getLogger(__name__)


def _describe_called_process_error(e: subprocess.CalledProcessError) -> str:
    cmd = (
        subprocess.list2cmdline(e.cmd)
        if isinstance(e.cmd, (list, tuple))
        else str(e.cmd)
    )
    return f"`{cmd}` exited with status {e.returncode}"


def execute_step(
    step: BaseStep,
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None,
) -> StepResult:
    """
    Execute a single step that has already been found enabled.

    Args:
        step: The step to run.
        app_settings: The settings of this run.
        current_logger: The logger instance to use.

    Returns:
        The step's StepResult, including every backup it made. Exceptions
        never escape: a StepError, a failed command or a missing executable
        becomes a FAILURE with that reason. Anything unexpected is logged
        with its traceback and also becomes a FAILURE.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols

    log_workstation(
        f"--- {symbols.get('step', '➡️')} Executing: {step.description} ({step.name}) ---",
        "info",
        logger_to_use,
        app_settings,
    )

    try:
        result = step.execute(app_settings)
    except StepError as e:
        result = StepResult.failure(str(e))
    except subprocess.CalledProcessError as e:
        result = StepResult.failure(_describe_called_process_error(e))
    except FileNotFoundError as e:
        result = StepResult.failure(
            f"command not found: {e.filename or e}"
        )
    except Exception as e:
        log_workstation(
            f"{symbols.get('error', '❌')} Unexpected error in step {step.name}: {e}",
            "error",
            logger_to_use,
            app_settings,
            exc_info=True,
        )
        result = StepResult.failure(f"unexpected error: {e}")

    backups = step.take_backups()
    if backups:
        result = dataclasses.replace(
            result, backups=tuple(result.backups) + tuple(backups)
        )

    if result.status is StepStatus.SUCCESS:
        log_workstation(
            f"--- {symbols.get('success', '✅')} Successfully completed: {step.description} ({step.name}) ---",
            "success",
            logger_to_use,
            app_settings,
        )
    elif result.status is StepStatus.SKIPPED:
        log_workstation(
            f"{symbols.get('skip', '⏭️')} Skipped: {step.description} ({step.name}): {result.reason}",
            "warning",
            logger_to_use,
            app_settings,
        )
    else:
        log_workstation(
            f"{symbols.get('error', '❌')} FAILED: {step.description} ({step.name}): {result.reason}",
            "error",
            logger_to_use,
            app_settings,
        )
    return result
