# workstation_init/base_step.py
# -*- coding: utf-8 -*-
"""
Base class for all configuration steps.

A step is one independently toggleable change to the host. The orchestrator
asks it whether it should run for the given settings and, if so, executes
it. Steps never reference each other; ordering belongs to the orchestrator.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from common.file_utils import WriteOutcome, write_managed_file
from workstation_init.config_models import AppSettings
from workstation_init.host_tools import HostTools
from workstation_init.models import BackupRecord, StepResult


class BaseStep(ABC):
    """
    Base class for all configuration steps.

    Subclasses set ``name`` (unique, machine friendly) and ``description``
    and implement ``should_run`` and ``execute``. A step marked ``fatal`` is a
    precondition: if it fails the orchestrator aborts the run.
    """

    name: str = ""
    description: str = ""
    fatal: bool = False

    def __init__(
        self,
        tools: HostTools,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the step.

        Args:
            tools: The host collaborators this step may call.
            logger: Optional logger instance. If not provided, a new logger will be created.
        """
        self.tools = tools
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self._backups: List[BackupRecord] = []

    @abstractmethod
    def should_run(self, app_settings: AppSettings) -> bool:
        """
        Decide from the settings alone whether this step is enabled.

        Returns:
            True if the step should be executed.
        """

    @abstractmethod
    def execute(self, app_settings: AppSettings) -> StepResult:
        """
        Apply the change.

        Returns:
            A StepResult. Raising StepError or CalledProcessError is also
            allowed; the step executor turns it into a failure.
        """

    def label(self, app_settings: AppSettings) -> str:
        """Line used for this step in the run summary."""
        return self.description

    def write_file(
        self,
        path: Path,
        content: str,
        app_settings: AppSettings,
        mode: int = 0o644,
    ) -> WriteOutcome:
        """Replace `path` with `content`, remembering any backup made."""
        outcome = write_managed_file(
            path, content, app_settings, mode=mode, current_logger=self.logger
        )
        if outcome.backup is not None:
            self._backups.append(outcome.backup)
        return outcome

    def take_backups(self) -> List[BackupRecord]:
        """Return and forget the backups made since the last call."""
        backups, self._backups = self._backups, []
        return backups

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"
