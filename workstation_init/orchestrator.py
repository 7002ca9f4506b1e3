# workstation_init/orchestrator.py
# -*- coding: utf-8 -*-
"""
Runs the fixed sequence of configuration steps and builds the RunReport.
"""

import logging
from typing import Callable, Iterable, List, Optional

from common.system_utils import check_privilege
from workstation_init.base_step import BaseStep
from workstation_init.config_models import AppSettings
from workstation_init.errors import FatalError
from workstation_init.models import (
    RunReport,
    RunState,
    StepOutcome,
    StepStatus,
)
from workstation_init.step_executor import execute_step


class Orchestrator:
    """
    Executes steps strictly in list order.

    A failing step does not stop the ones after it. The run aborts only when
    the privilege check fails or a step marked ``fatal`` fails; otherwise it
    completes after the last step whatever the individual outcomes were.
    Disabled steps are never executed and do not appear in the report.
    """

    def __init__(
        self,
        app_settings: AppSettings,
        steps: Optional[Iterable[BaseStep]] = None,
        privilege_check: Optional[Callable[[], None]] = None,
        orchestrator_logger: Optional[logging.Logger] = None,
    ):
        """
        Initializes the Orchestrator.

        Args:
            app_settings: The frozen settings of this run.
            steps: Steps in execution order.
            privilege_check: Callable raising FatalError when the process
                lacks administrative rights. Defaults to check_privilege.
            orchestrator_logger: An optional logger instance.
        """
        self.app_settings = app_settings
        self.privilege_check = privilege_check or check_privilege
        self.logger = orchestrator_logger or logging.getLogger(__name__)
        self.steps: List[BaseStep] = []
        self.report: Optional[RunReport] = None
        for step in steps or []:
            self.add_step(step)

    @property
    def state(self) -> RunState:
        return self.report.state if self.report else RunState.NOT_STARTED

    def add_step(self, step: BaseStep) -> None:
        """
        Appends a step to the execution list.

        Raises:
            ValueError: If a step with the same name is already queued.
        """
        if any(existing.name == step.name for existing in self.steps):
            raise ValueError(f"Step '{step.name}' is already registered")
        self.steps.append(step)
        self.logger.debug(f"Step '{step.name}' added to the queue.")

    def _abort(self, report: RunReport, reason: str) -> RunReport:
        report.state = RunState.ABORTED
        report.abort_reason = reason
        self.logger.critical(f"🔥 {reason}")
        self.logger.error("A fatal error occurred. Halting orchestration.")
        return report

    def run(self) -> RunReport:
        """
        Executes all steps in sequence.

        Returns:
            The RunReport of this run, in state COMPLETED or ABORTED.
        """
        report = RunReport()
        self.report = report
        report.state = RunState.RUNNING
        self.logger.info("Orchestration started.")

        try:
            self.privilege_check()
        except FatalError as e:
            return self._abort(report, str(e))

        total = len(self.steps)
        for i, step in enumerate(self.steps):
            if not step.should_run(self.app_settings):
                self.logger.warning(
                    f"Stage {i + 1}/{total}: '{step.name}' disabled by configuration."
                )
                continue

            self.logger.info(
                f"--- Stage {i + 1}/{total}: Running step '{step.name}' ---"
            )
            result = execute_step(step, self.app_settings, self.logger)
            # Labels describe the applied change; anything else keeps the description.
            label = (
                step.label(self.app_settings) if result.ok else step.description
            )
            report.record(StepOutcome(step.name, label, result))

            if step.fatal and result.status is StepStatus.FAILURE:
                return self._abort(
                    report,
                    f"Fatal step '{step.name}' failed: {result.reason}",
                )
            if result.status is StepStatus.FAILURE:
                self.logger.warning(
                    f"Step '{step.name}' was non-fatal. Continuing orchestration."
                )

        report.state = RunState.COMPLETED
        self.logger.info("✨ Orchestration finished.")
        return report
