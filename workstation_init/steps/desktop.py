# workstation_init/steps/desktop.py
# -*- coding: utf-8 -*-
"""
Workstation comforts: periodic SSD TRIM and shell aliases.
"""

from common.file_utils import append_marked_block
from workstation_init.base_step import BaseStep
from workstation_init.config_models import AppSettings
from workstation_init.models import StepResult

FSTRIM_UNIT = "fstrim.timer"

ALIAS_MARKER = "Handy aliases (added by workstation-init)"

ALIAS_BLOCK = f"""\
# ----- {ALIAS_MARKER} -----
alias ll="ls -alF"
alias la="ls -A"
alias l="ls -CF"
alias ..="cd .."
alias ...="cd ../.."
alias grep="grep --color=auto"
alias k="kubectl"
alias venv="python3 -m venv .venv && source .venv/bin/activate"
# --------------------------------------------------
"""


class FstrimStep(BaseStep):
    name = "fstrim"
    description = "Enable weekly fstrim.timer (safe on SSD/NVMe)"

    def should_run(self, app_settings: AppSettings) -> bool:
        return app_settings.enable_fstrim

    def execute(self, app_settings: AppSettings) -> StepResult:
        if not self.tools.systemd.enable(FSTRIM_UNIT, app_settings):
            return StepResult.failure(f"could not enable {FSTRIM_UNIT}")
        if not self.tools.systemd.start(FSTRIM_UNIT, app_settings):
            self.logger.warning(f"{FSTRIM_UNIT} enabled but not started; it starts on next boot.")
        return StepResult.success()

    def label(self, app_settings: AppSettings) -> str:
        return "Weekly fstrim.timer enabled"


class BashAliasesStep(BaseStep):
    """
    Append the alias block to ``.bashrc`` in each configured home directory.

    The block carries a marker line and is only appended where that marker
    is absent. Home directories that do not exist are ignored.
    """

    name = "bash_aliases"
    description = "Add handy bash aliases"

    def should_run(self, app_settings: AppSettings) -> bool:
        return app_settings.set_bash_aliases

    def execute(self, app_settings: AppSettings) -> StepResult:
        appended = []
        for home in app_settings.paths.alias_homes:
            if not home.is_dir():
                self.logger.debug(f"{home} does not exist; no aliases added there.")
                continue
            bashrc = home / ".bashrc"
            if append_marked_block(
                bashrc, ALIAS_MARKER, ALIAS_BLOCK, app_settings,
                current_logger=self.logger,
            ):
                appended.append(str(bashrc))
        if appended:
            return StepResult.success(f"aliases added to {', '.join(appended)}")
        return StepResult.success("aliases already present")

    def label(self, app_settings: AppSettings) -> str:
        homes = ", ".join(str(h) for h in app_settings.paths.alias_homes)
        return f"Handy bash aliases added ({homes})"
