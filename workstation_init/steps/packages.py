# workstation_init/steps/packages.py
# -*- coding: utf-8 -*-
"""
Steps that drive the package manager: the initial update/upgrade, the bulk
tool installation, unattended upgrades and the final cleanup.
"""

from workstation_init.base_step import BaseStep
from workstation_init.config_models import AppSettings
from workstation_init.models import StepResult

UNATTENDED_PACKAGE = "unattended-upgrades"
UNATTENDED_UNIT = "unattended-upgrades"

AUTO_UPGRADES_CONTENT = """\
APT::Periodic::Update-Package-Lists "1";
APT::Periodic::Unattended-Upgrade "1";
"""


class UpdateUpgradeStep(BaseStep):
    """
    Refresh the package index and dist-upgrade.

    This is a precondition rather than an ordinary step: everything after it
    assumes a healthy, refreshed package manager, so its failure aborts the
    run. A failed bulk install, by contrast, is only recorded.
    """

    name = "update_upgrade"
    description = "Update package lists & dist-upgrade"
    fatal = True

    def should_run(self, app_settings: AppSettings) -> bool:
        return True

    def execute(self, app_settings: AppSettings) -> StepResult:
        self.tools.apt.update(app_settings, raise_error=True)
        self.tools.apt.dist_upgrade(app_settings, raise_error=True)
        return StepResult.success("package lists updated and packages upgraded")

    def label(self, app_settings: AppSettings) -> str:
        return "Updates & dist-upgrade"


class InstallToolsStep(BaseStep):
    name = "install_tools"
    description = "Install common tools"

    def should_run(self, app_settings: AppSettings) -> bool:
        return app_settings.install_common_tools

    def execute(self, app_settings: AppSettings) -> StepResult:
        tools = list(app_settings.common_tools)
        if not tools:
            return StepResult.success("no tools configured")
        if not self.tools.apt.install(tools, app_settings):
            return StepResult.failure(
                f"apt-get install failed for {len(tools)} package(s)"
            )
        return StepResult.success(f"{len(tools)} package(s) present")

    def label(self, app_settings: AppSettings) -> str:
        return f"Installed common tools ({len(app_settings.common_tools)} packages)"


class UnattendedUpgradesStep(BaseStep):
    name = "unattended_upgrades"
    description = "Enable unattended-upgrades (security updates)"

    def should_run(self, app_settings: AppSettings) -> bool:
        return app_settings.enable_unattended

    def execute(self, app_settings: AppSettings) -> StepResult:
        if not self.tools.apt.install([UNATTENDED_PACKAGE], app_settings):
            return StepResult.failure(f"could not install {UNATTENDED_PACKAGE}")

        self.write_file(
            app_settings.paths.auto_upgrades, AUTO_UPGRADES_CONTENT, app_settings
        )

        if not self.tools.systemd.restart(UNATTENDED_UNIT, app_settings):
            # The periodic apt timers still pick the file up.
            self.logger.warning(
                f"Could not restart {UNATTENDED_UNIT}; it will use the new settings on next start."
            )
        return StepResult.success(f"wrote {app_settings.paths.auto_upgrades}")

    def label(self, app_settings: AppSettings) -> str:
        return "Unattended security updates enabled"


class AptCleanupStep(BaseStep):
    name = "apt_cleanup"
    description = "Clean up APT cache and autoremove"

    def should_run(self, app_settings: AppSettings) -> bool:
        return app_settings.cleanup_apt

    def execute(self, app_settings: AppSettings) -> StepResult:
        if not self.tools.apt.autoremove(app_settings):
            return StepResult.failure("apt-get autoremove failed")
        if not self.tools.apt.autoclean(app_settings):
            self.logger.warning("apt-get autoclean failed; cache left as is.")
        return StepResult.success()

    def label(self, app_settings: AppSettings) -> str:
        return "Unused packages removed & APT cache cleaned"
