# workstation_init/steps/tuning.py
# -*- coding: utf-8 -*-
"""
Kernel, resource-limit and journal tuning.

Each step replaces one drop-in file wholesale (after a backup) and then asks
the owning subsystem to pick it up.
"""

from workstation_init.base_step import BaseStep
from workstation_init.config_models import AppSettings
from workstation_init.models import StepResult

JOURNALD_UNIT = "systemd-journald"

SYSCTL_TEMPLATE = """\
# Desktop-friendly VM settings
vm.swappiness={swappiness}
vm.vfs_cache_pressure={vfs_cache_pressure}

# Increase inotify limits (better for IDEs, watching files, etc.)
fs.inotify.max_user_watches=524288
fs.inotify.max_user_instances=1024

# Modern network stack defaults
net.core.default_qdisc={default_qdisc}
net.ipv4.tcp_congestion_control={tcp_congestion}

# Reasonable socket buffers/backlogs
net.core.somaxconn=8192
net.core.netdev_max_backlog=16384
net.ipv4.tcp_fastopen=3
"""

LIMITS_CONTENT = """\
* soft nofile 1048576
* hard nofile 1048576
root soft nofile 1048576
root hard nofile 1048576
"""

JOURNALD_TEMPLATE = """\
[Journal]
SystemMaxUse={journal_max}
"""


def render_sysctl_conf(app_settings: AppSettings) -> str:
    sysctl = app_settings.sysctl
    return SYSCTL_TEMPLATE.format(
        swappiness=sysctl.swappiness,
        vfs_cache_pressure=sysctl.vfs_cache_pressure,
        default_qdisc=sysctl.default_qdisc,
        tcp_congestion=sysctl.tcp_congestion,
    )


def render_journald_conf(app_settings: AppSettings) -> str:
    return JOURNALD_TEMPLATE.format(journal_max=app_settings.journal_max)


class SysctlStep(BaseStep):
    name = "sysctl"
    description = "Apply desktop-friendly sysctl/network tuning"

    def should_run(self, app_settings: AppSettings) -> bool:
        return app_settings.tune_sysctl

    def execute(self, app_settings: AppSettings) -> StepResult:
        self.write_file(
            app_settings.paths.sysctl_conf,
            render_sysctl_conf(app_settings),
            app_settings,
        )
        if not self.tools.sysctl.reload(app_settings):
            return StepResult.failure("sysctl --system failed")
        return StepResult.success(f"wrote {app_settings.paths.sysctl_conf}")

    def label(self, app_settings: AppSettings) -> str:
        sysctl = app_settings.sysctl
        return (
            f"Sysctl tuning applied (swappiness={sysctl.swappiness}, "
            f"congestion={sysctl.tcp_congestion}/{sysctl.default_qdisc})"
        )


class LimitsStep(BaseStep):
    name = "limits"
    description = "Raise file descriptor limits"

    def should_run(self, app_settings: AppSettings) -> bool:
        return app_settings.tune_limits

    def execute(self, app_settings: AppSettings) -> StepResult:
        self.write_file(app_settings.paths.limits_conf, LIMITS_CONTENT, app_settings)
        return StepResult.success(f"wrote {app_settings.paths.limits_conf}")

    def label(self, app_settings: AppSettings) -> str:
        return "File descriptor limits raised"


class JournalStep(BaseStep):
    name = "journal"
    description = "Cap systemd-journald size"

    def should_run(self, app_settings: AppSettings) -> bool:
        return app_settings.tune_journal

    def execute(self, app_settings: AppSettings) -> StepResult:
        self.logger.info(f"Capping systemd-journald size to {app_settings.journal_max}...")
        self.write_file(
            app_settings.paths.journald_conf,
            render_journald_conf(app_settings),
            app_settings,
        )
        if not self.tools.systemd.restart(JOURNALD_UNIT, app_settings):
            return StepResult.failure(f"could not restart {JOURNALD_UNIT}")
        return StepResult.success(f"wrote {app_settings.paths.journald_conf}")

    def label(self, app_settings: AppSettings) -> str:
        return f"Journald capped at {app_settings.journal_max}"
