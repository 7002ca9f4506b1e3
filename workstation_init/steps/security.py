# workstation_init/steps/security.py
# -*- coding: utf-8 -*-
"""
Firewall (UFW) and intrusion prevention (fail2ban) steps.

Both only apply when their tool is present on the host; a missing tool is
recorded as skipped, not failed.
"""

from typing import Callable, List, Tuple

from workstation_init.base_step import BaseStep
from workstation_init.config_models import AppSettings
from workstation_init.models import StepResult

UFW_UNIT = "ufw"

FAIL2BAN_JAIL_TEMPLATE = """\
[DEFAULT]
bantime = {bantime}
findtime = {findtime}
maxretry = {maxretry}
backend = {backend}

[sshd]
enabled = true
port = {ssh_port}
logpath = %(sshd_log)s
"""


def ssh_rule(app_settings: AppSettings) -> str:
    return f"{app_settings.ssh_port}/tcp"


def render_fail2ban_jail(app_settings: AppSettings) -> str:
    jail = app_settings.fail2ban
    return FAIL2BAN_JAIL_TEMPLATE.format(
        bantime=jail.bantime,
        findtime=jail.findtime,
        maxretry=jail.maxretry,
        backend=jail.backend,
        ssh_port=app_settings.ssh_port,
    )


class FirewallStep(BaseStep):
    """
    Rebuild the UFW ruleset from scratch.

    The ruleset is reset first, so applying it again yields the same rules
    rather than duplicates.
    """

    name = "firewall"
    description = "Configure UFW (firewall)"

    def should_run(self, app_settings: AppSettings) -> bool:
        return app_settings.enable_ufw

    def execute(self, app_settings: AppSettings) -> StepResult:
        ufw = self.tools.ufw
        if not ufw.is_available():
            return StepResult.skipped("ufw is not installed")

        if not self.tools.systemd.enable(UFW_UNIT, app_settings):
            self.logger.warning(f"Could not enable the {UFW_UNIT} unit; continuing.")

        actions: List[Tuple[str, Callable[[], bool]]] = [
            ("reset", lambda: ufw.reset(app_settings)),
            ("default deny incoming",
             lambda: ufw.default_policy("deny", "incoming", app_settings)),
            ("default allow outgoing",
             lambda: ufw.default_policy("allow", "outgoing", app_settings)),
        ]
        if app_settings.allow_ssh:
            rule = ssh_rule(app_settings)
            actions.append((f"allow {rule}", lambda: ufw.allow(rule, app_settings)))
        actions.append(("enable", lambda: ufw.enable(app_settings)))

        for desc, action in actions:
            if not action():
                return StepResult.failure(f"ufw {desc} failed")
        return StepResult.success()

    def label(self, app_settings: AppSettings) -> str:
        if app_settings.allow_ssh:
            return f"UFW enabled (SSH allowed on port {ssh_rule(app_settings)})"
        return "UFW enabled (SSH not allowed)"


class Fail2banStep(BaseStep):
    name = "fail2ban"
    description = "Configure fail2ban with basic SSH jail"

    def should_run(self, app_settings: AppSettings) -> bool:
        return app_settings.configure_fail2ban

    def execute(self, app_settings: AppSettings) -> StepResult:
        if not self.tools.fail2ban.is_installed(app_settings):
            return StepResult.skipped("fail2ban is not installed")

        self.write_file(
            app_settings.paths.fail2ban_jail,
            render_fail2ban_jail(app_settings),
            app_settings,
        )
        if not self.tools.fail2ban.reload(app_settings):
            return StepResult.failure("could not enable/restart fail2ban")
        return StepResult.success(f"wrote {app_settings.paths.fail2ban_jail}")

    def label(self, app_settings: AppSettings) -> str:
        return f"Fail2ban SSH jail configured (port {app_settings.ssh_port})"
