# tests/test_steps.py
# -*- coding: utf-8 -*-
"""
Tests for the concrete configuration steps, run against fake host tools and
a temporary file tree.
"""

from workstation_init.config_models import SysctlSettings
from workstation_init.models import RunState, StepStatus
from workstation_init.orchestrator import Orchestrator
from workstation_init.step_executor import execute_step
from workstation_init.steps import DEFAULT_STEP_ORDER, build_default_steps
from workstation_init.steps.desktop import ALIAS_MARKER, BashAliasesStep, FstrimStep
from workstation_init.steps.packages import (
    AUTO_UPGRADES_CONTENT,
    AptCleanupStep,
    InstallToolsStep,
    UnattendedUpgradesStep,
    UpdateUpgradeStep,
)
from workstation_init.steps.security import Fail2banStep, FirewallStep
from workstation_init.steps.tuning import (
    LIMITS_CONTENT,
    JournalStep,
    LimitsStep,
    SysctlStep,
)


def _run_all(app_settings, tools):
    steps = build_default_steps(tools)
    return Orchestrator(app_settings, steps, privilege_check=lambda: None).run()


def _backups(directory):
    return sorted(p.name for p in directory.rglob("*.bak.*"))


def test_default_order():
    assert [cls.name for cls in DEFAULT_STEP_ORDER] == [
        "update_upgrade",
        "install_tools",
        "firewall",
        "unattended_upgrades",
        "sysctl",
        "limits",
        "journal",
        "fstrim",
        "bash_aliases",
        "fail2ban",
        "apt_cleanup",
    ]


class TestPackageSteps:
    def test_update_upgrade(self, app_settings, fake_tools):
        result = execute_step(UpdateUpgradeStep(fake_tools), app_settings)

        assert result.ok
        fake_tools.apt.update.assert_called_once_with(app_settings, raise_error=True)
        fake_tools.apt.dist_upgrade.assert_called_once_with(
            app_settings, raise_error=True
        )
        assert UpdateUpgradeStep.fatal is True

    def test_install_tools_uses_configured_list(self, make_settings, fake_tools):
        settings = make_settings(common_tools=("git", "htop"))
        step = InstallToolsStep(fake_tools)

        result = execute_step(step, settings)

        assert result.ok
        fake_tools.apt.install.assert_called_once_with(["git", "htop"], settings)
        assert step.label(settings) == "Installed common tools (2 packages)"

    def test_install_tools_failure(self, app_settings, fake_tools):
        fake_tools.apt.install.return_value = False
        result = execute_step(InstallToolsStep(fake_tools), app_settings)
        assert result.status is StepStatus.FAILURE

    def test_unattended_upgrades_writes_periodic_file(self, app_settings, fake_tools):
        result = execute_step(UnattendedUpgradesStep(fake_tools), app_settings)

        assert result.ok
        assert app_settings.paths.auto_upgrades.read_text() == AUTO_UPGRADES_CONTENT
        fake_tools.apt.install.assert_called_once_with(
            ["unattended-upgrades"], app_settings
        )

    def test_unattended_restart_failure_is_tolerated(self, app_settings, fake_tools):
        fake_tools.systemd.restart.return_value = False
        result = execute_step(UnattendedUpgradesStep(fake_tools), app_settings)
        assert result.ok

    def test_apt_cleanup(self, app_settings, fake_tools):
        fake_tools.apt.autoclean.return_value = False
        assert execute_step(AptCleanupStep(fake_tools), app_settings).ok

        fake_tools.apt.autoremove.return_value = False
        result = execute_step(AptCleanupStep(fake_tools), app_settings)
        assert result.status is StepStatus.FAILURE


class TestFirewallStep:
    def test_custom_ssh_port_only(self, make_settings, fake_tools):
        settings = make_settings(ssh_port=2222)
        step = FirewallStep(fake_tools)

        result = execute_step(step, settings)

        assert result.ok
        allowed = [c.args[0] for c in fake_tools.ufw.allow.call_args_list]
        assert allowed == ["2222/tcp"]
        assert "22/tcp" not in allowed
        assert step.label(settings) == "UFW enabled (SSH allowed on port 2222/tcp)"

    def test_policy_sequence(self, app_settings, fake_tools):
        execute_step(FirewallStep(fake_tools), app_settings)

        fake_tools.ufw.reset.assert_called_once_with(app_settings)
        assert [c.args[:2] for c in fake_tools.ufw.default_policy.call_args_list] == [
            ("deny", "incoming"),
            ("allow", "outgoing"),
        ]
        fake_tools.ufw.enable.assert_called_once_with(app_settings)

    def test_ssh_not_allowed(self, make_settings, fake_tools):
        settings = make_settings(allow_ssh=False)
        assert execute_step(FirewallStep(fake_tools), settings).ok
        fake_tools.ufw.allow.assert_not_called()

    def test_missing_ufw_is_skipped(self, app_settings, fake_tools):
        fake_tools.ufw.is_available.return_value = False

        result = execute_step(FirewallStep(fake_tools), app_settings)

        assert result.status is StepStatus.SKIPPED
        fake_tools.ufw.enable.assert_not_called()

    def test_ufw_failure(self, app_settings, fake_tools):
        fake_tools.ufw.enable.return_value = False
        result = execute_step(FirewallStep(fake_tools), app_settings)
        assert result.status is StepStatus.FAILURE
        assert "enable" in result.reason


class TestFail2banStep:
    def test_writes_jail_for_ssh_port(self, make_settings, fake_tools):
        settings = make_settings(ssh_port=2222)

        result = execute_step(Fail2banStep(fake_tools), settings)

        assert result.ok
        jail = settings.paths.fail2ban_jail.read_text()
        assert "[sshd]" in jail
        assert "port = 2222" in jail
        assert "maxretry = 5" in jail
        fake_tools.fail2ban.reload.assert_called_once_with(settings)

    def test_not_installed_is_skipped(self, app_settings, fake_tools):
        fake_tools.fail2ban.is_installed.return_value = False

        result = execute_step(Fail2banStep(fake_tools), app_settings)

        assert result.status is StepStatus.SKIPPED
        assert not app_settings.paths.fail2ban_jail.exists()


class TestTuningSteps:
    def test_sysctl_content(self, make_settings, fake_tools):
        settings = make_settings(sysctl=SysctlSettings(swappiness=5))

        result = execute_step(SysctlStep(fake_tools), settings)

        assert result.ok
        content = settings.paths.sysctl_conf.read_text()
        assert "vm.swappiness=5\n" in content
        assert "net.ipv4.tcp_congestion_control=bbr\n" in content
        assert "net.core.default_qdisc=fq\n" in content
        fake_tools.sysctl.reload.assert_called_once_with(settings)

    def test_sysctl_reload_failure(self, app_settings, fake_tools):
        fake_tools.sysctl.reload.return_value = False
        result = execute_step(SysctlStep(fake_tools), app_settings)
        assert result.status is StepStatus.FAILURE

    def test_limits(self, app_settings, fake_tools):
        assert execute_step(LimitsStep(fake_tools), app_settings).ok
        assert app_settings.paths.limits_conf.read_text() == LIMITS_CONTENT

    def test_limits_keeps_tightened_mode(self, app_settings, fake_tools):
        limits_conf = app_settings.paths.limits_conf
        limits_conf.parent.mkdir(parents=True)
        limits_conf.write_text("* soft nofile 4096\n")
        limits_conf.chmod(0o600)

        assert execute_step(LimitsStep(fake_tools), app_settings).ok
        assert limits_conf.read_text() == LIMITS_CONTENT
        assert limits_conf.stat().st_mode & 0o777 == 0o600

    def test_journal_change_backs_up_previous_value(self, make_settings, fake_tools):
        first = make_settings(journal_max="200M")
        execute_step(JournalStep(fake_tools), first)
        journald_conf = first.paths.journald_conf
        assert "SystemMaxUse=200M" in journald_conf.read_text()

        second = make_settings(journal_max="500M")
        result = execute_step(JournalStep(fake_tools), second)

        assert result.ok
        assert journald_conf.read_text() == "[Journal]\nSystemMaxUse=500M\n"
        assert len(result.backups) == 1
        assert "SystemMaxUse=200M" in result.backups[0].backup_path.read_text()
        fake_tools.systemd.restart.assert_called_with("systemd-journald", second)


class TestDesktopSteps:
    def test_fstrim(self, app_settings, fake_tools):
        assert execute_step(FstrimStep(fake_tools), app_settings).ok
        fake_tools.systemd.enable.assert_called_once_with("fstrim.timer", app_settings)

    def test_fstrim_enable_failure(self, app_settings, fake_tools):
        fake_tools.systemd.enable.return_value = False
        result = execute_step(FstrimStep(fake_tools), app_settings)
        assert result.status is StepStatus.FAILURE

    def test_aliases_appended_once(self, app_settings, fake_tools):
        step = BashAliasesStep(fake_tools)
        execute_step(step, app_settings)
        execute_step(step, app_settings)

        for home in app_settings.paths.alias_homes:
            bashrc = (home / ".bashrc").read_text()
            assert bashrc.count(ALIAS_MARKER) == 1
            assert 'alias ll="ls -alF"' in bashrc

    def test_aliases_with_latin1_bashrc(self, app_settings, fake_tools):
        bashrc = app_settings.paths.alias_homes[0] / ".bashrc"
        bashrc.write_bytes(b"# caf\xe9\nexport X=1\n")

        result = execute_step(BashAliasesStep(fake_tools), app_settings)

        assert result.ok
        content = bashrc.read_bytes()
        assert content.startswith(b"# caf\xe9\n")
        assert content.count(ALIAS_MARKER.encode()) == 1

    def test_aliases_ignore_missing_home(self, make_settings, fake_tools, tmp_path):
        settings = make_settings()
        missing = tmp_path / "no-such-home"
        settings = make_settings(
            paths=settings.paths.model_copy(update={"alias_homes": (missing,)})
        )
        assert execute_step(BashAliasesStep(fake_tools), settings).ok
        assert not missing.exists()


class TestFullRun:
    def test_all_steps_recorded(self, app_settings, fake_tools):
        report = _run_all(app_settings, fake_tools)

        assert report.state is RunState.COMPLETED
        assert report.names() == [cls.name for cls in DEFAULT_STEP_ORDER]
        assert report.failures == []

    def test_install_disabled_leaves_no_entry(self, make_settings, fake_tools):
        settings = make_settings(install_common_tools=False)

        report = _run_all(settings, fake_tools)

        assert report.get("install_tools") is None
        assert "install_tools" not in report.names()
        assert report.state is RunState.COMPLETED

    def test_fatal_update_failure_stops_everything(self, app_settings, fake_tools):
        fake_tools.apt.update.side_effect = FileNotFoundError(2, "missing", "apt-get")

        report = _run_all(app_settings, fake_tools)

        assert report.state is RunState.ABORTED
        assert report.names() == ["update_upgrade"]
        assert report.exit_code == 1
        assert not app_settings.paths.sysctl_conf.exists()

    def test_second_run_is_idempotent(self, app_settings, fake_tools, tmp_path):
        _run_all(app_settings, fake_tools)
        written = {
            path: path.read_text()
            for path in (
                app_settings.paths.sysctl_conf,
                app_settings.paths.limits_conf,
                app_settings.paths.journald_conf,
                app_settings.paths.auto_upgrades,
                app_settings.paths.fail2ban_jail,
            )
        }
        bashrcs = [home / ".bashrc" for home in app_settings.paths.alias_homes]
        first_bashrc = [b.read_text() for b in bashrcs]

        report = _run_all(app_settings, fake_tools)

        assert report.state is RunState.COMPLETED
        assert {p: p.read_text() for p in written} == written
        assert [b.read_text() for b in bashrcs] == first_bashrc
        assert _backups(tmp_path) == []
        assert all(not o.result.backups for o in report.entries)

    def test_failure_in_middle_keeps_going(self, app_settings, fake_tools):
        fake_tools.sysctl.reload.return_value = False

        report = _run_all(app_settings, fake_tools)

        assert report.state is RunState.COMPLETED
        assert [o.name for o in report.failures] == ["sysctl"]
        assert report.get("apt_cleanup").result.ok
        assert app_settings.paths.journald_conf.exists()

    def test_unapplied_steps_use_description(self, app_settings, fake_tools):
        fake_tools.ufw.is_available.return_value = False
        fake_tools.sysctl.reload.return_value = False

        report = _run_all(app_settings, fake_tools)

        firewall = report.get("firewall")
        assert firewall.result.status is StepStatus.SKIPPED
        assert firewall.label == FirewallStep.description
        assert report.get("sysctl").label == SysctlStep.description
        assert report.get("limits").label == "File descriptor limits raised"
