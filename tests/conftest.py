# tests/conftest.py
import os
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from common.debian.apt_manager import AptManager
from common.fail2ban_manager import Fail2banManager
from common.system_utils import SysctlManager, SystemdManager
from common.ufw_manager import UfwManager
from workstation_init.config_models import AppSettings, PathSettings
from workstation_init.host_tools import HostTools


@pytest.fixture(autouse=True)
def clean_wsinit_env(monkeypatch):
    """Keep WSINIT_* variables of the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("WSINIT_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def test_paths(tmp_path: Path) -> PathSettings:
    """Every managed file redirected below tmp_path."""
    root_home = tmp_path / "root"
    skel = tmp_path / "etc" / "skel"
    root_home.mkdir(parents=True)
    skel.mkdir(parents=True)
    return PathSettings(
        auto_upgrades=tmp_path / "etc/apt/apt.conf.d/20auto-upgrades",
        sysctl_conf=tmp_path / "etc/sysctl.d/99-tuning.conf",
        limits_conf=tmp_path / "etc/security/limits.d/99-nofile.conf",
        journald_conf=tmp_path / "etc/systemd/journald.conf.d/size.conf",
        fail2ban_jail=tmp_path / "etc/fail2ban/jail.local",
        alias_homes=(root_home, skel),
        os_release=tmp_path / "etc/os-release",
    )


@pytest.fixture
def make_settings(test_paths):
    """Factory building AppSettings on top of the tmp_path layout."""

    def _make(**overrides) -> AppSettings:
        overrides.setdefault("paths", test_paths)
        return AppSettings(**overrides)

    return _make


@pytest.fixture
def app_settings(make_settings) -> AppSettings:
    return make_settings()


@pytest.fixture
def fake_tools() -> HostTools:
    """HostTools whose adapters all report success and never touch the host."""
    apt = MagicMock(spec=AptManager)
    for method in ("update", "dist_upgrade", "install", "autoremove", "autoclean"):
        getattr(apt, method).return_value = True
    apt.is_installed.return_value = False

    systemd = MagicMock(spec=SystemdManager)
    for method in ("enable", "start", "restart", "is_enabled", "is_active"):
        getattr(systemd, method).return_value = True

    ufw = MagicMock(spec=UfwManager)
    for method in ("is_available", "reset", "default_policy", "allow", "enable"):
        getattr(ufw, method).return_value = True

    sysctl = MagicMock(spec=SysctlManager)
    sysctl.reload.return_value = True

    fail2ban = MagicMock(spec=Fail2banManager)
    fail2ban.is_installed.return_value = True
    fail2ban.reload.return_value = True

    return HostTools(
        apt=apt, systemd=systemd, ufw=ufw, sysctl=sysctl, fail2ban=fail2ban
    )
