# tests/test_config_loader.py
# -*- coding: utf-8 -*-
"""
Tests for settings loading: defaults, environment, YAML file and overrides.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from workstation_init.config_loader import _deep_update, load_app_settings
from workstation_init.config_models import (
    COMMON_TOOLS_DEFAULT,
    AppSettings,
)


def test_defaults(tmp_path):
    settings = load_app_settings(tmp_path / "absent.yaml")

    assert settings.ssh_port == 22
    assert settings.journal_max == "200M"
    assert settings.enable_ufw is True
    assert settings.common_tools == COMMON_TOOLS_DEFAULT
    assert settings.sysctl.swappiness == 10
    assert settings.paths.journald_conf == Path(
        "/etc/systemd/journald.conf.d/size.conf"
    )


def test_settings_are_frozen():
    settings = AppSettings()
    with pytest.raises(ValidationError):
        settings.ssh_port = 2222


def test_yaml_file(tmp_path):
    config = tmp_path / "workstation-init.yaml"
    config.write_text(
        "ssh_port: 2222\n"
        "install_common_tools: false\n"
        "journal_max: 500M\n"
        "sysctl:\n"
        "  swappiness: 1\n"
        "common_tools: [git, htop]\n"
    )

    settings = load_app_settings(config)

    assert settings.ssh_port == 2222
    assert settings.install_common_tools is False
    assert settings.journal_max == "500M"
    assert settings.sysctl.swappiness == 1
    assert settings.sysctl.tcp_congestion == "bbr"
    assert settings.common_tools == ("git", "htop")


def test_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("WSINIT_SSH_PORT", "2200")
    monkeypatch.setenv("WSINIT_ENABLE_FSTRIM", "false")
    monkeypatch.setenv("WSINIT_SYSCTL__SWAPPINESS", "20")

    settings = load_app_settings(tmp_path / "absent.yaml")

    assert settings.ssh_port == 2200
    assert settings.enable_fstrim is False
    assert settings.sysctl.swappiness == 20


def test_precedence(monkeypatch, tmp_path):
    monkeypatch.setenv("WSINIT_SSH_PORT", "2200")
    monkeypatch.setenv("WSINIT_JOURNAL_MAX", "1G")
    config = tmp_path / "workstation-init.yaml"
    config.write_text("ssh_port: 2222\n")

    settings = load_app_settings(config, overrides={"ssh_port": 2022})

    assert settings.ssh_port == 2022
    assert settings.journal_max == "1G"


@pytest.mark.parametrize(
    "content",
    [
        "ssh_port: 70000\n",
        "ssh_port: 0\n",
        "journal_max: lots\n",
        "sysctl:\n  swappiness: 500\n",
    ],
)
def test_invalid_values_exit(tmp_path, content):
    config = tmp_path / "bad.yaml"
    config.write_text(content)

    with pytest.raises(SystemExit) as excinfo:
        load_app_settings(config)
    assert "Configuration error" in str(excinfo.value)


def test_unparseable_yaml_is_ignored(tmp_path):
    config = tmp_path / "broken.yaml"
    config.write_text("ssh_port: [2222\n")
    logger = MagicMock()

    settings = load_app_settings(config, current_logger=logger)

    assert settings.ssh_port == 22
    logger.warning.assert_called_once()


def test_non_mapping_yaml_is_ignored(tmp_path):
    config = tmp_path / "list.yaml"
    config.write_text("- ssh_port\n- 2222\n")
    logger = MagicMock()

    settings = load_app_settings(config, current_logger=logger)

    assert settings.ssh_port == 22
    logger.warning.assert_called_once()


def test_deep_update_merges_nested():
    source = {"sysctl": {"swappiness": 10, "tcp_congestion": "bbr"}, "ssh_port": 22}
    result = _deep_update(source, {"sysctl": {"swappiness": 1}, "ssh_port": None})

    assert result == {
        "sysctl": {"swappiness": 1, "tcp_congestion": "bbr"},
        "ssh_port": 22,
    }
