# common/system_utils.py
# -*- coding: utf-8 -*-
"""
System-level helpers for the workstation initialisation run.

This module includes the privilege check, Ubuntu codename detection and the
thin adapters around systemctl and sysctl.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Callable, Optional

from common.command_utils import log_workstation, run_command
from workstation_init.config_models import SYMBOLS_DEFAULT, AppSettings
from workstation_init.errors import FatalError

module_logger = logging.getLogger(__name__)

CODENAME_DEFAULT = "noble"


def check_privilege(geteuid: Callable[[], int] = os.geteuid) -> None:
    """
    Make sure the process runs with administrative rights.

    Raises:
        FatalError: When the effective user id is not 0.
    """
    if geteuid() != 0:
        raise FatalError(
            "Administrative privileges are required. Please run as root (use: sudo workstation-init)"
        )


def get_ubuntu_codename(
    os_release_path: Path = Path("/etc/os-release"),
    app_settings: Optional[AppSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> str:
    """
    Read the release codename from os-release.

    UBUNTU_CODENAME wins over VERSION_CODENAME; when neither is present, or
    the file cannot be read, the default "noble" is returned.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = (
        app_settings.symbols
        if app_settings and app_settings.symbols
        else SYMBOLS_DEFAULT
    )
    info = {}
    try:
        with open(os_release_path, encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if "=" in line and not line.startswith("#"):
                    key, _, val = line.partition("=")
                    info[key] = val.strip().strip('"')
    except OSError as e:
        log_workstation(
            f"{symbols.get('warning', '!')} Could not read {os_release_path}: {e}. Assuming '{CODENAME_DEFAULT}'.",
            "warning",
            logger_to_use,
            app_settings,
        )
        return CODENAME_DEFAULT

    return (
        info.get("UBUNTU_CODENAME")
        or info.get("VERSION_CODENAME")
        or CODENAME_DEFAULT
    )


class SystemdManager:
    """Enable, start and restart units through systemctl."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def _query(self, verb: str, unit: str, app_settings: AppSettings) -> bool:
        try:
            result = run_command(
                ["systemctl", verb, "--quiet", unit],
                app_settings,
                check=False,
                current_logger=self.logger,
            )
        except FileNotFoundError:
            return False
        return result.returncode == 0

    def is_enabled(self, unit: str, app_settings: AppSettings) -> bool:
        return self._query("is-enabled", unit, app_settings)

    def is_active(self, unit: str, app_settings: AppSettings) -> bool:
        return self._query("is-active", unit, app_settings)

    def _systemctl(self, verb: str, unit: str, app_settings: AppSettings) -> bool:
        try:
            run_command(
                ["systemctl", verb, unit],
                app_settings,
                current_logger=self.logger,
            )
            return True
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            self.logger.error(f"Failed to {verb} {unit}: {e}")
            return False

    def enable(self, unit: str, app_settings: AppSettings) -> bool:
        """Enable `unit`; an already enabled unit counts as success."""
        if self.is_enabled(unit, app_settings):
            self.logger.info(f"Unit '{unit}' is already enabled.")
            return True
        return self._systemctl("enable", unit, app_settings)

    def start(self, unit: str, app_settings: AppSettings) -> bool:
        """Start `unit`; an already running unit counts as success."""
        if self.is_active(unit, app_settings):
            self.logger.info(f"Unit '{unit}' is already running.")
            return True
        return self._systemctl("start", unit, app_settings)

    def restart(self, unit: str, app_settings: AppSettings) -> bool:
        return self._systemctl("restart", unit, app_settings)


class SysctlManager:
    """Applies kernel tunables from every sysctl configuration file."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def reload(self, app_settings: AppSettings) -> bool:
        """Run `sysctl --system`, re-reading all drop-in directories."""
        try:
            run_command(
                ["sysctl", "--system"],
                app_settings,
                current_logger=self.logger,
            )
            return True
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            self.logger.error(f"Failed to apply sysctl settings: {e}")
            return False
