# common/ufw_manager.py
# -*- coding: utf-8 -*-
"""
Thin adapter over the ufw command line.
"""

import logging
import subprocess
from typing import List, Optional

from common.command_utils import command_exists, run_command
from workstation_init.config_models import AppSettings


class UfwManager:
    """Reset, set policies, add allow rules and enable UFW."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def is_available(self) -> bool:
        return command_exists("ufw")

    def _ufw(self, args: List[str], app_settings: AppSettings) -> bool:
        try:
            run_command(
                ["ufw"] + args,
                app_settings,
                current_logger=self.logger,
            )
            return True
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            self.logger.error(f"UFW command failed: {e}")
            return False

    def reset(self, app_settings: AppSettings) -> bool:
        """Drop every existing rule so re-applying never duplicates them."""
        return self._ufw(["--force", "reset"], app_settings)

    def default_policy(
        self, policy: str, direction: str, app_settings: AppSettings
    ) -> bool:
        return self._ufw(["default", policy, direction], app_settings)

    def allow(self, rule: str, app_settings: AppSettings) -> bool:
        """Allow a port/protocol rule such as ``22/tcp``."""
        self.logger.info(f"Allowing {rule} via UFW...")
        return self._ufw(["allow", rule], app_settings)

    def enable(self, app_settings: AppSettings) -> bool:
        return self._ufw(["--force", "enable"], app_settings)
