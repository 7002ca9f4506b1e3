# common/fail2ban_manager.py
# -*- coding: utf-8 -*-
"""
Presence check and reload for the fail2ban intrusion-prevention service.
"""

import logging
from typing import Optional

from common.debian.apt_manager import AptManager
from common.system_utils import SystemdManager
from workstation_init.config_models import AppSettings

FAIL2BAN_PACKAGE = "fail2ban"
FAIL2BAN_UNIT = "fail2ban"


class Fail2banManager:
    def __init__(
        self,
        apt: Optional[AptManager] = None,
        systemd: Optional[SystemdManager] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.apt = apt or AptManager(self.logger)
        self.systemd = systemd or SystemdManager(self.logger)

    def is_installed(self, app_settings: AppSettings) -> bool:
        return self.apt.is_installed(FAIL2BAN_PACKAGE, app_settings)

    def reload(self, app_settings: AppSettings) -> bool:
        """Enable the service and restart it so a new jail.local is picked up."""
        if not self.systemd.enable(FAIL2BAN_UNIT, app_settings):
            return False
        return self.systemd.restart(FAIL2BAN_UNIT, app_settings)
