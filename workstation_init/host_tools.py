# workstation_init/host_tools.py
# -*- coding: utf-8 -*-
"""
The bundle of host collaborators handed to every step.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from common.debian.apt_manager import AptManager
from common.fail2ban_manager import Fail2banManager
from common.system_utils import SysctlManager, SystemdManager
from common.ufw_manager import UfwManager


@dataclass(frozen=True)
class HostTools:
    apt: AptManager
    systemd: SystemdManager
    ufw: UfwManager
    sysctl: SysctlManager
    fail2ban: Fail2banManager

    @classmethod
    def default(cls, logger: Optional[logging.Logger] = None) -> "HostTools":
        """Adapters that talk to the real apt-get, systemctl, ufw, sysctl and dpkg."""
        apt = AptManager(logger)
        systemd = SystemdManager(logger)
        return cls(
            apt=apt,
            systemd=systemd,
            ufw=UfwManager(logger),
            sysctl=SysctlManager(logger),
            fail2ban=Fail2banManager(apt, systemd, logger),
        )
