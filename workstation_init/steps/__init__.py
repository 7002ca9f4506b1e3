"""
The concrete configuration steps and their fixed execution order.
"""

import logging
from typing import List, Optional

from workstation_init.base_step import BaseStep
from workstation_init.host_tools import HostTools
from workstation_init.steps.desktop import BashAliasesStep, FstrimStep
from workstation_init.steps.packages import (
    AptCleanupStep,
    InstallToolsStep,
    UnattendedUpgradesStep,
    UpdateUpgradeStep,
)
from workstation_init.steps.security import Fail2banStep, FirewallStep
from workstation_init.steps.tuning import JournalStep, LimitsStep, SysctlStep

# Package installation comes before anything that configures an installed
# tool; cleanup runs last.
DEFAULT_STEP_ORDER = [
    UpdateUpgradeStep,
    InstallToolsStep,
    FirewallStep,
    UnattendedUpgradesStep,
    SysctlStep,
    LimitsStep,
    JournalStep,
    FstrimStep,
    BashAliasesStep,
    Fail2banStep,
    AptCleanupStep,
]


def build_default_steps(
    tools: HostTools, logger: Optional[logging.Logger] = None
) -> List[BaseStep]:
    """Instantiate every step, in execution order, sharing the given tools."""
    return [step_class(tools, logger) for step_class in DEFAULT_STEP_ORDER]


__all__ = [
    "DEFAULT_STEP_ORDER",
    "build_default_steps",
    "AptCleanupStep",
    "BashAliasesStep",
    "Fail2banStep",
    "FirewallStep",
    "FstrimStep",
    "InstallToolsStep",
    "JournalStep",
    "LimitsStep",
    "SysctlStep",
    "UnattendedUpgradesStep",
    "UpdateUpgradeStep",
]
