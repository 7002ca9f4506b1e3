# workstation_init/config_models.py
# -*- coding: utf-8 -*-
"""
Pydantic models for the workstation initialisation settings.

This module defines every knob a run understands: which steps are enabled,
the tunable values they write, the packages to install and the well-known
file paths they touch. The settings object is frozen; it is built once by
the config loader and then handed to the orchestrator and every step.
"""

from pathlib import Path
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Default Static Values (can be overridden by config file/env/cli) ---
SSH_PORT_DEFAULT: int = 22
JOURNAL_MAX_DEFAULT: str = "200M"
LOG_PREFIX_DEFAULT: str = "[WS-INIT]"

SWAPPINESS_DEFAULT: int = 10
VFS_CACHE_PRESSURE_DEFAULT: int = 50
TCP_CONGESTION_DEFAULT: str = "bbr"
DEFAULT_QDISC_DEFAULT: str = "fq"

COMMON_TOOLS_DEFAULT: Tuple[str, ...] = (
    "build-essential", "curl", "wget", "git", "vim", "nano", "neovim",
    "htop", "iotop", "iftop", "nload", "sysstat", "bmon",
    "net-tools", "iperf3", "traceroute", "mtr-tiny", "nmap",
    "openssh-server",
    "ufw", "fail2ban",
    "unzip", "zip", "p7zip-full",
    "software-properties-common", "ca-certificates", "gnupg", "lsb-release",
)

SYMBOLS_DEFAULT: Dict[str, str] = {
    "success": "✅", "error": "❌", "warning": "⚠️", "info": "ℹ️",
    "step": "➡️", "gear": "⚙️", "package": "📦", "rocket": "🚀",
    "sparkles": "✨", "critical": "🔥", "debug": "🐛", "skip": "⏭️",
}


class SysctlSettings(BaseModel):
    """Kernel VM and network stack tunables."""
    model_config = ConfigDict(frozen=True)

    swappiness: int = Field(default=SWAPPINESS_DEFAULT, ge=0, le=200,
                            description="vm.swappiness; lower prefers RAM.")
    vfs_cache_pressure: int = Field(default=VFS_CACHE_PRESSURE_DEFAULT, ge=0,
                                    description="vm.vfs_cache_pressure; lower keeps inode/dentry cache longer.")
    tcp_congestion: str = Field(default=TCP_CONGESTION_DEFAULT, min_length=1,
                                description="net.ipv4.tcp_congestion_control algorithm.")
    default_qdisc: str = Field(default=DEFAULT_QDISC_DEFAULT, min_length=1,
                               description="net.core.default_qdisc queueing discipline.")


class Fail2banSettings(BaseModel):
    """Values for the basic SSH jail."""
    model_config = ConfigDict(frozen=True)

    bantime: str = Field(default="1h", description="How long a host stays banned.")
    findtime: str = Field(default="10m", description="Window in which failures are counted.")
    maxretry: int = Field(default=5, ge=1, description="Failures before a ban.")
    backend: str = Field(default="systemd", description="Log backend fail2ban reads from.")


class PathSettings(BaseModel):
    """Well-known files and directories the steps write to."""
    model_config = ConfigDict(frozen=True)

    auto_upgrades: Path = Path("/etc/apt/apt.conf.d/20auto-upgrades")
    sysctl_conf: Path = Path("/etc/sysctl.d/99-tuning.conf")
    limits_conf: Path = Path("/etc/security/limits.d/99-nofile.conf")
    journald_conf: Path = Path("/etc/systemd/journald.conf.d/size.conf")
    fail2ban_jail: Path = Path("/etc/fail2ban/jail.local")
    alias_homes: Tuple[Path, ...] = (Path("/root"), Path("/etc/skel"))
    os_release: Path = Path("/etc/os-release")


class AppSettings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_prefix="WSINIT_",
        env_nested_delimiter="__",
        extra="ignore",
        frozen=True,
    )

    # Step toggles
    enable_ufw: bool = Field(default=True, description="Configure the UFW firewall.")
    allow_ssh: bool = Field(default=True, description="Allow SSH through UFW.")
    enable_unattended: bool = Field(default=True, description="Enable unattended security upgrades.")
    install_common_tools: bool = Field(default=True, description="Install the common tool set.")
    tune_sysctl: bool = Field(default=True, description="Write the sysctl tuning drop-in.")
    tune_limits: bool = Field(default=True, description="Raise file descriptor limits.")
    tune_journal: bool = Field(default=True, description="Cap the systemd journal size.")
    enable_fstrim: bool = Field(default=True, description="Enable the weekly fstrim.timer.")
    set_bash_aliases: bool = Field(default=True, description="Append the alias block to .bashrc files.")
    configure_fail2ban: bool = Field(default=True,
                                     description="Write the SSH jail when fail2ban is installed.")
    cleanup_apt: bool = Field(default=True, description="Run apt autoremove and autoclean.")

    # Tunable values
    ssh_port: int = Field(default=SSH_PORT_DEFAULT, ge=1, le=65535,
                          description="SSH port allowed through UFW and watched by fail2ban.")
    journal_max: str = Field(default=JOURNAL_MAX_DEFAULT, pattern=r"^\d+[KMGT]?$",
                             description="journald SystemMaxUse value, e.g. 200M.")
    common_tools: Tuple[str, ...] = Field(default=COMMON_TOOLS_DEFAULT,
                                          description="Packages installed by the bulk install step.")

    sysctl: SysctlSettings = Field(default_factory=SysctlSettings)
    fail2ban: Fail2banSettings = Field(default_factory=Fail2banSettings)
    paths: PathSettings = Field(default_factory=PathSettings)

    log_prefix: str = Field(default=LOG_PREFIX_DEFAULT,
                            description="Prefix for console log lines.")
    symbols: Dict[str, str] = Field(default_factory=lambda: dict(SYMBOLS_DEFAULT))
