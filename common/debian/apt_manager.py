# common/debian/apt_manager.py
# -*- coding: utf-8 -*-
import logging
import subprocess
from typing import List, Optional, Union

from common.command_utils import run_command
from workstation_init.config_models import AppSettings

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


class AptManager:
    """
    Wrapper around the apt-get/dpkg command-line tools.

    Every method logs what it does. Mutating methods return True/False and
    only raise when asked to via ``raise_error``.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initializes the AptManager.
        Args:
            logger: An optional logging object.
        """
        self.logger = logger or logging.getLogger(__name__)

    def _apt_get(
        self,
        args: List[str],
        app_settings: AppSettings,
        description: str,
        raise_error: bool = False,
    ) -> bool:
        try:
            run_command(
                ["apt-get"] + args,
                app_settings,
                current_logger=self.logger,
                env=APT_ENV,
            )
            return True
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            self.logger.error(f"Failed to {description}: {e}")
            if raise_error:
                raise
            return False

    def update(
        self, app_settings: AppSettings, raise_error: bool = False
    ) -> bool:
        """
        Updates the list of available packages using 'apt-get update'.

        Args:
            app_settings: The application settings.
            raise_error: Whether to raise an exception on failure.

        Returns:
            True if successful, False otherwise.
        """
        self.logger.info("Updating apt package lists via 'apt-get update'...")
        if not self._apt_get(
            ["update", "-y"], app_settings, "update apt cache", raise_error
        ):
            return False
        self.logger.info("Apt package lists updated successfully.")
        return True

    def dist_upgrade(
        self, app_settings: AppSettings, raise_error: bool = False
    ) -> bool:
        """Upgrades every installed package with 'apt-get dist-upgrade'."""
        self.logger.info("Upgrading installed packages via 'apt-get dist-upgrade'...")
        if not self._apt_get(
            ["dist-upgrade", "-y"],
            app_settings,
            "upgrade packages",
            raise_error,
        ):
            return False
        self.logger.info("Packages upgraded successfully.")
        return True

    def is_installed(self, package_name: str, app_settings: AppSettings) -> bool:
        """True when dpkg reports the package as installed."""
        try:
            result = run_command(
                ["dpkg-query", "-W", "-f=${db:Status-Status}", package_name],
                app_settings,
                check=False,
                capture_output=True,
                current_logger=self.logger,
            )
        except FileNotFoundError:
            self.logger.warning(
                f"dpkg-query not found; assuming '{package_name}' is not installed."
            )
            return False
        return result.returncode == 0 and result.stdout.strip() == "installed"

    def install(
        self,
        packages: Union[List[str], str],
        app_settings: AppSettings,
    ) -> bool:
        """
        Installs one or more packages using 'apt-get install'.

        Packages dpkg already reports as installed are left out of the
        apt-get call; when nothing remains, no call is made.

        Args:
            packages: A single package name or a list of package names.
            app_settings: The application settings.

        Returns:
            True if successful, False otherwise.
        """
        if isinstance(packages, str):
            packages = [packages]

        packages_to_install = []
        for pkg_name in packages:
            if self.is_installed(pkg_name, app_settings):
                self.logger.info(
                    f"Package '{pkg_name}' is already installed. Skipping."
                )
            else:
                self.logger.info(
                    f"Marking package for installation: {pkg_name}"
                )
                packages_to_install.append(pkg_name)

        if not packages_to_install:
            self.logger.info("All requested packages are already installed.")
            return True

        self.logger.info(
            f"Committing installation for: {', '.join(packages_to_install)}"
        )
        if not self._apt_get(
            ["install", "-y"] + packages_to_install,
            app_settings,
            "install packages",
        ):
            return False
        self.logger.info("Packages installed successfully.")
        return True

    def autoremove(self, app_settings: AppSettings) -> bool:
        """Removes packages that are no longer required."""
        self.logger.info("Removing unused packages via 'apt-get autoremove'...")
        return self._apt_get(
            ["autoremove", "-y"], app_settings, "autoremove packages"
        )

    def autoclean(self, app_settings: AppSettings) -> bool:
        """Clears out obsolete package files from the local cache."""
        self.logger.info("Cleaning apt cache via 'apt-get autoclean'...")
        return self._apt_get(
            ["autoclean", "-y"], app_settings, "autoclean apt cache"
        )
