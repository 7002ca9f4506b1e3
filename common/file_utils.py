# common/file_utils.py
# -*- coding: utf-8 -*-
"""
File system helpers used by steps that mutate configuration files:
timestamped backups, atomic whole-file replacement and marker-guarded appends.
"""

import datetime
import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path
from typing import NamedTuple, Optional

from workstation_init.config_models import SYMBOLS_DEFAULT, AppSettings
from workstation_init.errors import BackupError, StepError
from workstation_init.models import BackupRecord

from .command_utils import log_workstation

module_logger = logging.getLogger(__name__)

BACKUP_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


class WriteOutcome(NamedTuple):
    changed: bool
    backup: Optional[BackupRecord]


def _backup_path_for(file_path: Path, timestamp: str) -> Path:
    backup_path = file_path.with_name(f"{file_path.name}.bak.{timestamp}")
    counter = 1
    # Two overwrites inside the same second must not clobber the first copy.
    while backup_path.exists():
        backup_path = file_path.with_name(
            f"{file_path.name}.bak.{timestamp}.{counter}"
        )
        counter += 1
    return backup_path


def backup_file(
    file_path: Path,
    app_settings: Optional[AppSettings],
    current_logger: Optional[logging.Logger] = None,
    now: Optional[datetime.datetime] = None,
) -> Optional[BackupRecord]:
    """
    Copy an existing file to ``<path>.bak.<YYYYmmddHHMMSS>`` next to it.

    Content, permission bits and timestamps are preserved; ownership is
    preserved as well when running as root.

    Parameters:
        file_path (Path): The file about to be overwritten.
        app_settings (Optional[AppSettings]): Settings supplying log symbols.
        current_logger (Optional[logging.Logger]): Logger to use.
        now (Optional[datetime.datetime]): Timestamp to stamp the copy with.

    Returns:
        Optional[BackupRecord]: None when there is no regular file at
            `file_path`, otherwise the record of the copy made.

    Raises:
        BackupError: The file exists but could not be copied.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = (
        app_settings.symbols
        if app_settings and app_settings.symbols
        else SYMBOLS_DEFAULT
    )
    file_path = Path(file_path)

    if not file_path.is_file():
        log_workstation(
            f"{symbols.get('info', 'ℹ️')} File {file_path} does not exist. No backup needed.",
            "debug",
            logger_to_use,
            app_settings,
        )
        return None

    taken_at = now or datetime.datetime.now()
    backup_path = _backup_path_for(
        file_path, taken_at.strftime(BACKUP_TIMESTAMP_FORMAT)
    )
    try:
        shutil.copy2(file_path, backup_path)
        if os.geteuid() == 0:
            st = file_path.stat()
            os.chown(backup_path, st.st_uid, st.st_gid)
    except OSError as e:
        log_workstation(
            f"{symbols.get('error', '❌')} Failed to backup {file_path} to {backup_path}: {e}",
            "error",
            logger_to_use,
            app_settings,
        )
        raise BackupError(
            f"Could not back up {file_path} to {backup_path}: {e}"
        ) from e

    log_workstation(
        f"{symbols.get('success', '✅')} Backed up {file_path} to {backup_path}",
        "success",
        logger_to_use,
        app_settings,
    )
    return BackupRecord(file_path, backup_path, taken_at)


def write_managed_file(
    file_path: Path,
    content: str,
    app_settings: Optional[AppSettings],
    mode: int = 0o644,
    current_logger: Optional[logging.Logger] = None,
) -> WriteOutcome:
    """
    Replace a file wholesale, backing up the previous version first.

    The new content is written to a temporary file in the same directory and
    moved over the target with ``os.replace``, so readers never observe a
    partial file. An existing target keeps its permission bits and, when
    running as root, its owner; `mode` only applies to newly created files.
    When the target already holds exactly `content` nothing is written and no
    backup is made. Missing parent directories are created.

    Raises:
        BackupError: The existing file could not be backed up; the target is
            left untouched.
        StepError: The new content could not be written.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = (
        app_settings.symbols
        if app_settings and app_settings.symbols
        else SYMBOLS_DEFAULT
    )
    file_path = Path(file_path)

    if file_path.is_file():
        try:
            current = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            current = None
        if current == content:
            log_workstation(
                f"{symbols.get('info', 'ℹ️')} No change needed: {file_path}",
                "info",
                logger_to_use,
                app_settings,
            )
            return WriteOutcome(False, None)

    previous_stat = file_path.stat() if file_path.is_file() else None
    backup = backup_file(file_path, app_settings, logger_to_use)

    tmp_name = None
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        if previous_stat is not None:
            os.chmod(tmp_name, stat.S_IMODE(previous_stat.st_mode))
            if os.geteuid() == 0:
                os.chown(tmp_name, previous_stat.st_uid, previous_stat.st_gid)
        else:
            os.chmod(tmp_name, mode)
        os.replace(tmp_name, file_path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        log_workstation(
            f"{symbols.get('error', '❌')} Failed to write {file_path}: {e}",
            "error",
            logger_to_use,
            app_settings,
        )
        raise StepError(f"Could not write {file_path}: {e}") from e

    log_workstation(
        f"{symbols.get('success', '✅')} Wrote {file_path}",
        "success",
        logger_to_use,
        app_settings,
    )
    return WriteOutcome(True, backup)


def append_marked_block(
    file_path: Path,
    marker: str,
    block: str,
    app_settings: Optional[AppSettings],
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Append `block` to a file unless a line containing `marker` is already there.

    `block` must itself contain `marker`, otherwise a second call would append
    again. The file is created if missing.

    Returns:
        bool: True when the block was appended, False when it was already present.

    Raises:
        StepError: The file could not be read or appended to.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = (
        app_settings.symbols
        if app_settings and app_settings.symbols
        else SYMBOLS_DEFAULT
    )
    if marker not in block:
        raise ValueError(f"Block does not contain its marker '{marker}'")
    file_path = Path(file_path)

    try:
        # Compared as bytes; the file need not be valid UTF-8.
        current = file_path.read_bytes() if file_path.exists() else b""
        if marker.encode("utf-8") in current:
            log_workstation(
                f"{symbols.get('info', 'ℹ️')} Block already present in {file_path}",
                "info",
                logger_to_use,
                app_settings,
            )
            return False
        with open(file_path, "ab") as fh:
            fh.write(("\n" + block.strip("\n") + "\n").encode("utf-8"))
    except OSError as e:
        raise StepError(f"Could not append to {file_path}: {e}") from e

    log_workstation(
        f"{symbols.get('success', '✅')} Appended block to {file_path}",
        "success",
        logger_to_use,
        app_settings,
    )
    return True
