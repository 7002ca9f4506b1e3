# workstation_init/errors.py
# -*- coding: utf-8 -*-
"""Exception types raised during a workstation initialisation run."""


class WorkstationInitError(Exception):
    """Base class for all errors raised by this package."""


class FatalError(WorkstationInitError):
    """A failed precondition; the whole run must stop before further mutation."""


class StepError(WorkstationInitError):
    """A single step's action failed. Recorded, never propagated past the step."""


class BackupError(StepError):
    """A file that exists could not be copied aside, so it must not be overwritten."""
