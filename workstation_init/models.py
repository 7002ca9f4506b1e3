# workstation_init/models.py
# -*- coding: utf-8 -*-
"""
Result records produced while steps run.

A step returns a StepResult; the orchestrator wraps it into a StepOutcome and
appends it to the RunReport it owns. BackupRecord describes a copy made
before an overwrite and exists purely for manual rollback.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


class StepStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    SKIPPED = "SKIPPED"


class RunState(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    ABORTED = "ABORTED"


@dataclass(frozen=True)
class BackupRecord:
    original_path: Path
    backup_path: Path
    timestamp: datetime

    def to_dict(self) -> Dict[str, str]:
        return {
            "original_path": str(self.original_path),
            "backup_path": str(self.backup_path),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class StepResult:
    """Outcome of a single step's action."""

    status: StepStatus
    reason: str = ""
    backups: Tuple[BackupRecord, ...] = ()

    @classmethod
    def success(
        cls, reason: str = "", backups: Tuple[BackupRecord, ...] = ()
    ) -> "StepResult":
        return cls(StepStatus.SUCCESS, reason, tuple(backups))

    @classmethod
    def failure(
        cls, reason: str, backups: Tuple[BackupRecord, ...] = ()
    ) -> "StepResult":
        return cls(StepStatus.FAILURE, reason, tuple(backups))

    @classmethod
    def skipped(cls, reason: str) -> "StepResult":
        return cls(StepStatus.SKIPPED, reason)

    @property
    def ok(self) -> bool:
        return self.status is StepStatus.SUCCESS


@dataclass(frozen=True)
class StepOutcome:
    """One RunReport entry: which step ran, how it described itself, and what happened."""

    name: str
    label: str
    result: StepResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "status": self.result.status.value,
            "reason": self.result.reason,
            "backups": [b.to_dict() for b in self.result.backups],
        }


@dataclass
class RunReport:
    """
    Ordered record of every step that was attempted in a run.

    Only the orchestrator appends; once the run leaves the RUNNING state the
    report is sealed and further appends raise.
    """

    state: RunState = RunState.NOT_STARTED
    abort_reason: Optional[str] = None
    _entries: List[StepOutcome] = field(default_factory=list)

    @property
    def entries(self) -> Tuple[StepOutcome, ...]:
        return tuple(self._entries)

    def record(self, outcome: StepOutcome) -> None:
        if self.state is not RunState.RUNNING:
            raise RuntimeError(
                f"Cannot record step '{outcome.name}' while run is {self.state.value}"
            )
        self._entries.append(outcome)

    def get(self, name: str) -> Optional[StepOutcome]:
        for outcome in self._entries:
            if outcome.name == name:
                return outcome
        return None

    def names(self) -> List[str]:
        return [outcome.name for outcome in self._entries]

    @property
    def failures(self) -> List[StepOutcome]:
        return [
            o for o in self._entries if o.result.status is StepStatus.FAILURE
        ]

    @property
    def exit_code(self) -> int:
        """0 only when no fatal precondition failed."""
        return 0 if self.state is RunState.COMPLETED else 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "abort_reason": self.abort_reason,
            "steps": [o.to_dict() for o in self._entries],
        }
