# workstation_init/reporter.py
# -*- coding: utf-8 -*-
"""
Renders a finished RunReport.

The text summary and the JSON file are both pure projections of the report:
nothing here decides whether a step succeeded.
"""

import json
from pathlib import Path
from typing import List, Union

from workstation_init.models import RunReport, RunState, StepStatus

STATUS_TAGS = {
    StepStatus.SUCCESS: "OK",
    StepStatus.FAILURE: "FAILED",
    StepStatus.SKIPPED: "SKIPPED",
}

REBOOT_NOTICE = "Reboot is recommended to ensure all settings take full effect."


def render_summary(report: RunReport) -> str:
    """Human-readable enumeration of every recorded step outcome."""
    lines: List[str] = []
    if report.state is RunState.ABORTED:
        lines.append(f"Run aborted: {report.abort_reason}")
        lines.append("Steps attempted before the abort:")
    else:
        lines.append("All done! Summary of applied steps:")

    if not report.entries:
        lines.append("  (no steps were executed)")

    for outcome in report.entries:
        result = outcome.result
        line = f"  - [{STATUS_TAGS[result.status]}] {outcome.label}"
        if result.status is not StepStatus.SUCCESS and result.reason:
            line += f": {result.reason}"
        lines.append(line)
        for backup in result.backups:
            lines.append(f"      backup of {backup.original_path}: {backup.backup_path}")

    failures = report.failures
    if failures:
        lines.append("")
        lines.append(
            f"{len(failures)} step(s) failed: {', '.join(o.name for o in failures)}"
        )

    if report.state is RunState.COMPLETED:
        lines.append("")
        lines.append(REBOOT_NOTICE)
    return "\n".join(lines)


def write_report_json(report: RunReport, path: Union[str, Path]) -> Path:
    """Write the report as JSON for machine consumption."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(report.to_dict(), fh, indent=2)
        fh.write("\n")
    return path
