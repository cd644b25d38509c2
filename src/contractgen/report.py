"""
Generation report.

Collects the per-target outcomes of one orchestrator run and renders them as
human-readable lines, a process exit code, or a pandas DataFrame for CSV/JSON
export.

Exit codes:
- 0: every requested target succeeded (feature warnings allowed)
- 1: every target failed, or loading/normalization/config-file failed
- 2: partial success
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd

from contractgen.constants import (
    EXIT_FAILURE,
    EXIT_PARTIAL,
    EXIT_SUCCESS,
    STATE_DONE,
    STATE_FAILED,
    STATE_IDLE,
    STATUS_PENDING,
    STATUS_SUCCEEDED,
    STATUS_TIMED_OUT,
)
from contractgen.schemas.contract import FeatureWarning, PublishablePackage

REPORT_COLUMNS = [
    "target",
    "status",
    "reason",
    "warnings",
    "package",
    "version",
    "path",
    "files",
    "duration_seconds",
]


@dataclass
class TargetOutcome:
    """
    Result of one target task.

    Attributes:
        target: Canonical target name.
        status: PENDING, EMITTING, ASSEMBLING, SUCCEEDED, FAILED or TIMED_OUT.
        reason: Failure message (None on success).
        warnings: FeatureWarnings raised while emitting.
        config_warnings: Ignored-option messages from the TargetConfig.
        package: Assembled package (success only).
        duration_seconds: Wall time from task start to completion.
    """

    target: str
    status: str = STATUS_PENDING
    reason: Optional[str] = None
    warnings: Tuple[FeatureWarning, ...] = ()
    config_warnings: Tuple[str, ...] = ()
    package: Optional[PublishablePackage] = None
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status == STATUS_SUCCEEDED

    @property
    def warning_count(self) -> int:
        return len(self.warnings) + len(self.config_warnings)

    def line(self) -> str:
        if self.succeeded:
            if self.warning_count:
                noun = "warning" if self.warning_count == 1 else "warnings"
                return f"{self.target}: partial: {self.warning_count} {noun}"
            return f"{self.target}: success"
        if self.status == STATUS_TIMED_OUT:
            return f"{self.target}: failed: {self.reason or 'timed out'}"
        return f"{self.target}: failed: {self.reason or self.status.lower()}"

    def to_dict(self) -> Dict[str, object]:
        return {
            "target": self.target,
            "status": self.status,
            "reason": self.reason,
            "warnings": self.warning_count,
            "package": self.package.name if self.package else None,
            "version": self.package.version if self.package else None,
            "path": str(self.package.path) if self.package else None,
            "files": len(self.package.files) if self.package else 0,
            "duration_seconds": round(self.duration_seconds, 3),
        }


@dataclass
class GenerationReport:
    """
    Outcome of one orchestrator run.

    ``outcomes`` keeps the requested target order. ``error`` is set only when
    the run failed before any target started (load, normalize or config file).
    """

    state: str = STATE_IDLE
    outcomes: Dict[str, TargetOutcome] = field(default_factory=dict)
    error: Optional[str] = None
    fingerprint: Optional[str] = None

    @property
    def succeeded(self) -> List[str]:
        return [t for t, o in self.outcomes.items() if o.succeeded]

    @property
    def failed(self) -> List[str]:
        return [t for t, o in self.outcomes.items() if not o.succeeded]

    @property
    def warnings(self) -> List[FeatureWarning]:
        return [w for o in self.outcomes.values() for w in o.warnings]

    def exit_code(self) -> int:
        if self.error is not None or not self.succeeded:
            return EXIT_FAILURE
        if self.failed:
            return EXIT_PARTIAL
        return EXIT_SUCCESS

    def lines(self) -> List[str]:
        """One line per target plus an aggregate status line."""
        if self.error is not None:
            return [f"error: {self.error}", f"overall: {STATE_FAILED.lower()}"]
        lines = [outcome.line() for outcome in self.outcomes.values()]
        total = len(self.outcomes)
        warned = sum(o.warning_count for o in self.outcomes.values())
        state = STATE_DONE if self.succeeded else STATE_FAILED
        lines.append(
            f"overall: {state.lower()} ({len(self.succeeded)}/{total} targets succeeded, {warned} warnings)"
        )
        return lines

    def to_frame(self) -> pd.DataFrame:
        """One row per target."""
        rows = [o.to_dict() for o in self.outcomes.values()]
        return pd.DataFrame(rows, columns=REPORT_COLUMNS)

    def write(self, path: Path) -> Path:
        """Write the per-target table as JSON (``.json``) or CSV (anything else)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        frame = self.to_frame()
        if path.suffix.lower() == ".json":
            frame.to_json(path, orient="records", indent=2)
        else:
            frame.to_csv(path, index=False)
        return path


__all__ = ["REPORT_COLUMNS", "TargetOutcome", "GenerationReport"]
