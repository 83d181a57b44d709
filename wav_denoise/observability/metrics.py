"""Run summary counters and reporting.

Provides RunSummary for the processed/skipped tally, StageTimer for
measuring individual service calls, and log_run_summary() for emitting
the counters as a structured JSON line to stderr.
"""

from __future__ import annotations

import json
import sys
import time
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Literal

Outcome = Literal["processed", "rejected", "failed"]


@dataclass
class RunSummary:
    """Terminal-outcome counts for one run.

    Rejected and failed files are both reported as skipped.
    """

    processed: int = 0
    rejected: int = 0
    failed: int = 0
    wall_time_seconds: float = 0.0

    @property
    def skipped(self) -> int:
        return self.rejected + self.failed

    @property
    def total(self) -> int:
        return self.processed + self.skipped

    def record(self, status: Outcome) -> None:
        """Count one file's terminal outcome."""
        if status == "processed":
            self.processed += 1
        elif status == "rejected":
            self.rejected += 1
        elif status == "failed":
            self.failed += 1
        else:
            raise ValueError(f"Unknown outcome: '{status}'")

    def summary_line(self) -> str:
        return (
            f"Denoising complete: {self.processed} files processed, "
            f"{self.skipped} skipped."
        )


class StageTimer:
    """Context manager that records the wall-clock duration of a step.

    Usage:
        timer = StageTimer("submit")
        with timer:
            do_work()
        print(timer.duration_seconds)
    """

    def __init__(self, stage_name: str) -> None:
        self.stage_name = stage_name
        self.duration_seconds: float = 0.0
        self._mono_start: float = 0.0

    def __enter__(self) -> StageTimer:
        self._mono_start = time.monotonic()
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.duration_seconds = time.monotonic() - self._mono_start


def log_run_summary(summary: RunSummary) -> None:
    """Emit run counters as a single structured JSON line to stderr.

    Stdout is reserved for the human-readable summary line.

    Args:
        summary: Completed RunSummary.
    """
    entry = {
        "timestamp": datetime.now(UTC).isoformat(),
        "severity": "INFO",
        "metric_type": "run_completion",
        **asdict(summary),
        "skipped": summary.skipped,
    }
    print(json.dumps(entry), file=sys.stderr)
