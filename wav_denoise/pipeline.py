"""run_denoise_batch() orchestrator for the WAV denoising tool.

Orchestrates, per discovered file: walk -> validate -> mirror output path
-> create output directories -> submit to the denoising service -> count.

Setup failures (input root, output root) raise and abort the run. Every
per-file failure is logged, counted as skipped, and processing moves on
to the next file.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass

from wav_denoise.audio.walker import FileCandidate, iter_wav_files, mirror_output_path
from wav_denoise.audio.wav_utils import validate_wav_format
from wav_denoise.denoise.interface import DenoiseService
from wav_denoise.observability.metrics import Outcome, RunSummary, StageTimer
from wav_denoise.utils.errors import (
    DenoiseError,
    InputDirectoryError,
    OutputDirectoryError,
)

logger = logging.getLogger(__name__)


@dataclass
class FileOutcome:
    """Terminal state of a single discovered file."""

    status: Outcome
    candidate: FileCandidate
    destination_path: str | None = None
    error: str | None = None


def resolve_input_root(input_dir: str) -> str:
    """Return the canonical absolute path of an existing, readable directory.

    Raises:
        InputDirectoryError: If the path is missing, not a directory, or
            cannot be listed.
    """
    input_root = os.path.realpath(input_dir)
    if not os.path.exists(input_root):
        raise InputDirectoryError(
            "Input directory does not exist",
            path=input_dir,
            operation="resolve_input_root",
        )
    if not os.path.isdir(input_root):
        raise InputDirectoryError(
            "Input path is not a directory",
            path=input_dir,
            operation="resolve_input_root",
        )
    if not os.access(input_root, os.R_OK | os.X_OK):
        raise InputDirectoryError(
            "Input directory is not readable",
            path=input_dir,
            operation="resolve_input_root",
        )
    return input_root


def prepare_output_root(output_dir: str) -> str:
    """Create the output root (and parents) and return its canonical path.

    Raises:
        OutputDirectoryError: If the directory cannot be created or is not
            writable.
    """
    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError as exc:
        raise OutputDirectoryError(
            f"Failed to create output directory: {exc.strerror or exc}",
            path=output_dir,
            operation="prepare_output_root",
        ) from exc

    output_root = os.path.realpath(output_dir)
    if not os.access(output_root, os.W_OK | os.X_OK):
        raise OutputDirectoryError(
            "Output directory is not writable",
            path=output_dir,
            operation="prepare_output_root",
        )
    return output_root


def _nested_output_root(input_root: str, output_root: str) -> str | None:
    """Return output_root if it lies strictly inside input_root."""
    if output_root != input_root and (
        os.path.commonpath([input_root, output_root]) == input_root
    ):
        return output_root
    return None


def process_file(
    candidate: FileCandidate,
    input_root: str,
    output_root: str,
    service: DenoiseService,
) -> FileOutcome:
    """Validate one file and, if accepted, submit it for denoising.

    Never raises for per-file problems; each is converted into a log line
    and a "rejected" or "failed" outcome.

    Args:
        candidate: File yielded by the walker.
        input_root: Canonical input directory.
        output_root: Canonical output directory.
        service: Denoising service to submit accepted files to.

    Returns:
        FileOutcome with the terminal status for this file.
    """
    source_path = candidate.source_path

    validation = validate_wav_format(candidate)
    if not validation.accepted:
        logger.warning(
            "Skipping invalid WAV file: %s",
            source_path,
            extra={"path": source_path, "reason": validation.reason},
        )
        return FileOutcome(
            status="rejected", candidate=candidate, error=validation.reason
        )

    destination_path = mirror_output_path(input_root, output_root, source_path)

    try:
        os.makedirs(os.path.dirname(destination_path), exist_ok=True)
    except OSError as exc:
        logger.error(
            "Failed to create output directory for %s: %s",
            destination_path,
            exc,
            extra={"path": source_path, "destination": destination_path},
        )
        return FileOutcome(
            status="failed",
            candidate=candidate,
            destination_path=destination_path,
            error=str(exc),
        )

    timer = StageTimer("submit")
    try:
        with timer:
            result = service.submit(source_path, destination_path)
    except DenoiseError as exc:
        logger.error(
            "Denoising failed for %s",
            source_path,
            extra={
                "path": source_path,
                "destination": destination_path,
                "error": str(exc),
            },
        )
        return FileOutcome(
            status="failed",
            candidate=candidate,
            destination_path=destination_path,
            error=str(exc),
        )

    if not result.path_matches:
        # Still counted as processed; the service decides where it writes
        logger.warning(
            "Denoising service wrote %s instead of %s",
            result.output_path,
            destination_path,
            extra={"path": source_path, "destination": result.output_path},
        )

    logger.debug(
        "Denoised %s -> %s in %.2fs",
        source_path,
        result.output_path,
        timer.duration_seconds,
        extra={
            "path": source_path,
            "destination": result.output_path,
            "duration_seconds": round(timer.duration_seconds, 3),
        },
    )
    return FileOutcome(
        status="processed", candidate=candidate, destination_path=destination_path
    )


def run_denoise_batch(
    input_dir: str,
    output_dir: str,
    service: DenoiseService,
) -> RunSummary:
    """Denoise every valid WAV under input_dir into a mirrored output tree.

    Args:
        input_dir: Directory scanned recursively for ``.wav`` files.
        output_dir: Root of the mirrored output tree; created if missing.
        service: Denoising service used for each accepted file.

    Returns:
        RunSummary with one count per discovered file.

    Raises:
        InputDirectoryError: If the input root is missing or unreadable.
        OutputDirectoryError: If the output root cannot be prepared.
    """
    wall_start = time.monotonic()

    input_root = resolve_input_root(input_dir)
    output_root = prepare_output_root(output_dir)
    logger.debug(
        "Scanning %s for WAV files, writing to %s", input_root, output_root
    )

    summary = RunSummary()
    exclude = _nested_output_root(input_root, output_root)
    for candidate in iter_wav_files(input_root, exclude=exclude):
        outcome = process_file(candidate, input_root, output_root, service)
        summary.record(outcome.status)

    summary.wall_time_seconds = time.monotonic() - wall_start
    return summary
