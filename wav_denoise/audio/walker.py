"""Recursive discovery of WAV files under an input root.

Entries are visited in sorted order so a run over an unchanged tree always
yields files in the same sequence. Symbolic links are never followed.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass

from wav_denoise.utils.errors import InputDirectoryError

logger = logging.getLogger(__name__)

WAV_EXTENSION = ".wav"


@dataclass
class FileCandidate:
    """A discovered WAV file awaiting validation."""

    source_path: str
    relative_path: str


def is_wav_filename(name: str) -> bool:
    """Return True if the file name has a ``.wav`` extension (any case)."""
    return os.path.splitext(name)[1].lower() == WAV_EXTENSION


def mirror_output_path(input_root: str, output_root: str, source_path: str) -> str:
    """Map a source file to the same relative location under the output root.

    Pure path arithmetic: nothing is read from or written to disk.

    Args:
        input_root: Absolute input directory.
        output_root: Absolute output directory.
        source_path: Absolute path of a file inside input_root.

    Returns:
        Absolute destination path, e.g. ``<output>/a/b/c.wav`` for
        ``<input>/a/b/c.wav``.

    Raises:
        ValueError: If source_path does not lie under input_root.
    """
    root = os.path.normpath(input_root)
    source = os.path.normpath(source_path)
    if os.path.commonpath([root, source]) != root or source == root:
        raise ValueError(f"{source_path} is not inside {input_root}")
    return os.path.join(os.path.normpath(output_root), os.path.relpath(source, root))


def _scan_sorted(directory: str) -> list[os.DirEntry[str]]:
    with os.scandir(directory) as entries:
        return sorted(entries, key=lambda entry: entry.name)


def iter_wav_files(
    input_root: str, exclude: str | None = None
) -> Iterator[FileCandidate]:
    """Lazily yield every WAV file below input_root.

    Args:
        input_root: Absolute path of the directory to scan.
        exclude: Optional directory whose subtree is not descended into
            (used when the output root sits inside the input root).

    Yields:
        FileCandidate for each regular file with a ``.wav`` extension.

    Raises:
        InputDirectoryError: If input_root itself cannot be listed.
    """
    try:
        top_entries = _scan_sorted(input_root)
    except OSError as exc:
        raise InputDirectoryError(
            f"Failed to read input directory: {exc.strerror or exc}",
            path=input_root,
            operation="scan",
        ) from exc

    excluded = os.path.normpath(exclude) if exclude else None
    pending: list[list[os.DirEntry[str]]] = [top_entries]

    while pending:
        entries = pending.pop()
        # Directories are pushed in reverse so they are walked in name order
        subdirs: list[str] = []
        for entry in entries:
            try:
                if entry.is_symlink():
                    logger.warning(
                        "Skipping symbolic link: %s", entry.path,
                        extra={"path": entry.path},
                    )
                    continue
                if entry.is_dir(follow_symlinks=False):
                    if excluded and os.path.normpath(entry.path) == excluded:
                        logger.debug(
                            "Not scanning output directory inside input: %s",
                            entry.path,
                        )
                        continue
                    subdirs.append(entry.path)
                elif entry.is_file(follow_symlinks=False) and is_wav_filename(
                    entry.name
                ):
                    yield FileCandidate(
                        source_path=entry.path,
                        relative_path=os.path.relpath(entry.path, input_root),
                    )
            except OSError as exc:
                logger.warning(
                    "Skipping unreadable entry %s: %s", entry.path, exc,
                    extra={"path": entry.path, "error": str(exc)},
                )

        for subdir in reversed(subdirs):
            try:
                pending.append(_scan_sorted(subdir))
            except OSError as exc:
                logger.warning(
                    "Skipping unreadable directory %s: %s", subdir, exc,
                    extra={"path": subdir, "error": str(exc)},
                )
