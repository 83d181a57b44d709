"""Tests for the run_denoise_batch() orchestrator."""

import logging
import os
import wave

import pytest

from wav_denoise.audio.walker import FileCandidate
from wav_denoise.denoise.interface import DenoiseResult, DenoiseService
from wav_denoise.pipeline import (
    prepare_output_root,
    process_file,
    resolve_input_root,
    run_denoise_batch,
)
from wav_denoise.utils.errors import (
    DenoiseError,
    InputDirectoryError,
    OutputDirectoryError,
)


def _create_wav(
    path: str, sample_rate: int = 16000, channels: int = 1, num_frames: int = 160
) -> None:
    """Create a silent 16-bit WAV, creating parent directories as needed."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with wave.open(path, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(b"\x00" * num_frames * channels * 2)


class FakeDenoiseService(DenoiseService):
    """Records submissions; fails for sources listed in fail_for."""

    def __init__(self, fail_for: tuple[str, ...] = ()) -> None:
        self.fail_for = fail_for
        self.calls: list[tuple[str, str]] = []
        self.parent_existed: list[bool] = []

    def submit(self, source_path: str, destination_path: str) -> DenoiseResult:
        self.calls.append((source_path, destination_path))
        self.parent_existed.append(os.path.isdir(os.path.dirname(destination_path)))
        if os.path.basename(source_path) in self.fail_for:
            raise DenoiseError("Denoising service returned HTTP 500", path=source_path)
        return DenoiseResult(
            source_path=source_path,
            requested_path=destination_path,
            output_path=destination_path,
        )


@pytest.fixture
def dirs(tmp_path: object) -> tuple[str, str]:
    input_dir = os.path.join(str(tmp_path), "in")
    output_dir = os.path.join(str(tmp_path), "out")
    os.makedirs(input_dir)
    return input_dir, output_dir


class TestRunDenoiseBatch:
    """Tests for run_denoise_batch end to end with a fake service."""

    def test_valid_and_invalid_files_are_counted(
        self, dirs: tuple[str, str], caplog: pytest.LogCaptureFixture
    ) -> None:
        input_dir, output_dir = dirs
        _create_wav(os.path.join(input_dir, "x.wav"))
        _create_wav(os.path.join(input_dir, "sub", "y.wav"), 44100, channels=2)
        service = FakeDenoiseService()

        with caplog.at_level(logging.INFO):
            summary = run_denoise_batch(input_dir, output_dir, service)

        assert summary.processed == 1
        assert summary.skipped == 1
        assert summary.rejected == 1
        assert summary.summary_line() == (
            "Denoising complete: 1 files processed, 1 skipped."
        )
        assert "Skipping invalid WAV file: " in caplog.text
        assert os.path.join("sub", "y.wav") in caplog.text

    def test_destination_mirrors_tree_and_parents_exist_before_submit(
        self, dirs: tuple[str, str]
    ) -> None:
        input_dir, output_dir = dirs
        _create_wav(os.path.join(input_dir, "a", "b", "c.wav"))
        service = FakeDenoiseService()

        run_denoise_batch(input_dir, output_dir, service)

        input_root = os.path.realpath(input_dir)
        output_root = os.path.realpath(output_dir)
        assert service.calls == [
            (
                os.path.join(input_root, "a", "b", "c.wav"),
                os.path.join(output_root, "a", "b", "c.wav"),
            )
        ]
        assert service.parent_existed == [True]

    def test_failed_request_is_skipped_and_run_continues(
        self, dirs: tuple[str, str], caplog: pytest.LogCaptureFixture
    ) -> None:
        input_dir, output_dir = dirs
        for name in ("a.wav", "b.wav", "c.wav"):
            _create_wav(os.path.join(input_dir, name))
        service = FakeDenoiseService(fail_for=("b.wav",))

        summary = run_denoise_batch(input_dir, output_dir, service)

        assert len(service.calls) == 3
        assert summary.processed == 2
        assert summary.failed == 1
        assert summary.skipped == 1
        assert "Denoising failed for " in caplog.text
        assert "b.wav" in caplog.text

    def test_every_discovered_file_is_counted_once(
        self, dirs: tuple[str, str]
    ) -> None:
        input_dir, output_dir = dirs
        _create_wav(os.path.join(input_dir, "ok1.wav"))
        _create_wav(os.path.join(input_dir, "d", "ok2.WAV"))
        _create_wav(os.path.join(input_dir, "d", "fail.wav"))
        _create_wav(os.path.join(input_dir, "d", "e", "bad.wav"), 8000)
        with open(os.path.join(input_dir, "broken.wav"), "wb") as f:
            f.write(b"RIFF")
        with open(os.path.join(input_dir, "ignored.txt"), "w") as f:
            f.write("not audio")
        service = FakeDenoiseService(fail_for=("fail.wav",))

        summary = run_denoise_batch(input_dir, output_dir, service)

        assert summary.total == 5
        assert summary.processed == 2
        assert summary.rejected == 2
        assert summary.failed == 1

    def test_empty_input_creates_empty_output(self, dirs: tuple[str, str]) -> None:
        input_dir, output_dir = dirs

        summary = run_denoise_batch(input_dir, output_dir, FakeDenoiseService())

        assert summary.summary_line() == (
            "Denoising complete: 0 files processed, 0 skipped."
        )
        assert os.path.isdir(output_dir)
        assert os.listdir(output_dir) == []

    def test_output_inside_input_is_not_rescanned(self, tmp_path: object) -> None:
        input_dir = os.path.join(str(tmp_path), "in")
        output_dir = os.path.join(input_dir, "denoised")
        _create_wav(os.path.join(input_dir, "x.wav"))
        _create_wav(os.path.join(output_dir, "x.wav"))
        service = FakeDenoiseService()

        summary = run_denoise_batch(input_dir, output_dir, service)

        assert summary.total == 1
        assert len(service.calls) == 1

    def test_missing_input_raises_before_output_is_created(
        self, tmp_path: object
    ) -> None:
        input_dir = os.path.join(str(tmp_path), "missing")
        output_dir = os.path.join(str(tmp_path), "out")

        with pytest.raises(InputDirectoryError, match="does not exist"):
            run_denoise_batch(input_dir, output_dir, FakeDenoiseService())

        assert not os.path.exists(output_dir)


class TestProcessFile:
    """Tests for per-file handling in process_file()."""

    def test_output_directory_failure_is_a_failed_outcome(
        self, tmp_path: object, caplog: pytest.LogCaptureFixture
    ) -> None:
        input_root = os.path.join(str(tmp_path), "in")
        output_root = os.path.join(str(tmp_path), "out")
        source = os.path.join(input_root, "sub", "x.wav")
        _create_wav(source)
        os.makedirs(output_root)
        # A file where the mirrored subdirectory should go
        with open(os.path.join(output_root, "sub"), "w") as f:
            f.write("")
        service = FakeDenoiseService()

        outcome = process_file(
            FileCandidate(source, os.path.join("sub", "x.wav")),
            input_root,
            output_root,
            service,
        )

        assert outcome.status == "failed"
        assert service.calls == []
        assert "Failed to create output directory" in caplog.text

    def test_mismatched_confirmation_is_processed_with_warning(
        self, tmp_path: object, caplog: pytest.LogCaptureFixture
    ) -> None:
        input_root = os.path.join(str(tmp_path), "in")
        output_root = os.path.join(str(tmp_path), "out")
        source = os.path.join(input_root, "x.wav")
        _create_wav(source)

        class ElsewhereService(FakeDenoiseService):
            def submit(self, source_path: str, destination_path: str) -> DenoiseResult:
                return DenoiseResult(source_path, destination_path, "/tmp/other.wav")

        with caplog.at_level(logging.WARNING):
            outcome = process_file(
                FileCandidate(source, "x.wav"),
                input_root,
                output_root,
                ElsewhereService(),
            )

        assert outcome.status == "processed"
        assert "instead of" in caplog.text


class TestRoots:
    """Tests for input/output root preparation."""

    def test_input_file_is_not_a_directory(self, tmp_path: object) -> None:
        path = os.path.join(str(tmp_path), "file.wav")
        _create_wav(path)

        with pytest.raises(InputDirectoryError, match="not a directory"):
            resolve_input_root(path)

    def test_output_root_and_parents_are_created(self, tmp_path: object) -> None:
        output_dir = os.path.join(str(tmp_path), "a", "b", "out")

        result = prepare_output_root(output_dir)

        assert os.path.isdir(output_dir)
        assert result == os.path.realpath(output_dir)

    def test_output_root_blocked_by_file_raises(self, tmp_path: object) -> None:
        blocker = os.path.join(str(tmp_path), "out")
        with open(blocker, "w") as f:
            f.write("")

        with pytest.raises(OutputDirectoryError) as exc_info:
            prepare_output_root(blocker)

        assert exc_info.value.path == blocker
        assert exc_info.value.operation == "prepare_output_root"
