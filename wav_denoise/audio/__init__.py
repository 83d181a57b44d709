"""WAV discovery and format validation."""

from wav_denoise.audio.walker import FileCandidate, iter_wav_files, mirror_output_path
from wav_denoise.audio.wav_utils import ValidationOutcome, validate_wav_format

__all__ = [
    "FileCandidate",
    "ValidationOutcome",
    "iter_wav_files",
    "mirror_output_path",
    "validate_wav_format",
]
