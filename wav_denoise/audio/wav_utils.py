"""WAV header inspection for the 16kHz mono 16-bit PCM input contract.

The denoising service only accepts one input format, so every candidate is
checked here before a request is issued. The ``fmt `` chunk is decoded
field by field so the exact BitsPerSample and format tag are compared,
including WAVE_FORMAT_EXTENSIBLE headers whose subformat is integer PCM.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO, Literal

from wav_denoise.audio.walker import FileCandidate
from wav_denoise.utils.errors import WavFormatError

SAMPLE_RATE = 16000
SAMPLE_WIDTH = 2  # 16-bit = 2 bytes
NUM_CHANNELS = 1

WAVE_FORMAT_PCM = 0x0001
WAVE_FORMAT_EXTENSIBLE = 0xFFFE

# Trailing 12 bytes shared by every KSDATAFORMAT_SUBTYPE_* GUID; the
# leading 4 bytes hold the plain format tag (1 for PCM)
_SUBFORMAT_GUID_TAIL = b"\x00\x00\x10\x00\x80\x00\x00\xaa\x00\x38\x9b\x71"

_RIFF_HEADER = struct.Struct("<4sI4s")
_CHUNK_HEADER = struct.Struct("<4sI")
_FMT_FIELDS = struct.Struct("<HHIIHH")
_EXTENSIBLE_FIELDS = struct.Struct("<HHI16s")


@dataclass
class WavFormat:
    """Format fields read from a WAV file's ``fmt `` chunk.

    For extensible headers, audio_format is the subformat's tag and
    bits_per_sample is the valid-bits field when it is set.
    """

    audio_format: int
    channels: int
    bits_per_sample: int
    sample_rate: int


@dataclass
class ValidationOutcome:
    """Tagged result of checking one candidate against the input contract."""

    status: Literal["accepted", "rejected"]
    candidate: FileCandidate
    reason: str | None = None

    @property
    def accepted(self) -> bool:
        return self.status == "accepted"

    @classmethod
    def accept(cls, candidate: FileCandidate) -> ValidationOutcome:
        return cls(status="accepted", candidate=candidate)

    @classmethod
    def reject(cls, candidate: FileCandidate, reason: str) -> ValidationOutcome:
        return cls(status="rejected", candidate=candidate, reason=reason)


def _read_exact(f: BinaryIO, size: int, what: str) -> bytes:
    data = f.read(size)
    if len(data) < size:
        raise ValueError(f"truncated {what}")
    return data


def _parse_fmt_chunk(data: bytes) -> WavFormat:
    if len(data) < _FMT_FIELDS.size:
        raise ValueError(f"fmt chunk too short ({len(data)} bytes)")
    audio_format, channels, sample_rate, _byte_rate, _block_align, bits = (
        _FMT_FIELDS.unpack_from(data)
    )

    if audio_format == WAVE_FORMAT_EXTENSIBLE:
        if len(data) < _FMT_FIELDS.size + _EXTENSIBLE_FIELDS.size:
            raise ValueError("extensible fmt chunk too short")
        _cb_size, valid_bits, _channel_mask, subformat = (
            _EXTENSIBLE_FIELDS.unpack_from(data, _FMT_FIELDS.size)
        )
        if subformat[4:] == _SUBFORMAT_GUID_TAIL:
            audio_format = struct.unpack_from("<I", subformat)[0]
        if valid_bits:
            bits = valid_bits

    return WavFormat(
        audio_format=audio_format,
        channels=channels,
        bits_per_sample=bits,
        sample_rate=sample_rate,
    )


def read_wav_format(wav_path: str) -> WavFormat:
    """Read the format header of a WAV file.

    Args:
        wav_path: Path to the WAV file.

    Returns:
        WavFormat with format tag, channel count, bit depth and rate.

    Raises:
        WavFormatError: If the file cannot be opened or is not a RIFF/WAVE
            container with a complete ``fmt `` chunk.
    """
    try:
        with open(wav_path, "rb") as f:
            riff, _riff_size, wave_id = _RIFF_HEADER.unpack(
                _read_exact(f, _RIFF_HEADER.size, "RIFF header")
            )
            if riff != b"RIFF" or wave_id != b"WAVE":
                raise ValueError("file is not a RIFF/WAVE container")

            while True:
                header = f.read(_CHUNK_HEADER.size)
                if len(header) < _CHUNK_HEADER.size:
                    raise ValueError("no fmt chunk found")
                chunk_id, chunk_size = _CHUNK_HEADER.unpack(header)
                if chunk_id == b"fmt ":
                    return _parse_fmt_chunk(
                        _read_exact(f, chunk_size, "fmt chunk")
                    )
                # Chunks are padded to an even length
                f.seek(chunk_size + (chunk_size & 1), 1)
    except (OSError, ValueError, struct.error) as exc:
        raise WavFormatError(
            f"Failed to read WAV header: {exc}", path=wav_path, detail=str(exc)
        ) from exc


def check_wav_format(wav_format: WavFormat) -> list[str]:
    """Compare a parsed header against the required input format.

    Args:
        wav_format: Header fields returned by read_wav_format().

    Returns:
        One message per failed check; empty when the format matches.
    """
    problems: list[str] = []
    if wav_format.audio_format != WAVE_FORMAT_PCM:
        problems.append(
            f"sample format: expected integer PCM, "
            f"got format tag {wav_format.audio_format:#06x}"
        )
    if wav_format.channels != NUM_CHANNELS:
        problems.append(
            f"channels: expected {NUM_CHANNELS}, got {wav_format.channels}"
        )
    if wav_format.bits_per_sample != SAMPLE_WIDTH * 8:
        problems.append(
            f"bits per sample: expected {SAMPLE_WIDTH * 8}, "
            f"got {wav_format.bits_per_sample}"
        )
    if wav_format.sample_rate != SAMPLE_RATE:
        problems.append(
            f"sample rate: expected {SAMPLE_RATE} Hz, "
            f"got {wav_format.sample_rate} Hz"
        )
    return problems


def validate_wav_format(candidate: FileCandidate) -> ValidationOutcome:
    """Accept a candidate only if it is 16kHz mono 16-bit signed PCM.

    Never raises: parse failures are reported as a rejection so a single
    malformed file cannot abort the batch.

    Args:
        candidate: File discovered by the directory walker.

    Returns:
        ValidationOutcome, with a reason naming the failed checks when
        rejected.
    """
    try:
        wav_format = read_wav_format(candidate.source_path)
    except WavFormatError as exc:
        return ValidationOutcome.reject(
            candidate, f"unreadable WAV header: {exc.detail}"
        )

    problems = check_wav_format(wav_format)
    if problems:
        return ValidationOutcome.reject(candidate, "; ".join(problems))
    return ValidationOutcome.accept(candidate)
