"""Custom exception hierarchy for the WAV denoising tool.

All exceptions inherit from DenoiseToolError. Setup failures (input root,
output root, API address) abort the run; WavFormatError and DenoiseError
are caught at the per-file boundary and only skip the file concerned.
"""


class DenoiseToolError(Exception):
    """Base exception for all denoising tool errors."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        operation: str | None = None,
    ) -> None:
        self.path = path
        self.operation = operation
        super().__init__(message)

    def __str__(self) -> str:
        if self.path:
            return f"[path={self.path}] {super().__str__()}"
        return super().__str__()


class InputDirectoryError(DenoiseToolError):
    """Raised when the input root is missing or cannot be read."""


class OutputDirectoryError(DenoiseToolError):
    """Raised when the output root cannot be created or written to."""


class ConfigError(DenoiseToolError):
    """Raised when the tool is configured with an unusable value."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        operation: str | None = None,
    ) -> None:
        self.setting = setting
        super().__init__(message, operation=operation)


class WavFormatError(DenoiseToolError):
    """Raised when a WAV header cannot be parsed."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        detail: str | None = None,
    ) -> None:
        self.detail = detail
        super().__init__(message, path=path, operation="read_wav_format")


class DenoiseError(DenoiseToolError):
    """Raised when the denoising service call fails for a file."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, path=path, operation="submit")
