"""Abstract denoise service interface and wire models.

Defines the DenoiseService ABC used by the pipeline. The service performs
denoising out of process: only file paths cross the boundary, never audio
samples. Concrete implementations (e.g., HTTP) subclass DenoiseService.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class DenoiseRequest:
    """JSON body sent to the denoising service."""

    filename: str
    filename_denoised: str

    def to_payload(self) -> dict[str, str]:
        return asdict(self)


@dataclass
class DenoiseResponse:
    """JSON body returned by the denoising service."""

    filename_denoised: str

    @classmethod
    def from_body(cls, body: Any) -> DenoiseResponse:
        """Deserialize and validate a response body.

        Args:
            body: Decoded JSON value from the response.

        Returns:
            Validated DenoiseResponse.

        Raises:
            ValueError: If the body is not an object with a non-empty
                string 'filename_denoised'.
        """
        if not isinstance(body, dict):
            raise ValueError("Response body is not a JSON object")

        filename_denoised = body.get("filename_denoised")
        if not isinstance(filename_denoised, str):
            raise ValueError("Missing or invalid 'filename_denoised' in response")
        if not filename_denoised:
            raise ValueError("Empty 'filename_denoised' in response")

        return cls(filename_denoised=filename_denoised)


@dataclass
class DenoiseResult:
    """Confirmation that the service denoised a file."""

    source_path: str
    requested_path: str
    output_path: str

    @property
    def path_matches(self) -> bool:
        return self.output_path == self.requested_path


class DenoiseService(ABC):
    """Abstract base class for denoise service implementations.

    Subclasses must implement the submit() method.
    """

    @abstractmethod
    def submit(self, source_path: str, destination_path: str) -> DenoiseResult:
        """Ask the service to denoise one 16kHz mono 16-bit PCM WAV file.

        Args:
            source_path: Absolute path of the input WAV file.
            destination_path: Absolute path the denoised WAV should be
                written to.

        Returns:
            DenoiseResult carrying the output path confirmed by the service.

        Raises:
            DenoiseError: If the service could not denoise the file.
        """

    def close(self) -> None:
        """Release any resources held by the service."""

    def __enter__(self) -> DenoiseService:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()
