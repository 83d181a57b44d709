"""HTTP client for the external denoising service.

Each accepted file results in exactly one ``POST <addr-api>`` carrying the
source and destination paths as JSON. The service writes the denoised WAV
itself and answers with the path it wrote.
"""

from __future__ import annotations

import json
import logging
import os

import httpx

from wav_denoise.denoise.interface import (
    DenoiseRequest,
    DenoiseResponse,
    DenoiseResult,
    DenoiseService,
)
from wav_denoise.utils.errors import ConfigError, DenoiseError

logger = logging.getLogger(__name__)

# No overall timeout unless one is configured; a denoise call may run long
DEFAULT_TIMEOUT_SECONDS: float | None = None


def _parse_api_url(addr_api: str) -> httpx.URL:
    """Validate the service address.

    Raises:
        ConfigError: If the address is empty, not http(s), or has no host.
    """
    if not addr_api:
        raise ConfigError(
            "Denoising API address is required (--addr-api or "
            "WAV_DENOISE_API_URL)",
            setting="addr_api",
            operation="init",
        )
    try:
        url = httpx.URL(addr_api)
    except httpx.InvalidURL as exc:
        raise ConfigError(
            f"Malformed denoising API address '{addr_api}': {exc}",
            setting="addr_api",
            operation="init",
        ) from exc

    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigError(
            f"Malformed denoising API address '{addr_api}': "
            "expected an http:// or https:// URL with a host",
            setting="addr_api",
            operation="init",
        )
    return url


def _resolve_timeout(timeout: float | None) -> float | None:
    if timeout is not None:
        value = timeout
    else:
        raw = os.environ.get("WAV_DENOISE_TIMEOUT_SECONDS", "")
        if not raw:
            return DEFAULT_TIMEOUT_SECONDS
        try:
            value = float(raw)
        except ValueError as exc:
            raise ConfigError(
                f"Invalid WAV_DENOISE_TIMEOUT_SECONDS: '{raw}'",
                setting="timeout",
                operation="init",
            ) from exc

    if value <= 0:
        raise ConfigError(
            f"Timeout must be positive, got {value}",
            setting="timeout",
            operation="init",
        )
    return value


class HttpDenoiseService(DenoiseService):
    """Denoising service reached over HTTP with a JSON request/response.

    Reads configuration from environment variables when not passed:
        WAV_DENOISE_API_URL, WAV_DENOISE_TIMEOUT_SECONDS
    """

    def __init__(
        self,
        addr_api: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.url = _parse_api_url(
            addr_api or os.environ.get("WAV_DENOISE_API_URL", "")
        )
        self.timeout = _resolve_timeout(timeout)
        self._client = httpx.Client(timeout=self.timeout)

    def close(self) -> None:
        """Close the shared HTTP client and release connection pool."""
        self._client.close()

    def submit(self, source_path: str, destination_path: str) -> DenoiseResult:
        """POST one denoise request and decode the confirmation.

        Args:
            source_path: Absolute path of the input WAV file.
            destination_path: Absolute path for the denoised output.

        Returns:
            DenoiseResult with the output path reported by the service.

        Raises:
            DenoiseError: On transport failure, timeout, non-2xx status, or
                an undecodable response body.
        """
        request = DenoiseRequest(
            filename=source_path, filename_denoised=destination_path
        )

        try:
            response = self._client.post(self.url, json=request.to_payload())
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise DenoiseError(
                f"Denoising service returned HTTP {exc.response.status_code}",
                path=source_path,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            raise DenoiseError(
                f"Denoising request failed: {exc}",
                path=source_path,
            ) from exc

        try:
            body = DenoiseResponse.from_body(response.json())
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as exc:
            raise DenoiseError(
                f"Undecodable denoising response: {exc}",
                path=source_path,
                status_code=response.status_code,
            ) from exc

        return DenoiseResult(
            source_path=source_path,
            requested_path=destination_path,
            output_path=body.filename_denoised,
        )
