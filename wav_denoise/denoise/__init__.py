"""Denoising service clients.

Public API:
    DenoiseService       Abstract base class for denoise services.
    DenoiseResult        Confirmation returned by a service.
    HttpDenoiseService   JSON-over-HTTP service client.
"""

from wav_denoise.denoise.http_client import HttpDenoiseService
from wav_denoise.denoise.interface import DenoiseResult, DenoiseService

__all__ = [
    "DenoiseResult",
    "DenoiseService",
    "HttpDenoiseService",
]
