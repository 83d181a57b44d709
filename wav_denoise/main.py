"""Command-line entry point for the WAV denoising tool.

Usage:
    wav-files-denoise INPUT_DIR OUTPUT_DIR --addr-api URL

Exits 0 once every discovered file has been processed or skipped, and 1
on a setup failure (missing input, unusable output, malformed API URL).
"""

import argparse
import logging
import sys

from wav_denoise.denoise import HttpDenoiseService
from wav_denoise.observability.logger import LOG_FORMATS, configure_logging
from wav_denoise.observability.metrics import log_run_summary
from wav_denoise.pipeline import run_denoise_batch
from wav_denoise.utils.errors import DenoiseToolError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wav-files-denoise",
        description="Recursively denoise WAV files using an external API",
    )
    parser.add_argument(
        "input_dir",
        help="Input directory containing WAV files (processed recursively)",
    )
    parser.add_argument(
        "output_dir", help="Output directory for denoised files"
    )
    parser.add_argument(
        "--addr-api",
        required=True,
        help="Address of the denoising API server",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="HTTP timeout in seconds per request (default: "
        "$WAV_DENOISE_TIMEOUT_SECONDS, otherwise no timeout)",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default="text",
        help="Log output format on stderr (default: text)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Also log per-file timings",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the batch, and print the summary line."""
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_format, args.verbose)

    try:
        with HttpDenoiseService(args.addr_api, timeout=args.timeout) as service:
            summary = run_denoise_batch(args.input_dir, args.output_dir, service)
    except DenoiseToolError as exc:
        cause = exc.__cause__
        logger.error(
            "Error: %s",
            exc,
            extra={
                "path": exc.path,
                "operation": exc.operation,
                "error": str(cause) if cause else None,
            },
            exc_info=args.verbose,
        )
        return EXIT_FATAL

    if args.log_format == "json":
        log_run_summary(summary)
    print(summary.summary_line())
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
