import argparse
import math
from paced_io.constants import (
    DEFAULT_BLOCK_COUNT,
    DEFAULT_BLOCK_SIZE,
    DEFAULT_COMBINED_PAUSE,
    DEFAULT_ITER_SLEEP,
    MAX_BLOCK_SIZE,
    MODES,
)
from paced_io.errors import ConfigurationError
from paced_io.structs import RunConfig
from paced_io.utils import format_size, parse_duration, parse_size


class ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises ConfigurationError instead of exiting with status 2."""

    def error(self, message):
        raise ConfigurationError(message)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="paced-io",
        description="Generate paced, block-sized file I/O for testing resource monitoring.",
    )

    parser.add_argument(
        "--mode",
        required=True,
        choices=MODES,
        help="Operation mode: read, write, or combined (write then read)",
    )
    parser.add_argument(
        "--path", required=True, help="Path of the file to read/write from"
    )

    parser.add_argument(
        "--block-size",
        type=str,
        default=str(DEFAULT_BLOCK_SIZE),
        help=f"The size of each block to read/write (e.g., '32768', '32KB'). Default: {DEFAULT_BLOCK_SIZE}",
    )
    parser.add_argument(
        "--blocks",
        type=int,
        default=DEFAULT_BLOCK_COUNT,
        help=f"Number of blocks to write. Default: {DEFAULT_BLOCK_COUNT}",
    )
    parser.add_argument(
        "--iter-sleep",
        type=str,
        default=DEFAULT_ITER_SLEEP,
        help=f"Time to sleep between iterations (a single block read/written), e.g. '1ms', '250us', '1.5s'. Default: {DEFAULT_ITER_SLEEP}",
    )
    parser.add_argument(
        "--sync",
        action="store_true",
        help="Sync the file to disk at the end of a write operation",
    )

    # Combined mode arguments
    combined_group = parser.add_argument_group("Combined mode arguments")
    combined_group.add_argument(
        "--combined-pause",
        type=str,
        default=DEFAULT_COMBINED_PAUSE,
        help=f"Pause before the write and before the read. Default: {DEFAULT_COMBINED_PAUSE}",
    )

    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not print the live progress line",
    )

    return parser


def _duration(flag: str, value: str) -> float:
    try:
        seconds = parse_duration(value)
    except ValueError as e:
        raise ConfigurationError(f"{flag}: {e}") from e
    if not math.isfinite(seconds) or seconds < 0:
        raise ConfigurationError(f"{flag} must be a non-negative duration, got {value!r}")
    return seconds


def parse_arguments(argv: list[str] | None = None) -> RunConfig:
    """
    Parse command line arguments into a RunConfig.

    Args:
        argv: Argument list, defaults to sys.argv[1:]

    Returns:
        Immutable run configuration

    Raises:
        ConfigurationError: If any argument is missing or invalid
    """
    args = build_parser().parse_args(argv)

    if not args.path:
        raise ConfigurationError("--path is required")

    try:
        block_size = parse_size(args.block_size)
    except ValueError as e:
        raise ConfigurationError(f"--block-size: {e}") from e
    if block_size <= 0:
        raise ConfigurationError("--block-size must be greater than zero")
    if block_size > MAX_BLOCK_SIZE:
        raise ConfigurationError(
            f"--block-size must not exceed {format_size(MAX_BLOCK_SIZE)}, got {args.block_size}"
        )

    if args.blocks < 0:
        raise ConfigurationError("--blocks must not be negative")

    return RunConfig(
        mode=args.mode,
        path=args.path,
        block_size=block_size,
        block_count=args.blocks,
        iter_sleep=_duration("--iter-sleep", args.iter_sleep),
        sync=args.sync,
        combined_pause=_duration("--combined-pause", args.combined_pause),
        progress=not args.no_progress,
    )
