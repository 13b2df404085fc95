#!/usr/bin/env python3
"""
Paced I/O load generator

Writes random blocks to, or reads and hashes blocks from, a single file at a
fixed pace so external block-I/O accounting has a predictable pattern to
observe. Supports read, write and combined modes.
"""

import asyncio
from paced_io.constants import MODE_COMBINED, MODE_READ, MODE_WRITE
from paced_io.errors import ConfigurationError, OperationCancelled
from paced_io.read import BlockReader
from paced_io.structs import RunConfig, TransferResult
from paced_io.utils import (
    cancellation_cause,
    display_final_stats,
    format_size,
    format_speed,
    pause,
)
from paced_io.write import BlockWriter


async def run_write(config: RunConfig, cancelled: asyncio.Event) -> TransferResult:
    """
    Run a single paced write.

    Args:
        config: Run configuration
        cancelled: Cancellation event

    Returns:
        TransferResult of the write
    """
    print(
        f"\nWriting {config.block_count} blocks of {format_size(config.block_size)} "
        f"every {config.iter_sleep * 1000:g} ms"
    )
    result = await BlockWriter(config).run(cancelled)
    display_final_stats(result)
    return result


async def run_read(config: RunConfig, cancelled: asyncio.Event) -> TransferResult:
    """
    Run a single paced read.

    Args:
        config: Run configuration
        cancelled: Cancellation event

    Returns:
        TransferResult of the read, including the digest
    """
    print(
        f"\nReading blocks of {format_size(config.block_size)} "
        f"every {config.iter_sleep * 1000:g} ms"
    )
    result = await BlockReader(config).run(cancelled)
    display_final_stats(result)
    return result


async def run_combined(
    config: RunConfig, cancelled: asyncio.Event
) -> list[TransferResult]:
    """
    Pause, write, pause, then read back the written file.

    Args:
        config: Run configuration
        cancelled: Cancellation event

    Returns:
        List with the write result followed by the read result
    """
    results = []
    for step in (run_write, run_read):
        print(f"\nPausing for {config.combined_pause:g} seconds")
        if not await pause(config.combined_pause, cancelled):
            raise OperationCancelled("combined run cancelled") from cancellation_cause(
                cancelled
            )
        results.append(await step(config, cancelled))

    return results


async def run_operation(
    config: RunConfig, cancelled: asyncio.Event
) -> list[TransferResult]:
    """
    Dispatch to the operation selected by ``config.mode``.

    Args:
        config: Run configuration
        cancelled: Cancellation event

    Returns:
        List of results, one per operation that ran

    Raises:
        ConfigurationError: If the mode is unknown; no I/O happens in that case
    """
    if config.mode == MODE_WRITE:
        return [await run_write(config, cancelled)]
    elif config.mode == MODE_READ:
        return [await run_read(config, cancelled)]
    elif config.mode == MODE_COMBINED:
        return await run_combined(config, cancelled)

    raise ConfigurationError(f"unknown --mode argument {config.mode!r}")


def print_tsv_results(results: list[TransferResult]):
    """
    Print results as a TSV table.

    Args:
        results: List of operation results
    """
    print("\nResults (TSV format):")
    print("Mode\tPath\tBlocks\tBytes\tTotal Time (s)\tAverage Speed\tSHA-256")

    for result in results:
        speed = result.total_bytes / result.total_time if result.total_time > 0 else 0.0
        print(
            f"{result.mode}\t{result.path}\t{result.total_blocks}\t{result.total_bytes}\t"
            f"{result.total_time:.2f}\t{format_speed(speed)}\t{result.digest or '-'}"
        )
