import asyncio
import hashlib
import os

import pytest

from paced_io.errors import ConfigurationError, OperationCancelled
from paced_io.main import print_tsv_results, run_operation
from paced_io.structs import TransferResult


@pytest.mark.asyncio
async def test_unknown_mode_is_rejected_before_io(make_config):
    config = make_config(mode="append")

    with pytest.raises(ConfigurationError, match="unknown --mode argument 'append'"):
        await run_operation(config, asyncio.Event())
    assert not os.path.exists(config.path)


@pytest.mark.asyncio
async def test_dispatches_write_then_read(make_config):
    config = make_config(block_size=512, block_count=4)

    [written] = await run_operation(config, asyncio.Event())
    [read] = await run_operation(config._replace(mode="read"), asyncio.Event())

    assert written.mode == "write"
    assert read.mode == "read"
    assert written.total_bytes == read.total_bytes == 2048


@pytest.mark.asyncio
async def test_combined_writes_then_reads(make_config):
    config = make_config(mode="combined", block_size=256, block_count=8)

    written, read = await run_operation(config, asyncio.Event())

    with open(config.path, "rb") as f:
        content = f.read()
    assert written.total_bytes == read.total_bytes == len(content) == 2048
    assert read.digest == hashlib.sha256(content).hexdigest()


@pytest.mark.asyncio
async def test_combined_pause_is_cancellable(make_config):
    config = make_config(mode="combined", combined_pause=30.0)
    cancelled = asyncio.Event()
    asyncio.get_running_loop().call_later(0.01, cancelled.set)

    with pytest.raises(OperationCancelled, match="combined run cancelled"):
        await run_operation(config, cancelled)
    assert not os.path.exists(config.path)


def test_print_tsv_results(capsys):
    print_tsv_results(
        [
            TransferResult(
                mode="write", path="f", total_bytes=10240, total_blocks=10, total_time=2.0
            ),
            TransferResult(
                mode="read",
                path="f",
                total_bytes=10240,
                total_blocks=11,
                total_time=0.0,
                digest="ab" * 32,
            ),
        ]
    )
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[-2] == "write\tf\t10\t10240\t2.00\t5.00 KB/s\t-"
    assert lines[-1] == f"read\tf\t11\t10240\t0.00\t0.00 B/s\t{'ab' * 32}"
