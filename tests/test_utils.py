import asyncio
import time

import pytest

from paced_io.errors import TransferError
from paced_io.utils import (
    CancelToken,
    SpeedMonitor,
    Ticker,
    allocate_buffer,
    cancellation_cause,
    format_size,
    format_speed,
    parse_duration,
    parse_size,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("32768", 32768),
        ("32KB", 32 * 1024),
        ("1mb", 1024**2),
        ("2GB", 2 * 1024**3),
    ],
)
def test_parse_size(text, expected):
    assert parse_size(text) == expected


@pytest.mark.parametrize("text", ["", "12XB", "-1", "1.5MB"])
def test_parse_size_rejects_garbage(text):
    with pytest.raises(ValueError, match="Invalid size format"):
        parse_size(text)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1ms", 0.001),
        ("250us", 0.00025),
        ("250µs", 0.00025),
        ("1.5s", 1.5),
        ("2m", 120.0),
        ("1h2m3s", 3723.0),
        ("500ns", 5e-7),
        ("0", 0.0),
        ("0.25", 0.25),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == pytest.approx(expected)


@pytest.mark.parametrize("text", ["", "ms", "1x", "1ms2", "s1"])
def test_parse_duration_rejects_garbage(text):
    with pytest.raises(ValueError, match="Invalid duration format"):
        parse_duration(text)


def test_format_size_and_speed():
    assert format_size(512) == "512.00 B"
    assert format_size(10240) == "10.00 KB"
    assert format_speed(3 * 1024**2) == "3.00 MB/s"


@pytest.mark.asyncio
async def test_ticker_fires_after_interval():
    ticker = Ticker(0.02)
    started = time.monotonic()
    assert await ticker.wait(asyncio.Event())
    assert time.monotonic() - started >= 0.015


@pytest.mark.asyncio
async def test_ticker_with_zero_interval_still_checks_cancellation():
    ticker = Ticker(0)
    cancelled = asyncio.Event()
    assert await ticker.wait(cancelled)
    cancelled.set()
    assert not await ticker.wait(cancelled)


@pytest.mark.asyncio
async def test_ticker_wait_is_cut_short_by_cancellation():
    ticker = Ticker(10)
    cancelled = asyncio.Event()
    asyncio.get_running_loop().call_later(0.01, cancelled.set)
    started = time.monotonic()
    assert not await ticker.wait(cancelled)
    assert time.monotonic() - started < 5


@pytest.mark.asyncio
async def test_ticker_drops_missed_ticks():
    ticker = Ticker(0.05)
    cancelled = asyncio.Event()
    # Overrun several ticks, as a slow transfer would
    time.sleep(0.275)
    assert await ticker.wait(cancelled)
    assert ticker.deadline > time.monotonic()
    assert ticker.deadline - time.monotonic() <= 0.05


def test_speed_monitor_summary():
    monitor = SpeedMonitor(enabled=False, total_blocks=3)
    monitor.start()
    for _ in range(3):
        monitor.update(100)
    summary = monitor.summarize()
    assert summary.total_bytes == 300
    assert monitor.completed_blocks == 3
    assert summary.total_time >= 0


def test_allocate_buffer_wraps_oversized_requests():
    assert len(allocate_buffer(16)) == 16
    with pytest.raises(TransferError, match="failed to allocate") as exc_info:
        allocate_buffer(10**30)
    assert isinstance(exc_info.value.__cause__, (MemoryError, OverflowError))


def test_cancel_token_records_reason():
    token = CancelToken()
    assert str(cancellation_cause(token)) == "run cancelled"
    token.cancel("received SIGTERM")
    assert token.is_set()
    assert str(cancellation_cause(token)) == "received SIGTERM"
    assert str(cancellation_cause(asyncio.Event())) == "run cancelled"
