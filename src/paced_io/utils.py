import asyncio
import re
import time
from paced_io.constants import MODE_READ, PROGRESS_INTERVAL
from paced_io.errors import TransferError
from paced_io.structs import SummaryStats, TransferResult


class CancelToken(asyncio.Event):
    """Cancellation event that remembers why the run was stopped."""

    reason = "run cancelled"

    def cancel(self, reason: str):
        self.reason = reason
        self.set()


def cancellation_cause(cancelled: asyncio.Event) -> asyncio.CancelledError:
    return asyncio.CancelledError(getattr(cancelled, "reason", CancelToken.reason))


def allocate_buffer(size: int) -> bytearray:
    """Allocate the transfer buffer before the file is touched."""
    try:
        return bytearray(size)
    except (MemoryError, OverflowError) as exc:
        raise TransferError(f"failed to allocate a {size} byte transfer buffer") from exc


class Ticker:
    """Periodic timer that paces one transfer per tick."""

    def __init__(self, interval: float):
        """
        Start the ticker. Ticks fall on ``start + k * interval``.

        Args:
            interval: Tick period in seconds (0 disables the delay)
        """
        self.interval = interval
        self.deadline = time.monotonic() + interval

    def _advance(self):
        self.deadline += self.interval
        now = time.monotonic()
        if self.interval > 0 and self.deadline <= now:
            # Ticks missed while transferring are dropped, not queued
            skipped = (now - self.deadline) // self.interval + 1
            self.deadline += skipped * self.interval

    async def wait(self, cancelled: asyncio.Event) -> bool:
        """
        Wait for the next tick or for cancellation, whichever comes first.

        Args:
            cancelled: Event set when the run has to stop

        Returns:
            True when the tick fired, False when the run was cancelled
        """
        if cancelled.is_set():
            return False

        delay = self.deadline - time.monotonic()
        if delay > 0:
            try:
                await asyncio.wait_for(cancelled.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass
        else:
            await asyncio.sleep(0)

        if cancelled.is_set():
            return False

        self._advance()
        return True


async def pause(seconds: float, cancelled: asyncio.Event) -> bool:
    """Sleep for a fixed time; returns False if cancelled meanwhile."""
    return await Ticker(seconds).wait(cancelled)


class SpeedMonitor:
    """Track and display transfer speed and completed blocks."""

    def __init__(
        self,
        update_interval: float = PROGRESS_INTERVAL,
        total_blocks: int = 0,
        speed_window_size: int = 5,
        enabled: bool = True,
    ):
        """
        Initialize the speed monitor.

        Args:
            update_interval: Interval in seconds for updating the display
            total_blocks: Expected number of blocks, 0 when unknown
            speed_window_size: Number of recent measurements to use for speed calculation
            enabled: Whether to print the live progress line
        """
        self.start_time = None
        self.total_bytes = 0
        self.completed_blocks = 0
        self.bytes_since_last_update = 0
        self.current_speed = 0
        self.recent_speeds = []
        self.speed_window_size = speed_window_size
        self.update_interval = update_interval
        self.last_update = 0
        self.total_blocks = total_blocks
        self.enabled = enabled
        self.last_line_length = 0  # Track the length of the last printed line

    def start(self):
        """Start monitoring."""
        self.start_time = time.monotonic()
        self.last_update = self.start_time

    def update(self, bytes_transferred: int):
        """
        Record one completed block.

        Args:
            bytes_transferred: Number of bytes moved by the block
        """
        self.total_bytes += bytes_transferred
        self.bytes_since_last_update += bytes_transferred
        self.completed_blocks += 1
        current_time = time.monotonic()

        if current_time - self.last_update >= self.update_interval:
            time_since_last_update = current_time - self.last_update
            if time_since_last_update > 0:
                recent_speed = self.bytes_since_last_update / time_since_last_update
                self.recent_speeds.append(recent_speed)

                # Keep only the most recent measurements
                if len(self.recent_speeds) > self.speed_window_size:
                    self.recent_speeds = self.recent_speeds[-self.speed_window_size :]

                self.current_speed = sum(self.recent_speeds) / len(self.recent_speeds)

            self.bytes_since_last_update = 0
            self.last_update = current_time
            self.display_progress()

    def display_progress(self):
        """Display current speed, completed blocks and total data transferred."""
        if not self.enabled:
            return

        progress_str = f"Current speed: {format_speed(self.current_speed)} | Transferred: {format_size(self.total_bytes)}"
        if self.total_blocks > 0:
            progress_str += f" | Blocks: {self.completed_blocks}/{self.total_blocks}"
        else:
            progress_str += f" | Blocks: {self.completed_blocks}"

        # Pad with spaces to overwrite any remaining characters from previous line
        if len(progress_str) < self.last_line_length:
            progress_str += " " * (self.last_line_length - len(progress_str))

        self.last_line_length = len(progress_str)

        print(f"\r{progress_str}", end="", flush=True)

    def finish(self):
        """Terminate the progress line if one was printed."""
        if self.last_line_length:
            print()
            self.last_line_length = 0

    def summarize(self) -> SummaryStats:
        """Compute totals and the average speed since start()."""
        total_time = time.monotonic() - self.start_time
        average_speed = self.total_bytes / total_time if total_time > 0 else 0.0

        return SummaryStats(
            total_bytes=self.total_bytes,
            total_time=total_time,
            average_speed=average_speed,
        )


def display_final_stats(result: TransferResult):
    """
    Display final transfer statistics.

    Args:
        result: Result of a finished operation
    """
    operation = "Read" if result.mode == MODE_READ else "Write"
    speed = result.total_bytes / result.total_time if result.total_time > 0 else 0.0
    print(f"\n{operation} Results:")
    print(f"Total data transferred: {format_size(result.total_bytes)}")
    print(f"Blocks: {result.total_blocks}")
    print(f"Total time: {result.total_time:.2f} seconds")
    print(f"Average {operation.lower()} speed: {format_speed(speed)}")


SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]
SIZE_SUFFIXES = {"KB": 1024, "MB": 1024**2, "GB": 1024**3}


def _scale(value: float, units: list[str]) -> str:
    unit_index = 0
    while value >= 1024 and unit_index < len(units) - 1:
        value /= 1024
        unit_index += 1
    return f"{value:.2f} {units[unit_index]}"


def format_size(size: int) -> str:
    """Render a byte count with a binary unit, e.g. ``10.00 KB`` for 10240."""
    return _scale(size, SIZE_UNITS)


def format_speed(speed: float) -> str:
    """Render a throughput in bytes per second, e.g. ``3.00 MB/s``."""
    return _scale(speed, [f"{unit}/s" for unit in SIZE_UNITS[:-1]])


def parse_size(size_str: str) -> int:
    """
    Parse a block size given in bytes, or with a KB/MB/GB (1024-based) suffix.

    Args:
        size_str: Value of ``--block-size``, e.g. "32768" or "32KB"

    Returns:
        Block size in bytes
    """
    match = re.match(r"^(\d+)([KMG]B)?$", size_str.strip(), re.IGNORECASE)
    if not match:
        raise ValueError(
            f"Invalid size format: {size_str}. Expected format: NUMBER[KB|MB|GB]"
        )

    value, unit = match.groups()
    return int(value) * SIZE_SUFFIXES.get((unit or "").upper(), 1)


DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(duration_str: str) -> float:
    """
    Parse a duration such as "1ms", "1.5s" or "1h2m3s" to seconds.

    A bare number is taken as seconds, and "0" is accepted on its own.

    Args:
        duration_str: Duration string

    Returns:
        Duration in seconds
    """
    text = duration_str.strip()
    try:
        return float(text)
    except ValueError:
        pass

    position = 0
    seconds = 0.0
    for match in DURATION_PART.finditer(text):
        if match.start() != position:
            break
        value, unit = match.groups()
        seconds += float(value) * DURATION_UNITS[unit]
        position = match.end()

    if not text or position != len(text):
        raise ValueError(
            f"Invalid duration format: {duration_str}. Expected format like 1ms, 250us, 1.5s, 2m"
        )

    return seconds
