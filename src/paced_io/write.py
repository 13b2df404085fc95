import asyncio
import os
from paced_io.constants import MODE_WRITE
from paced_io.errors import OperationCancelled, TransferError
from paced_io.structs import RunConfig, TransferResult
from paced_io.utils import SpeedMonitor, Ticker, allocate_buffer, cancellation_cause


def generate_random_bytes(buffer: memoryview):
    """Fill the whole buffer in place with cryptographically random bytes."""
    buffer[:] = os.urandom(len(buffer))


def write_block(file, block: memoryview) -> int:
    """
    Write a whole block, retrying short writes.

    Args:
        file: Unbuffered binary file object
        block: Bytes to write

    Returns:
        Number of bytes written
    """
    written = 0
    while written < len(block):
        written += file.write(block[written:])
    return written


class BlockWriter:
    """Write random blocks to a file, one block per tick."""

    def __init__(self, config: RunConfig, speed_monitor: SpeedMonitor | None = None):
        """
        Initialize with a run configuration.

        Args:
            config: Run configuration
            speed_monitor: SpeedMonitor instance, created from the config if omitted
        """
        self.config = config
        self.speed_monitor = speed_monitor or SpeedMonitor(
            total_blocks=config.block_count, enabled=config.progress
        )

    async def run(self, cancelled: asyncio.Event) -> TransferResult:
        """
        Create (or truncate) the file and write ``block_count`` blocks to it.

        Every block is preceded by a wait for the next tick. Cancellation is
        only honoured during that wait, so a block that has started writing
        always completes. With ``sync`` set the file is fsynced at the end.

        Args:
            cancelled: Event set when the run has to stop

        Returns:
            TransferResult with the number of bytes written
        """
        config = self.config
        buffer = allocate_buffer(config.block_size)
        try:
            file = open(config.path, "wb", buffering=0)
        except OSError as exc:
            raise TransferError("failed to create file for writing") from exc

        with file:
            ticker = Ticker(config.iter_sleep)
            block = memoryview(buffer)
            total_written = 0

            print(f"Starting write to {config.path!r}")
            self.speed_monitor.start()
            try:
                for _ in range(config.block_count):
                    if not await ticker.wait(cancelled):
                        raise OperationCancelled("writing cancelled") from cancellation_cause(
                            cancelled
                        )

                    try:
                        generate_random_bytes(block)
                    except (OSError, NotImplementedError) as exc:
                        raise TransferError(
                            "failed to generate random bytes to write to file"
                        ) from exc

                    try:
                        bytes_written = write_block(file, block)
                    except OSError as exc:
                        raise TransferError("failed to write segment to file") from exc

                    total_written += bytes_written
                    self.speed_monitor.update(bytes_written)
            finally:
                self.speed_monitor.finish()

            if config.sync:
                try:
                    os.fsync(file.fileno())
                except OSError as exc:
                    raise TransferError("failed to sync the written file") from exc

        summary = self.speed_monitor.summarize()
        print(f"Writing finished to {config.path!r} ({total_written} bytes)")

        return TransferResult(
            mode=MODE_WRITE,
            path=config.path,
            total_bytes=total_written,
            total_blocks=self.speed_monitor.completed_blocks,
            total_time=summary.total_time,
        )
