import asyncio
import hashlib
from paced_io.constants import MODE_READ
from paced_io.errors import OperationCancelled, TransferError
from paced_io.structs import RunConfig, TransferResult
from paced_io.utils import SpeedMonitor, Ticker, allocate_buffer, cancellation_cause


class BlockReader:
    """Read a file block by block, one block per tick, and hash its content."""

    def __init__(self, config: RunConfig, speed_monitor: SpeedMonitor | None = None):
        """
        Initialize with a run configuration.

        Args:
            config: Run configuration
            speed_monitor: SpeedMonitor instance, created from the config if omitted
        """
        self.config = config
        self.speed_monitor = speed_monitor or SpeedMonitor(enabled=config.progress)

    async def run(self, cancelled: asyncio.Event) -> TransferResult:
        """
        Read the file until end-of-file and compute its SHA-256 digest.

        Reads up to ``block_size`` bytes after every tick. A short read is
        fine; the loop ends on the first read that returns no data.

        Args:
            cancelled: Event set when the run has to stop

        Returns:
            TransferResult with the number of bytes read and the hex digest
        """
        config = self.config
        buffer = allocate_buffer(config.block_size)
        try:
            file = open(config.path, "rb", buffering=0)
        except OSError as exc:
            raise TransferError("failed to open file for reading") from exc

        with file:
            hasher = hashlib.sha256()
            ticker = Ticker(config.iter_sleep)
            block = memoryview(buffer)
            total_read = 0

            print(f"Starting read from {config.path!r}")
            self.speed_monitor.start()
            try:
                while True:
                    if not await ticker.wait(cancelled):
                        raise OperationCancelled("reading cancelled") from cancellation_cause(
                            cancelled
                        )

                    try:
                        bytes_read = file.readinto(block)
                    except OSError as exc:
                        raise TransferError("failed to read segment from file") from exc

                    if not bytes_read:
                        break

                    total_read += bytes_read
                    hasher.update(block[:bytes_read])
                    self.speed_monitor.update(bytes_read)
            finally:
                self.speed_monitor.finish()

        digest = hasher.hexdigest()
        summary = self.speed_monitor.summarize()
        print(f"Reading finished from {config.path!r} ({total_read} bytes)")
        print(f"SHA-256 hash: {digest}")

        return TransferResult(
            mode=MODE_READ,
            path=config.path,
            total_bytes=total_read,
            total_blocks=self.speed_monitor.completed_blocks,
            total_time=summary.total_time,
            digest=digest,
        )
