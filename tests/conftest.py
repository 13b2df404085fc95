import pytest

from paced_io.structs import RunConfig
from paced_io.utils import SpeedMonitor


@pytest.fixture
def make_config(tmp_path):
    def _make_config(**overrides):
        values = {
            "mode": "write",
            "path": str(tmp_path / "blocks.bin"),
            "block_size": 1024,
            "block_count": 10,
            "iter_sleep": 0.0,
            "sync": False,
            "combined_pause": 0.0,
            "progress": False,
        }
        values.update(overrides)
        return RunConfig(**values)

    return _make_config


class CancellingMonitor(SpeedMonitor):
    """Sets the cancellation event once a given number of blocks are done."""

    def __init__(self, cancelled, after):
        super().__init__(enabled=False)
        self.cancelled = cancelled
        self.after = after

    def update(self, bytes_transferred):
        super().update(bytes_transferred)
        if self.completed_blocks == self.after:
            self.cancelled.set()


@pytest.fixture
def cancel_after():
    return CancellingMonitor
