from typing import NamedTuple


class RunConfig(NamedTuple):
    mode: str
    path: str
    block_size: int
    block_count: int
    iter_sleep: float
    sync: bool = False
    combined_pause: float = 5.0
    progress: bool = True


class TransferResult(NamedTuple):
    mode: str
    path: str
    total_bytes: int
    total_blocks: int
    total_time: float
    digest: str | None = None


class SummaryStats(NamedTuple):
    total_bytes: int
    total_time: float
    average_speed: float
