# Constants
DEFAULT_BLOCK_SIZE = 32 * 1024  # 32 KB
MAX_BLOCK_SIZE = 1024**3  # 1 GB
DEFAULT_BLOCK_COUNT = 2048
DEFAULT_ITER_SLEEP = "1ms"
DEFAULT_COMBINED_PAUSE = "5s"
PROGRESS_INTERVAL = 0.5  # seconds

# Operation modes
MODE_READ = "read"
MODE_WRITE = "write"
MODE_COMBINED = "combined"
MODES = (MODE_READ, MODE_WRITE, MODE_COMBINED)
