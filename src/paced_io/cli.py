import asyncio
import signal
import sys
from paced_io.errors import PacedIOError
from paced_io.main import print_tsv_results, run_operation
from paced_io.parsing import parse_arguments
from paced_io.utils import CancelToken

CANCEL_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def install_cancel_handlers(cancelled: CancelToken):
    """
    Cancel ``cancelled`` when SIGINT or SIGTERM arrives, naming the signal.

    Returns:
        Callable that restores the previous handlers
    """
    loop = asyncio.get_running_loop()
    try:
        for signum in CANCEL_SIGNALS:
            loop.add_signal_handler(signum, cancelled.cancel, f"received {signum.name}")
    except NotImplementedError:
        # Event loops without signal support (e.g. on Windows)
        def handler(received, _frame):
            reason = f"received {signal.Signals(received).name}"
            loop.call_soon_threadsafe(cancelled.cancel, reason)

        previous = {signum: signal.signal(signum, handler) for signum in CANCEL_SIGNALS}

        def restore():
            for signum, previous_handler in previous.items():
                signal.signal(signum, previous_handler)

        return restore

    def remove():
        for signum in CANCEL_SIGNALS:
            loop.remove_signal_handler(signum)

    return remove


async def cli(argv: list[str] | None = None) -> int:
    """Main entry point for the load generator. Returns the exit code."""
    try:
        config = parse_arguments(argv)
    except PacedIOError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    cancelled = CancelToken()
    remove_handlers = install_cancel_handlers(cancelled)

    try:
        results = await run_operation(config, cancelled)
    except PacedIOError as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    finally:
        remove_handlers()

    print_tsv_results(results)
    return 0
