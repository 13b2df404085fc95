"""Paced block I/O load generator."""

import asyncio
import sys

from paced_io.cli import cli


def main():
    try:
        sys.exit(asyncio.run(cli()))
    except KeyboardInterrupt:
        print("\nInterrupted by user.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)
