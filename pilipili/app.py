"""Command-line entry point of the bot."""

from __future__ import annotations

import argparse
from typing import Sequence

from pilipili.logger import LoggerBuilder, LogLevel


def main(argv: Sequence[str] | None = None) -> int:
    """Start the bot with file logging at info level."""
    parser = argparse.ArgumentParser(prog="pilipili", description="Start the pilipili bot.")
    parser.parse_args(argv)
    guard = LoggerBuilder().with_level(LogLevel.INFO).init()
    try:
        return 0
    finally:
        guard.close()


if __name__ == "__main__":
    raise SystemExit(main())