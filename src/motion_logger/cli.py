"""CLI entry point for the motion logger."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .app import run_app


def setup_logging(debug: bool = False) -> None:
    """Set up logging configuration."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Motion Logger - log step count, activity, heading and acceleration"
    )
    parser.add_argument(
        "--config",
        required=True,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop tracking after this many seconds (default: run until Ctrl-C)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    setup_logging(args.debug)

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Error: Configuration file not found: {config_path}", file=sys.stderr)
        sys.exit(1)

    try:
        asyncio.run(run_app(str(config_path), args.duration))
    except KeyboardInterrupt:
        print("\nMotion logger stopped by user")
    except Exception as e:
        print(f"Motion logger failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
