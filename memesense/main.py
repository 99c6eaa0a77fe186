#!/usr/bin/env python3
"""
Memesense - Solana memecoin analytics backend

Serves the dashboard's JSON endpoints (analyze-wallet, analyze-market,
ai-chat, twitter-api, check-api-keys) with uvicorn.

Usage:
    python -m memesense.main                  # Run with config from environment
    python -m memesense.main --port 9000
    python -m memesense.main --check-config   # Print configuration summary and exit
"""

import argparse
import logging
import sys

import uvicorn

from .api.app import create_app
from .config import MemesenseConfig


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Memesense analytics API")
    parser.add_argument("--host", default=MemesenseConfig.get_host(), help="Bind address")
    parser.add_argument("--port", type=int, default=MemesenseConfig.get_port(), help="Bind port")
    parser.add_argument(
        "--log-level",
        default=MemesenseConfig.get_log_level(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Root log level",
    )
    parser.add_argument(
        "--check-config",
        action="store_true",
        help="Print configuration summary and exit",
    )
    return parser.parse_args(argv)


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    if args.check_config:
        MemesenseConfig.print_config_summary()
        is_valid, _ = MemesenseConfig.validate_config()
        return 0 if is_valid else 1

    app = create_app()
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
