#!/usr/bin/env python3
"""
Script to run one token sync cycle manually.

Fetches the Hyperliquid spot listing, merges token details onto the
stored records and prints the cycle summary.

Usage:
    python scripts/sync_tokens.py

    # Verbose logging
    python scripts/sync_tokens.py --debug
"""

import argparse
import asyncio
import os
import sys

import structlog

log = structlog.get_logger()


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Run one Hyperliquid token sync cycle",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging with console output",
    )
    return parser.parse_args()


async def run_sync() -> None:
    """Run a cycle and print its summary."""
    from spotboard.data.supabase.client import close_supabase_client  # noqa: PLC0415
    from spotboard.scheduler.jobs import run_token_sync_once  # noqa: PLC0415

    print("\n" + "=" * 60)
    print("[SYNC] Hyperliquid Token Sync")
    print("=" * 60 + "\n")

    try:
        result = await run_token_sync_once()
    finally:
        await close_supabase_client()

    print(f"[OK] Status: {result.status}")
    print(f"    Tokens listed: {result.tokens_listed}")
    print(f"    Inserted: {result.inserted}")
    print(f"    Updated: {result.updated}")
    print(f"    Failed: {result.failed}")
    if result.deploys_seen is not None:
        print(f"    Deploys seen: {result.deploys_seen}")
    print(f"    Duration: {result.duration_seconds:.1f}s")


async def main() -> int:
    """Main entry point."""
    args = parse_args()
    if args.debug:
        os.environ["DEBUG"] = "true"
        os.environ["LOG_LEVEL"] = "DEBUG"

    from spotboard.config.logging import configure_logging  # noqa: PLC0415

    configure_logging()

    try:
        await run_sync()
        return 0

    except KeyboardInterrupt:
        print("\n[WARN] Interrupted by user")
        return 1
    except Exception as e:
        log.error("token_sync_failed", error=str(e))
        print(f"\n[ERROR] Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
