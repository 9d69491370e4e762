#!/usr/bin/env python3
"""
Script to export all token records as JSON for the front end.

Records are written with camelCase keys, sorted by token index.

Usage:
    python scripts/export_tokens.py

    # Custom output path
    python scripts/export_tokens.py --output public/tokens.json
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

import structlog

log = structlog.get_logger()

DEFAULT_OUTPUT = Path("data") / "tokens.json"


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Export token records to a JSON file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT,
        help=f"Output file (default: {DEFAULT_OUTPUT})",
    )
    return parser.parse_args()


async def export_tokens(output: Path) -> int:
    """Write all token records to ``output``.

    Returns:
        Number of records written.
    """
    from spotboard.data.supabase.client import (  # noqa: PLC0415
        close_supabase_client,
        get_supabase_client,
    )
    from spotboard.data.supabase.repositories.token_repo import (  # noqa: PLC0415
        TokenRepository,
    )

    try:
        supabase = await get_supabase_client()
        records = await TokenRepository(supabase).get_all()
    finally:
        await close_supabase_client()

    records.sort(key=lambda record: record.token_index)
    payload = [record.model_dump(mode="json", by_alias=True) for record in records]

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    log.info("tokens_exported", count=len(payload), path=str(output))
    return len(payload)


async def main() -> int:
    """Main entry point."""
    args = parse_args()

    from spotboard.config.logging import configure_logging  # noqa: PLC0415

    configure_logging()

    try:
        count = await export_tokens(args.output)
        print(f"[OK] Exported {count} tokens to {args.output}")
        return 0
    except Exception as e:
        log.error("token_export_failed", error=str(e))
        print(f"\n[ERROR] Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
