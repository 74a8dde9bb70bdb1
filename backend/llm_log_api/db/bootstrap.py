# llm_log_api/db/bootstrap.py
"""
One-shot schema bootstrap (not part of the serving path).

Creates llm_call_logs if it is missing and can insert deterministic sample
rows for local development:

    python -m llm_log_api.db.bootstrap --seed 50
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence

from sqlalchemy import insert

from llm_log_api.core.config import Settings, settings as default_settings
from llm_log_api.core.logging import configure_logging
from llm_log_api.db.models import LlmCallLog
from llm_log_api.db.store import LogStore, create_store

logger = logging.getLogger(__name__)

SAMPLE_START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _iso_z(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).replace(tzinfo=None, microsecond=0).isoformat() + "Z"


def sample_entries(count: int, start: datetime = SAMPLE_START) -> List[Dict[str, str]]:
    """
    Build `count` sample rows, one hour apart starting at `start`.

    Every fourth call is a failure so status filters have something to show.
    """
    rows = []
    for i in range(count):
        failed = i % 4 == 3
        rows.append(
            {
                "timestamp": _iso_z(start + timedelta(hours=i)),
                "status": "fail" if failed else "success",
                "input": f"Sample prompt #{i + 1}",
                "output": "Request timed out" if failed else f"Sample completion #{i + 1}",
            }
        )
    return rows


async def seed(store: LogStore, rows: Sequence[Dict[str, str]]) -> int:
    """Insert rows; returns how many were written."""
    if not rows:
        return 0
    async with store.engine.begin() as conn:
        await conn.execute(insert(LlmCallLog), list(rows))
    return len(rows)


async def bootstrap(settings: Settings, seed_count: int = 0) -> None:
    store = create_store(settings)
    try:
        await store.create_schema()
        logger.info("Schema ready (%s backend)", store.backend)
        if seed_count:
            inserted = await seed(store, sample_entries(seed_count))
            logger.info("Inserted %d sample rows", inserted)
    finally:
        await store.dispose()


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Create the llm_call_logs schema if it does not exist.")
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        metavar="N",
        help="also insert N sample rows (default: 0)",
    )
    args = parser.parse_args(argv)
    if args.seed < 0:
        parser.error("--seed must be >= 0")

    configure_logging(default_settings.LOG_LEVEL)
    asyncio.run(bootstrap(default_settings, args.seed))


if __name__ == "__main__":
    main()
