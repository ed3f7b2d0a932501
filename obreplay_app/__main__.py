"""
Command-line ingestion of an order-book CSV file.

Usage:
    python -m obreplay_app data/book.csv
    python -m obreplay_app data/book.csv --tick 1500 --json
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

import orjson
import structlog

from .config.loader import ConfigLoader
from .data.models import ParseProgress
from .engine import ReplayEngine
from .errors import ConfigurationError, IngestError
from .logging.config import configure_logging
from .utils.time import format_latency

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="obreplay",
        description="Ingest an order-book snapshot CSV and summarize the replay session.",
    )
    parser.add_argument("csv_path", type=Path, help="Order-book snapshot CSV export")
    parser.add_argument("--config-dir", type=Path, default=None,
                        help="Directory containing replay.yaml")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    parser.add_argument("--json", action="store_true", help="Emit JSON logs and output")
    parser.add_argument("--tick", type=int, default=None,
                        help="Also print the snapshot view at this tick")
    return parser


async def run(args: argparse.Namespace) -> int:
    config = ConfigLoader.create(args.config_dir).load_config()
    engine = ReplayEngine(config=config)
    last_percent = -1

    def on_progress(progress: ParseProgress) -> None:
        nonlocal last_percent
        if progress.percent_complete != last_percent:
            last_percent = progress.percent_complete
            logger.debug("Progress", **progress.to_dict())

    try:
        result = await engine.ingest_file(args.csv_path, on_progress=on_progress)
    except IngestError as e:
        logger.error("Failed to process file", error=str(e), error_type=type(e).__name__)
        return 1

    history = engine.history_view(result.session_id)
    summary = {**result.to_dict(), "historyPoints": len(history.history) if history else 0}

    view = engine.snapshot_view(result.session_id, args.tick) if args.tick is not None else None

    if args.json:
        if view is not None:
            summary["snapshot"] = view.to_dict()
        print(orjson.dumps(summary, option=orjson.OPT_INDENT_2).decode())
        return 0

    print(result.message)
    print(f"Session: {result.session_id}")
    print(f"History points: {summary['historyPoints']}")
    if view is not None:
        latency = format_latency(view.latency_ms) if view.latency_ms is not None else "n/a"
        print(f"Tick {view.tick}: {view.ts_recv} (latency {latency})")
        print(f"  bids {len(view.bids)} levels, total {view.bid_total:g}")
        print(f"  asks {len(view.asks)} levels, total {view.ask_total:g}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level, format_json=args.json)

    try:
        return asyncio.run(run(args))
    except ConfigurationError as e:
        logger.error("Invalid configuration", error=str(e))
        return 1
    except FileNotFoundError as e:
        logger.error("File not found", error=str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
