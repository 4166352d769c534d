#!/usr/bin/env python3
"""
Periodic trend refresh - keeps the shared trend cache warm and writes a CSV
snapshot of every cycle, pruning snapshots older than a retention window.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import time
from datetime import datetime, timedelta
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence

from .cli_entrypoints import configure_logging
from .config import Settings
from .errors import TrendwiseError
from .reports import save_trends_snapshot
from .service import TrendService, build_service

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Manages refresh cycles with snapshot retention."""

    def __init__(
        self,
        service: TrendService,
        interval_minutes: float = 30,
        region: Optional[str] = None,
        categories: Optional[Sequence[str]] = None,
        keep_hours: int = 24,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.service = service
        self.interval_minutes = interval_minutes
        self.interval_seconds = interval_minutes * 60
        self.region = region
        self.categories = categories
        self.keep_hours = keep_hours
        self.running = False
        self.cycle_count = 0
        self._sleep = sleep

    def install_signal_handlers(self) -> None:
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals gracefully."""
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        self.running = False

    @property
    def reports_dir(self) -> Path:
        return Path(self.service.settings.data_dir) / "reports"

    async def run_cycle(self) -> bool:
        """Refresh the cache once and snapshot the result; returns success."""
        try:
            candidates = await self.service.refresh_trends(region=self.region, categories=self.categories)
        except TrendwiseError as e:
            logger.error(f"Refresh cycle failed: {e}")
            return False

        if not candidates:
            logger.warning("Refresh produced no trends; cache left as it was")
            return False

        save_trends_snapshot(candidates, self.service.settings.data_dir)
        return True

    def cleanup_old_snapshots(self) -> int:
        """Delete trend snapshots older than ``keep_hours``."""
        if not self.reports_dir.exists():
            return 0
        cutoff_time = datetime.now() - timedelta(hours=self.keep_hours)
        cleaned_count = 0
        for path in self.reports_dir.glob("trends_*.csv"):
            timestamp_str = path.stem.replace("trends_", "")
            try:
                snapshot_time = datetime.strptime(timestamp_str, "%Y-%m-%d_%H-%M-%S")
            except ValueError:
                continue
            if snapshot_time < cutoff_time:
                path.unlink()
                cleaned_count += 1
        if cleaned_count > 0:
            logger.info(f"Cleaned up {cleaned_count} old snapshots")
        return cleaned_count

    async def run_continuous_monitoring(self, max_cycles: Optional[int] = None) -> int:
        """Run refresh cycles until stopped; returns the number of cycles completed."""
        self.running = True
        self.cycle_count = 0
        logger.info(f"Starting trend refresh every {self.interval_minutes} minutes")

        try:
            while self.running:
                self.cycle_count += 1
                cycle_start = time.time()
                logger.info(f"Starting cycle {self.cycle_count}")

                if await self.run_cycle():
                    # every 4 cycles
                    if self.cycle_count % 4 == 0:
                        self.cleanup_old_snapshots()
                else:
                    logger.error(f"Cycle {self.cycle_count} failed")

                if max_cycles is not None and self.cycle_count >= max_cycles:
                    break

                cycle_duration = time.time() - cycle_start
                sleep_time = max(0, self.interval_seconds - cycle_duration)
                if self.running and sleep_time > 0:
                    next_run = datetime.now() + timedelta(seconds=sleep_time)
                    logger.info(
                        f"Cycle {self.cycle_count} completed in {cycle_duration:.1f}s. "
                        f"Next run at {next_run.strftime('%H:%M:%S')}"
                    )
                    # Sleep in chunks so a shutdown signal is noticed promptly
                    sleep_chunks = int(sleep_time / 10) + 1
                    chunk_size = sleep_time / sleep_chunks
                    for _ in range(sleep_chunks):
                        if not self.running:
                            break
                        await self._sleep(chunk_size)
        finally:
            self.running = False
            logger.info(f"Monitoring stopped after {self.cycle_count} cycles")
        return self.cycle_count


def main(argv: Optional[List[str]] = None) -> int:
    """Main function with CLI interface."""
    parser = argparse.ArgumentParser(description="Periodic trend refresh scheduler")
    parser.add_argument("--interval", "-i", type=float, help="Refresh interval in minutes (default: cache TTL)")
    parser.add_argument("--region", "-r", help="Region code (default: TRENDS_GEO or US)")
    parser.add_argument("--categories", "-c", help="Comma-separated categories to keep")
    parser.add_argument("--keep-hours", type=int, default=24, help="Snapshot retention in hours (default: 24)")
    parser.add_argument("--once", action="store_true", help="Run once instead of continuous monitoring")
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
    except TrendwiseError as e:
        configure_logging()
        logger.error(f"Invalid configuration: {e}")
        return 1
    configure_logging(settings.log_level)

    categories = [c.strip() for c in args.categories.split(",") if c.strip()] if args.categories else None
    scheduler = RefreshScheduler(
        build_service(settings, persistent_cache=True),
        interval_minutes=args.interval or settings.cache_ttl_minutes,
        region=args.region,
        categories=categories,
        keep_hours=args.keep_hours,
    )

    if args.once:
        ok = asyncio.run(scheduler.run_cycle())
        return 0 if ok else 1

    scheduler.install_signal_handlers()
    asyncio.run(scheduler.run_continuous_monitoring())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
