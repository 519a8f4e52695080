"""Retention sweep: age-based deletion of stale temp artifacts.

Requests delete their own artifacts; this is the safety net for files left
behind by crashed or killed requests. It runs on a timer from the app
lifespan and on demand from the cleanup endpoint.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

from file_converter.storage import CleanupOutcome, StorageContext, remove

logger = logging.getLogger("file_converter.retention")


@dataclass
class SweepReport:
    max_age_hours: float
    scanned: int = 0
    deleted: int = 0
    failed: int = 0


def sweep(storage: StorageContext, max_age_hours: float, now: Optional[float] = None) -> SweepReport:
    """Delete files in the upload and output dirs whose mtime is older than ``max_age_hours``."""
    now = time.time() if now is None else now
    cutoff = now - max_age_hours * 3600
    report = SweepReport(max_age_hours=max_age_hours)
    for directory in storage.directories:
        if not directory.is_dir():
            continue
        for f in directory.iterdir():
            try:
                if not f.is_file():
                    continue
                mtime = f.stat().st_mtime
            except OSError as e:
                # vanished mid-scan or unreadable
                logger.warning("Could not stat %s: %s", f, e)
                continue
            report.scanned += 1
            if mtime >= cutoff:
                continue
            outcome = remove(f)
            if outcome == CleanupOutcome.REMOVED:
                report.deleted += 1
            elif outcome == CleanupOutcome.FAILED:
                report.failed += 1
    logger.info(
        "Retention sweep (older than %sh): scanned=%s deleted=%s failed=%s",
        max_age_hours, report.scanned, report.deleted, report.failed,
    )
    return report


async def run_periodic_sweeps(storage: StorageContext, interval_seconds: float, max_age_hours: float) -> None:
    """Sweep forever, ``interval_seconds`` apart. Cancel the task to stop."""
    while True:
        try:
            await asyncio.to_thread(sweep, storage, max_age_hours)
        except Exception as e:
            logger.exception("Retention sweep failed: %s", e)
        await asyncio.sleep(interval_seconds)
