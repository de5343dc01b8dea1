"""Store maintenance scheduler.

Seeds the reference weight tables on first start, then prunes expired
daily view counters on a configurable schedule.
Uses asyncio tasks, no external scheduler dependency.
"""

from __future__ import annotations

import asyncio
import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_HOURS = 6
DEFAULT_RETENTION_DAYS = 7


class MaintenanceScheduler:
    """Manages first-run seeding and periodic counter pruning."""

    def __init__(self):
        self._task: asyncio.Task | None = None
        self._running = False
        self._interval_seconds = int(os.environ.get(
            "MAINTENANCE_INTERVAL_HOURS",
            str(DEFAULT_INTERVAL_HOURS),
        )) * 3600
        self._retention_days = int(os.environ.get(
            "VIEW_COUNTER_RETENTION_DAYS",
            str(DEFAULT_RETENTION_DAYS),
        ))

    async def start(self):
        """Seed weights if needed, then start the background pruning loop."""
        if self._running:
            return
        await self.ensure_weights()
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Maintenance scheduler started (interval: %d hours)", self._interval_seconds // 3600)

    async def stop(self):
        """Stop the background pruning loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Maintenance scheduler stopped")

    async def ensure_weights(self) -> bool:
        """Activate the reference weights when a gender has none. Returns True if seeded."""
        from .store import needs_seed, seed_default_weights

        if not await needs_seed():
            logger.info("Active weight tables present, skipping seed")
            return False
        logger.info("First run detected, activating reference weight tables")
        await seed_default_weights()
        return True

    async def _run_loop(self):
        """Main loop: prune immediately, then on every interval."""
        from .store import prune_view_counts

        while self._running:
            try:
                await prune_view_counts(self._retention_days)
                await asyncio.sleep(self._interval_seconds)
            except asyncio.CancelledError:
                break
            except Exception as exc:
                logger.error("View counter pruning failed: %s", exc, exc_info=True)
                await asyncio.sleep(60)
