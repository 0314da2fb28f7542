"""Lifecycle sweep background task."""

import asyncio
import logging
import random
from typing import Optional

from eventflow.config import settings
from eventflow.db.base import get_session
from eventflow.engine import PlanningEngine

logger = logging.getLogger("eventflow.sweep")

_sweep_task: Optional[asyncio.Task] = None
_shutdown_event: Optional[asyncio.Event] = None


async def run_sweep_once() -> dict[str, int]:
    """Run each lifecycle sweep in its own session."""
    counts = {}
    async with get_session() as session:
        counts["cancelled"] = await PlanningEngine(session).auto_cancel_expired()
    async with get_session() as session:
        counts["confirmed"] = await PlanningEngine(session).auto_finalize_voting()
    async with get_session() as session:
        counts["completed"] = await PlanningEngine(session).auto_complete_past()
    return counts


async def lifecycle_sweep_loop():
    """
    Background loop that moves events along time-driven transitions.

    - RSVP deadline passed with too few acceptances -> cancelled
    - Voting deadline passed -> confirmed
    - Confirmed and past the event date -> completed

    The interval is jittered (±20%) so several instances do not sweep in
    lockstep. Errors are logged and the loop continues.
    """
    base_interval = settings.sweep_interval_seconds
    logger.info(f"Lifecycle sweep loop started (base interval: {base_interval}s with ±20% jitter)")

    while not _shutdown_event.is_set():
        try:
            counts = await run_sweep_once()
            if any(counts.values()):
                logger.info(
                    f"Lifecycle sweep: {counts['cancelled']} cancelled, "
                    f"{counts['confirmed']} confirmed, {counts['completed']} completed"
                )
        except Exception as e:
            logger.error(f"Lifecycle sweep error: {e}", exc_info=True)

        jittered_interval = base_interval * random.uniform(0.8, 1.2)

        # Wait for next sweep interval or shutdown
        try:
            await asyncio.wait_for(_shutdown_event.wait(), timeout=jittered_interval)
        except asyncio.TimeoutError:
            pass

    logger.info("Lifecycle sweep loop stopped")


async def start_lifecycle_sweep():
    """Start the lifecycle sweep background task."""
    global _sweep_task, _shutdown_event

    _shutdown_event = asyncio.Event()
    _sweep_task = asyncio.create_task(lifecycle_sweep_loop())


async def stop_lifecycle_sweep():
    """Stop the lifecycle sweep background task."""
    global _sweep_task, _shutdown_event

    if _shutdown_event:
        _shutdown_event.set()

    if _sweep_task:
        try:
            await asyncio.wait_for(_sweep_task, timeout=10.0)
        except asyncio.TimeoutError:
            logger.warning("Lifecycle sweep task did not stop gracefully, cancelling")
            _sweep_task.cancel()
            try:
                await _sweep_task
            except asyncio.CancelledError:
                pass

    _sweep_task = None
    _shutdown_event = None
