"""
Matching engine Celery tasks.

Runs an event's matching off the request path when an organizer asks
for a background run.
"""

import asyncio
import logging

from app.tasks.celery_app import celery_app
from app.matching_engine.engine import matching_engine

logger = logging.getLogger(__name__)


@celery_app.task(name="app.tasks.matching_tasks.run_event_matching")
def run_event_matching(event_id: str):
    """
    Execute a matching run for *event_id*.

    Celery tasks are synchronous, so we run the async engine
    in an event loop.
    """
    logger.info("Starting matching run for event %s", event_id)
    loop = asyncio.new_event_loop()
    try:
        result = loop.run_until_complete(matching_engine.run_for_event(event_id))
        if result.get("skipped"):
            logger.info("Matching run for event %s skipped, lock held", event_id)
            return result
        logger.info(
            "Matching run %s completed: %d pairs",
            result["run_id"],
            result["results"]["total_pairs"],
        )
        return result
    except Exception:
        logger.exception("Matching run for event %s failed", event_id)
        raise
    finally:
        loop.close()
