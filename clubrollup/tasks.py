from typing import Any
from uuid import UUID

from arq import create_pool
from arq.connections import ArqRedis, RedisSettings
from arq.jobs import Job

from clubrollup.core.config import settings

# Redis connection settings
redis_settings = RedisSettings.from_dsn(settings.REDIS_URL)


async def get_redis_pool() -> ArqRedis:
    """Get or create Redis pool for arq"""
    return await create_pool(redis_settings)


async def enqueue_task(task_name: str, *args: Any, **kwargs: Any) -> Job:
    """
    Enqueue a task to the arq worker.

    Args:
        task_name: Name of the task function
        *args: Positional arguments for the task
        **kwargs: Keyword arguments for the task

    Returns:
        Job object from arq
    """
    pool = await get_redis_pool()
    try:
        job = await pool.enqueue_job(task_name, *args, **kwargs)
        return job  # type: ignore[return-value]
    finally:
        await pool.close()


async def enqueue_nightly_recompute() -> Job:
    """Enqueue the current/lookback month recomputation outside its schedule."""
    return await enqueue_task("recompute_monthly_summaries_task")


async def enqueue_recompute_window(
    start_year: int,
    start_month: int,
    end_year: int,
    end_month: int,
    amenity_ids: list[UUID] | None = None,
) -> Job:
    """Enqueue a recomputation of an inclusive month window."""
    return await enqueue_task(
        "recompute_window_task",
        start_year,
        start_month,
        end_year,
        end_month,
        amenity_ids=[str(a) for a in amenity_ids] if amenity_ids is not None else None,
    )
