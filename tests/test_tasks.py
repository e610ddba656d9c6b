"""Tests for background tasks."""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import UUID

import pytest

from clubrollup.tasks import (
    enqueue_nightly_recompute,
    enqueue_recompute_window,
    enqueue_task,
    get_redis_pool,
)


class TestTasks:
    @pytest.mark.asyncio
    async def test_get_redis_pool(self):
        """Test get_redis_pool creates a pool."""
        mock_pool = MagicMock()

        with patch("clubrollup.tasks.create_pool", new_callable=AsyncMock) as mock_create:
            mock_create.return_value = mock_pool

            result = await get_redis_pool()

            assert result == mock_pool
            mock_create.assert_called_once()

    @pytest.mark.asyncio
    async def test_enqueue_task(self):
        """Test enqueue_task enqueues a job and closes the pool."""
        mock_job = MagicMock()
        mock_job.job_id = "job-123"

        mock_pool = MagicMock()
        mock_pool.enqueue_job = AsyncMock(return_value=mock_job)
        mock_pool.close = AsyncMock()

        with patch("clubrollup.tasks.get_redis_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = mock_pool

            result = await enqueue_task("my_task", "arg1", kwarg1="value1")

            assert result == mock_job
            mock_pool.enqueue_job.assert_called_once_with("my_task", "arg1", kwarg1="value1")
            mock_pool.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_enqueue_task_closes_pool_on_error(self):
        """Test enqueue_task closes pool even when job enqueue fails."""
        mock_pool = MagicMock()
        mock_pool.enqueue_job = AsyncMock(side_effect=Exception("Redis error"))
        mock_pool.close = AsyncMock()

        with patch("clubrollup.tasks.get_redis_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = mock_pool

            with pytest.raises(Exception, match="Redis error"):
                await enqueue_task("failing_task")

            mock_pool.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_enqueue_nightly_recompute(self):
        mock_job = MagicMock()

        with patch("clubrollup.tasks.enqueue_task", new_callable=AsyncMock) as mock_enqueue:
            mock_enqueue.return_value = mock_job

            result = await enqueue_nightly_recompute()

            assert result == mock_job
            mock_enqueue.assert_called_once_with("recompute_monthly_summaries_task")

    @pytest.mark.asyncio
    async def test_enqueue_recompute_window_serializes_ids(self):
        amenity_id = UUID("6f1c2d3e-4a5b-4c6d-8e7f-9a0b1c2d3e4f")

        with patch("clubrollup.tasks.enqueue_task", new_callable=AsyncMock) as mock_enqueue:
            await enqueue_recompute_window(2026, 1, 2026, 3, amenity_ids=[amenity_id])

            mock_enqueue.assert_called_once_with(
                "recompute_window_task",
                2026,
                1,
                2026,
                3,
                amenity_ids=["6f1c2d3e-4a5b-4c6d-8e7f-9a0b1c2d3e4f"],
            )

    @pytest.mark.asyncio
    async def test_enqueue_recompute_window_all_amenities(self):
        with patch("clubrollup.tasks.enqueue_task", new_callable=AsyncMock) as mock_enqueue:
            await enqueue_recompute_window(2026, 3, 2026, 3)

            mock_enqueue.assert_called_once_with(
                "recompute_window_task", 2026, 3, 2026, 3, amenity_ids=None
            )
