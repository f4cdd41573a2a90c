import asyncio

import pytest

from core.cleanup import CleanupScheduler
from model.job import JobRequest
from repository.job_repository import JobRepository


def _finished_job(jobs: JobRepository, artifacts):
    job = jobs.create(JobRequest(script="x"), base_url="http://x", now=0)
    artifacts.output_path(job.token).write_text("obfuscated")
    return job


class TestCleanupScheduler:
    @pytest.mark.asyncio
    async def test_purges_record_and_output_after_delay(self, artifacts) -> None:
        jobs = JobRepository()
        scheduler = CleanupScheduler(jobs, artifacts, delay=0.05)
        job = _finished_job(jobs, artifacts)

        scheduler.arm(job)
        assert job.id in jobs
        assert job.id in scheduler

        await asyncio.sleep(0.15)

        assert job.id not in jobs
        assert not artifacts.output_path(job.token).exists()
        assert len(scheduler) == 0

    @pytest.mark.asyncio
    async def test_missing_output_is_fine(self, artifacts) -> None:
        jobs = JobRepository()
        scheduler = CleanupScheduler(jobs, artifacts, delay=0.01)
        job = jobs.create(JobRequest(script="x"), base_url="http://x", now=0)

        scheduler.arm(job)
        await asyncio.sleep(0.05)

        assert job.id not in jobs

    @pytest.mark.asyncio
    async def test_second_arm_keeps_first_timer(self, artifacts) -> None:
        jobs = JobRepository()
        scheduler = CleanupScheduler(jobs, artifacts, delay=0.05)
        job = _finished_job(jobs, artifacts)

        scheduler.arm(job)
        scheduler.arm(job)

        assert len(scheduler) == 1
        await asyncio.sleep(0.15)
        assert job.id not in jobs

    @pytest.mark.asyncio
    async def test_cancel_all_keeps_records(self, artifacts) -> None:
        jobs = JobRepository()
        scheduler = CleanupScheduler(jobs, artifacts, delay=0.05)
        a = _finished_job(jobs, artifacts)
        b = _finished_job(jobs, artifacts)
        scheduler.arm(a)
        scheduler.arm(b)

        assert scheduler.cancel_all() == 2
        await asyncio.sleep(0.1)

        assert a.id in jobs
        assert b.id in jobs
        assert not scheduler.cancel(a.id)
