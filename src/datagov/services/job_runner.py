"""Job runner — completes simulated job runs in the background.

Learn: There is no real execution engine. A run is created in "running"
state by JobService.run_job(); the runner waits `delay` seconds and then
marks it completed:

  running → completed (result={"message": ...}) | failed (error="Run cancelled")

Each scheduled run is one asyncio task owned by the runner, so the
contract is explicit instead of a stray timer:
- completion is a single conditional UPDATE (only while still "running"),
  so a cancelled run can never flip to completed afterwards
- cancel(run_id) stops a pending completion and marks the run failed
- drain() waits for everything pending; shutdown() cancels it all
- no retries, and no ordering between different runs

Each completion gets its own DB session, detached from the request that
scheduled it.
"""

import asyncio
import uuid

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from datagov.db.models import JobRun, utcnow

logger = structlog.get_logger()

COMPLETED_RESULT = {"message": "Job completed successfully"}
CANCELLED_ERROR = "Run cancelled"


class JobRunner:
    """Owns the pending completions of simulated job runs.

    Usage:
        runner = JobRunner(async_session_factory, delay=1.0)
        runner.schedule(run.id)
        ...
        await runner.shutdown()
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        delay: float = 1.0,
    ):
        self.session_factory = session_factory
        self.delay = delay
        self._tasks: dict[uuid.UUID, asyncio.Task] = {}

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def schedule(self, run_id: uuid.UUID) -> asyncio.Task:
        """Complete `run_id` after the configured delay."""
        task = asyncio.create_task(self._complete_later(run_id))
        self._tasks[run_id] = task
        task.add_done_callback(lambda _t: self._tasks.pop(run_id, None))
        return task

    async def _complete_later(self, run_id: uuid.UUID) -> None:
        await asyncio.sleep(self.delay)
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    update(JobRun)
                    .where(JobRun.id == run_id, JobRun.status == "running")
                    .values(
                        status="completed",
                        completed_at=utcnow(),
                        result=COMPLETED_RESULT,
                    )
                )
                await db.commit()
        except Exception:
            # Nobody awaits this task, so failures are logged here
            logger.exception("job_run.complete_failed", run_id=str(run_id))
            return

        if result.rowcount:
            logger.info("job_run.completed", run_id=str(run_id))
        else:
            logger.info("job_run.complete_skipped", run_id=str(run_id))

    async def cancel(self, run_id: uuid.UUID) -> bool:
        """Stop a pending completion and mark the run failed.

        Returns False if nothing was pending for `run_id`.
        """
        task = self._tasks.pop(run_id, None)
        if task is None or task.done():
            return False

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

        async with self.session_factory() as db:
            await db.execute(
                update(JobRun)
                .where(JobRun.id == run_id, JobRun.status == "running")
                .values(status="failed", completed_at=utcnow(), error=CANCELLED_ERROR)
            )
            await db.commit()

        logger.info("job_run.cancelled", run_id=str(run_id))
        return True

    async def drain(self) -> None:
        """Wait until every scheduled completion has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel everything still pending (those runs end up failed)."""
        pending = list(self._tasks)
        for run_id in pending:
            await self.cancel(run_id)
        if pending:
            logger.info("job_runner.stopped", cancelled=len(pending))
