# szq/workers/scheduler.py
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Protocol, Sequence

from ..models.events import BatchFinished, JobFinished
from ..models.job import BatchSummary, FailureKind, Job, JobStatus, Outcome
from .sink import EventSink

log = logging.getLogger(__name__)


class Invoker(Protocol):
    def invoke(self, job: Job) -> Outcome: ...


class CancelToken:
    """Cooperative cancellation flag, only looked at before a job is started."""

    def __init__(self):
        self._evt = threading.Event()

    def cancel(self) -> None:
        self._evt.set()

    @property
    def cancelled(self) -> bool:
        return self._evt.is_set()


@dataclass
class BatchRun:
    jobs: list[Job]
    limit: int
    token: CancelToken
    completed: int = 0
    running: int = 0
    peak: int = 0
    cancel_seen: bool = False  # cancel() observed before the last job settled
    outcomes: dict[int, Outcome] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock)

    @property
    def total(self) -> int:
        return len(self.jobs)


class BatchScheduler:
    """
    Runs compression jobs on a fixed-size thread pool.

    run() blocks until every dispatched job has finished and returns a
    BatchSummary. cancel() may be called from any thread while run() is in
    flight: jobs already running finish (including source deletion), jobs not
    yet picked up by a pool thread are marked NotStarted. A cancel() issued
    before run() is applied to that next run.

    The same source folder appearing twice is not detected; both jobs run.
    """

    def __init__(self, invoker: Invoker, sink: EventSink):
        self.invoker = invoker
        self.sink = sink
        self._token = CancelToken()
        self.observed_peak = 0

    def cancel(self) -> None:
        if not self._token.cancelled:
            log.info("cancel requested")
        self._token.cancel()

    def run(self, jobs: Sequence[Job], concurrency_limit: int,
            token: CancelToken | None = None) -> BatchSummary:
        if int(concurrency_limit) < 1:
            raise ValueError(f"concurrency limit must be >= 1, got {concurrency_limit}")
        if token is not None:
            self._token = token
        try:
            return self._run(list(jobs), int(concurrency_limit), self._token)
        finally:
            # cancel() only ever applies to the batch it was called during (or before)
            self._token = CancelToken()

    def _run(self, jobs: list[Job], limit: int, token: CancelToken) -> BatchSummary:
        self.observed_peak = 0
        if not jobs:
            self.sink.put(BatchFinished(0, 0, False))
            return BatchSummary()

        batch = BatchRun(jobs=jobs, limit=limit, token=token)
        self.sink.log(f"Compressing {batch.total} folder(s) with {batch.limit} thread(s)")
        log.info("batch start: %d jobs, limit %d", batch.total, batch.limit)

        with ThreadPoolExecutor(max_workers=batch.limit, thread_name_prefix="szq") as pool:
            futures = [pool.submit(self._run_one, batch, i) for i in range(batch.total)]
            wait(futures)

        self.observed_peak = batch.peak
        return self._finish(batch)

    def _run_one(self, batch: BatchRun, index: int) -> None:
        job = batch.jobs[index]
        # Dispatch boundary: the only place cancellation is honoured
        with batch.lock:
            if batch.token.cancelled:
                job.status = JobStatus.NOT_STARTED
                return
            batch.running += 1
            batch.peak = max(batch.peak, batch.running)

        try:
            outcome = self.invoker.invoke(job)
        except Exception as e:
            log.exception("invoker raised for %s", job.source_path)
            outcome = Outcome.failed(FailureKind.ERROR, f"{type(e).__name__}: {e}")
            job.status = JobStatus.FAILED
            job.error = outcome.reason

        if not outcome.ok:
            self.sink.log(f"Job failed: {job.source_path}: {outcome.reason}")

        with batch.lock:
            batch.running -= 1
            if batch.token.cancelled:
                batch.cancel_seen = True
            batch.outcomes[index] = outcome
            batch.completed += 1
            percent = batch.completed * 100 // batch.total
            # Emitted under the lock so the consumer sees progress in counter order
            self.sink.progress(percent)
            self.sink.put(JobFinished(job, outcome))

    def _finish(self, batch: BatchRun) -> BatchSummary:
        succeeded = sum(1 for o in batch.outcomes.values() if o.ok)
        failed = len(batch.outcomes) - succeeded
        not_started = batch.total - len(batch.outcomes)
        # A cancel() that lands after the last job settled does not count
        summary = BatchSummary(succeeded=succeeded, failed=failed, not_started=not_started,
                               canceled=not_started > 0 or batch.cancel_seen)

        if summary.canceled:
            self.sink.log(f"Compression canceled. {not_started} folder(s) not started.")
        elif failed:
            self.sink.log(f"Finished with {failed} failed job(s), {succeeded} succeeded.")
        else:
            self.sink.log("All folders compressed successfully.")
        log.info("batch done: %s", summary)
        self.sink.put(BatchFinished(summary.succeeded, summary.failed, summary.canceled))
        return summary
