# szq/workers/qt_bridge.py
from PySide6.QtCore import QObject, Signal

from ..models.job import Job
from .compressor import CompressionInvoker, tool_from_settings
from .scheduler import BatchScheduler
from .sink import EventSink


class BatchWorker(QObject):
    """Runs one BatchScheduler.run() on the QThread it is moved to."""
    finished = Signal(object)  # BatchSummary

    def __init__(self, settings: dict, sink: EventSink):
        super().__init__()
        self.settings = settings
        self.sink = sink
        self.jobs_to_run: list[Job] = []
        self.threads = 1
        self.scheduler: BatchScheduler | None = None

    def set_batch(self, jobs: list[Job], threads: int):
        self.jobs_to_run, self.threads = jobs, threads
        invoker = CompressionInvoker(tool_from_settings(self.settings), self.sink)
        self.scheduler = BatchScheduler(invoker, self.sink)

    def stop(self):
        if self.scheduler:
            self.scheduler.cancel()

    def run(self):
        summary = self.scheduler.run(self.jobs_to_run, self.threads)
        self.finished.emit(summary)
