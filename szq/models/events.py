# szq/models/events.py
from dataclasses import dataclass

from .job import Job, Outcome


@dataclass(frozen=True)
class ProgressUpdate:
    percent: int  # 0..100, non-decreasing within one batch


@dataclass(frozen=True)
class LogLine:
    text: str
    source: str | None = None  # folder name for 7z output, None for batch messages


@dataclass(frozen=True)
class JobFinished:
    job: Job
    outcome: Outcome


@dataclass(frozen=True)
class BatchFinished:
    succeeded: int
    failed: int
    canceled: bool
