# szq/models/job.py
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class JobStatus(str, Enum):
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    NOT_STARTED = "NotStarted"

    @property
    def terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED)


class FailureKind(str, Enum):
    LAUNCH = "launch"            # 7z could not be started
    EXIT_STATUS = "exit_status"  # 7z ran and returned non-zero
    INTERRUPTED = "interrupted"  # wait for 7z was interrupted
    ERROR = "error"              # anything else caught at the job boundary


@dataclass
class Job:
    source_path: Path
    output_path: Path
    status: JobStatus = JobStatus.PENDING
    exit_code: int | None = None
    error: str | None = None
    cleanup_errors: list[str] = field(default_factory=list)
    cmdline: str | None = None

    @property
    def name(self) -> str:
        return self.source_path.name


@dataclass
class Outcome:
    ok: bool
    kind: FailureKind | None = None
    exit_code: int | None = None
    reason: str = ""
    cleanup_errors: list[str] = field(default_factory=list)

    @classmethod
    def succeeded(cls, cleanup_errors: list[str] | None = None) -> "Outcome":
        return cls(ok=True, exit_code=0, cleanup_errors=list(cleanup_errors or []))

    @classmethod
    def failed(cls, kind: FailureKind, reason: str, exit_code: int | None = None) -> "Outcome":
        return cls(ok=False, kind=kind, exit_code=exit_code, reason=reason)

    def __str__(self) -> str:
        if self.ok:
            return "Succeeded"
        if self.exit_code is not None:
            return f"Failed({self.exit_code})"
        return f"Failed({self.reason})"


@dataclass
class BatchSummary:
    succeeded: int = 0
    failed: int = 0
    not_started: int = 0
    canceled: bool = False

    @property
    def completed(self) -> int:
        return self.succeeded + self.failed

    @property
    def total(self) -> int:
        return self.completed + self.not_started
