import sys
import threading
import time
from pathlib import Path

import pytest

from szq.models.job import FailureKind, Job, JobStatus, Outcome
from szq.workers.compressor import SevenZipTool
from szq.workers.sink import EventSink

# Stands in for 7z: prints a few lines, writes the archive, exits with the requested code
FAKE_7Z = r"""
import pathlib, sys
out, src, code = sys.argv[1], sys.argv[2], int(sys.argv[3])
print("7-Zip (fake) 23.01", flush=True)
print("Scanning the drive:", flush=True)
for p in sorted(pathlib.Path(src).rglob("*")):
    print("+ " + p.name, flush=True)
if code == 0:
    pathlib.Path(out).write_bytes(b"7z\xbc\xaf\x27\x1c")
    print("Everything is Ok", flush=True)
else:
    print("ERROR: simulated failure", file=sys.stderr, flush=True)
sys.exit(code)
"""


class FakeSevenZip(SevenZipTool):
    def __init__(self, fail: dict[str, int] | None = None):
        super().__init__(executable=sys.executable)
        self.fail = fail or {}

    def command(self, source: Path, output: Path) -> list[str]:
        code = self.fail.get(Path(source).name, 0)
        return [sys.executable, "-c", FAKE_7Z, str(output), str(source), str(code)]


class RecordingInvoker:
    """In-process invoker that tracks how many jobs run at the same time."""

    def __init__(self, delay: float = 0.0, fail: set[str] = frozenset(), raise_on: set[str] = frozenset()):
        self.delay = delay
        self.fail = set(fail)
        self.raise_on = set(raise_on)
        self.lock = threading.Lock()
        self.running = 0
        self.max_running = 0
        self.started: list[str] = []
        self.finished: list[str] = []

    def _work(self, job: Job) -> None:
        if self.delay:
            time.sleep(self.delay)

    def invoke(self, job: Job) -> Outcome:
        with self.lock:
            job.status = JobStatus.RUNNING
            self.running += 1
            self.max_running = max(self.max_running, self.running)
            self.started.append(job.name)
        try:
            self._work(job)
            if job.name in self.raise_on:
                raise RuntimeError("boom")
            if job.name in self.fail:
                job.status = JobStatus.FAILED
                return Outcome.failed(FailureKind.EXIT_STATUS, "exit code 2", exit_code=2)
            job.status = JobStatus.SUCCEEDED
            return Outcome.succeeded()
        finally:
            with self.lock:
                self.running -= 1
                self.finished.append(job.name)


class GateInvoker(RecordingInvoker):
    """Blocks every job until release() so tests can cancel mid-batch."""

    def __init__(self, expect_started: int):
        super().__init__()
        self.expect_started = expect_started
        self.all_started = threading.Event()
        self.gate = threading.Event()

    def _work(self, job: Job) -> None:
        with self.lock:
            if len(self.started) >= self.expect_started:
                self.all_started.set()
        assert self.gate.wait(10), "gate never released"

    def release(self):
        self.gate.set()


@pytest.fixture
def sink():
    return EventSink()


@pytest.fixture
def make_folder(tmp_path):
    def _make(name: str, files: int = 2) -> Path:
        d = tmp_path / name
        (d / "sub").mkdir(parents=True)
        for i in range(files):
            (d / f"file{i}.txt").write_text(f"{name} {i}\n" * 50)
        (d / "sub" / "nested.bin").write_bytes(b"\0" * 128)
        return d
    return _make


@pytest.fixture
def fake_7z():
    return FakeSevenZip


@pytest.fixture
def recording_invoker():
    return RecordingInvoker


@pytest.fixture
def gate_invoker():
    return GateInvoker


def make_plain_jobs(n: int, tmp_path: Path) -> list[Job]:
    return [Job(tmp_path / f"f{i:02d}", tmp_path / f"f{i:02d}.7z") for i in range(n)]


@pytest.fixture
def plain_jobs(tmp_path):
    return lambda n: make_plain_jobs(n, tmp_path)
