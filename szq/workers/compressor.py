# szq/workers/compressor.py
import logging
import shlex
import subprocess
import sys
from pathlib import Path

from ..models.job import FailureKind, Job, JobStatus, Outcome
from ..utils.paths import delete_tree
from .sink import EventSink

log = logging.getLogger(__name__)


class SevenZipTool:
    """How to call the external archiver. Override command() for another tool."""

    def __init__(self, executable: str = "7z", archive_type: str = "7z",
                 level: int = 9, extra_args: str = ""):
        self.executable = executable
        self.archive_type = archive_type
        self.level = level
        self.extra_args = extra_args

    def command(self, source: Path, output: Path) -> list[str]:
        cmd = [self.executable, "a", f"-t{self.archive_type}", f"-mx={int(self.level)}"]
        if extra := (self.extra_args or "").strip():
            cmd.extend(shlex.split(extra))
        cmd.extend([str(output), str(source)])
        return cmd

    def launch(self, source: Path, output: Path) -> subprocess.Popen:
        # Own process group/session: a Ctrl-C aimed at us must not kill a running archive
        if sys.platform == "win32":
            detach = {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
        else:
            detach = {"start_new_session": True}
        return subprocess.Popen(
            self.command(source, output),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            text=True,
            errors="replace",
            bufsize=1,
            **detach,
        )


def tool_from_settings(settings: dict) -> SevenZipTool:
    return SevenZipTool(
        executable=settings.get("sevenzip_path") or "7z",
        archive_type=settings.get("archive_ext") or "7z",
        level=int(settings.get("compression_level", 9)),
        extra_args=settings.get("extra_args", ""),
    )


class CompressionInvoker:
    """Runs one archiver process for one job and deletes the source on success."""

    def __init__(self, tool: SevenZipTool, sink: EventSink):
        self.tool = tool
        self.sink = sink

    def invoke(self, job: Job) -> Outcome:
        job.status = JobStatus.RUNNING
        name = job.name
        cmd = self.tool.command(job.source_path, job.output_path)
        job.cmdline = " ".join(shlex.quote(c) for c in cmd)
        self.sink.log(f"$ {job.cmdline}", name)

        try:
            proc = self.tool.launch(job.source_path, job.output_path)
        except OSError as e:
            # FileNotFoundError / PermissionError: tool missing or not executable
            return self._fail(job, Outcome.failed(
                FailureKind.LAUNCH, f"could not start {cmd[0]}: {e}"))

        try:
            with proc:
                for line in proc.stdout:
                    if line := line.rstrip("\r\n"):
                        self.sink.log(line, name)
                rc = proc.wait()
        except InterruptedError as e:
            return self._fail(job, Outcome.failed(FailureKind.INTERRUPTED, str(e) or "interrupted"))

        if rc != 0:
            self.sink.log(f"Error compressing folder {name} with exit code {rc}", name)
            return self._fail(job, Outcome.failed(
                FailureKind.EXIT_STATUS, f"exit code {rc}", exit_code=rc), logged=True)

        job.exit_code = 0
        errors = delete_tree(job.source_path)
        if errors:
            job.cleanup_errors = errors
            self.sink.log(f"Error deleting folder {job.source_path}\n" + "\n".join(errors), name)
            self.sink.log(f"Folder {name} compressed; source folder could not be fully deleted.", name)
        else:
            self.sink.log(f"Folder {name} compressed and deleted successfully.", name)
        job.status = JobStatus.SUCCEEDED
        return Outcome.succeeded(errors)

    def _fail(self, job: Job, outcome: Outcome, logged: bool = False) -> Outcome:
        job.status = JobStatus.FAILED
        job.exit_code = outcome.exit_code
        job.error = outcome.reason
        if not logged:
            self.sink.log(f"Error compressing folder {job.name}\n{outcome.reason}", job.name)
        log.info("job %s failed: %s", job.source_path, outcome.reason)
        return outcome
