# szq/cli.py
"""Headless front-end: compress folders from the command line.

Exit codes:
  0    every folder compressed
  2    at least one folder failed
  130  canceled with Ctrl-C (running folders are allowed to finish)
"""
import argparse
import logging
import sys
import threading

from .models.events import BatchFinished, LogLine, ProgressUpdate
from .utils.paths import make_jobs
from .utils.settings import clamp_threads, load_settings
from .workers.compressor import CompressionInvoker, SevenZipTool, tool_from_settings
from .workers.scheduler import BatchScheduler
from .workers.sink import EventSink

log = logging.getLogger(__name__)


def build_parser(settings: dict) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="szq-cli",
        description="Compress each folder into a sibling archive with 7-Zip, then delete the folder.",
    )
    p.add_argument("folders", nargs="+", help="Folders to compress.")
    p.add_argument("-j", "--threads", type=int, default=settings.get("default_threads", 2),
                   help=f"Folders compressed at once (1..{settings.get('max_threads', 10)}).")
    p.add_argument("--7z", dest="sevenzip", default=None, help="Path to the 7z executable.")
    p.add_argument("--ext", default=None, help="Archive type / extension (default from settings).")
    p.add_argument("-q", "--quiet", action="store_true", help="Only print progress and the summary.")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return p


def _print_event(ev, quiet: bool, out) -> None:
    if isinstance(ev, LogLine):
        if not quiet:
            print(f"[{ev.source}] {ev.text}" if ev.source else ev.text, file=out)
    elif isinstance(ev, ProgressUpdate):
        print(f"Progress: {ev.percent}%", file=out)
    elif isinstance(ev, BatchFinished):
        state = "canceled" if ev.canceled else "done"
        print(f"{state}: {ev.succeeded} succeeded, {ev.failed} failed", file=out)


def run(argv=None, settings: dict | None = None, tool: SevenZipTool | None = None, out=None) -> int:
    settings = settings if settings is not None else load_settings()
    args = build_parser(settings).parse_args(argv)
    out = out or sys.stdout
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    if args.sevenzip:
        settings = {**settings, "sevenzip_path": args.sevenzip}
    if args.ext:
        settings = {**settings, "archive_ext": args.ext}
    tool = tool or tool_from_settings(settings)

    threads = clamp_threads(args.threads, settings)
    if threads != args.threads:
        log.warning("thread count %d clamped to %d", args.threads, threads)
    jobs = make_jobs(args.folders, settings.get("archive_ext", "7z"))

    sink = EventSink()
    scheduler = BatchScheduler(CompressionInvoker(tool, sink), sink)
    result = {}
    done = threading.Event()

    def _batch():
        try:
            result["summary"] = scheduler.run(jobs, threads)
        finally:
            done.set()

    threading.Thread(target=_batch, name="szq-batch", daemon=True).start()
    # The main thread only waits and prints, so Ctrl-C is seen here and turned into cancel()
    while not done.is_set():
        try:
            for ev in sink.drain():
                _print_event(ev, args.quiet, out)
            done.wait(0.1)
        except KeyboardInterrupt:
            print("Cancel requested, waiting for running folders…", file=out)
            scheduler.cancel()
    for ev in sink.drain():
        _print_event(ev, args.quiet, out)

    summary = result["summary"]
    if summary.canceled:
        return 130
    return 2 if summary.failed else 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
