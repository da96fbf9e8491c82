# szq/workers/sink.py
import logging
import queue

from ..models.events import LogLine, ProgressUpdate

log = logging.getLogger(__name__)


class EventSink:
    """
    Append-only event channel between the worker pool and whoever displays it.

    Any number of threads may put(); a single consumer drains. Events come out
    in the order they were put.
    """

    def __init__(self):
        self._q: queue.Queue = queue.Queue()

    def put(self, event) -> None:
        self._q.put(event)

    def log(self, text: str, source: str | None = None) -> None:
        log.debug("%s%s", f"[{source}] " if source else "", text)
        self._q.put(LogLine(text, source))

    def progress(self, percent: int) -> None:
        self._q.put(ProgressUpdate(percent))

    def drain(self, limit: int | None = None) -> list:
        out = []
        while limit is None or len(out) < limit:
            try:
                out.append(self._q.get_nowait())
            except queue.Empty:
                break
        return out
