import threading

from szq.models.events import LogLine, ProgressUpdate
from szq.models.job import BatchSummary, FailureKind, Outcome


def test_concurrent_producers_lose_nothing(sink):
    def produce(tag):
        for i in range(200):
            sink.log(f"{tag}-{i}", tag)

    threads = [threading.Thread(target=produce, args=(f"t{n}",)) for n in range(8)]
    for t in threads: t.start()
    for t in threads: t.join()

    events = sink.drain()
    assert len(events) == 8 * 200
    # per-producer order survives even though producers interleave
    for n in range(8):
        mine = [ev.text for ev in events if ev.source == f"t{n}"]
        assert mine == [f"t{n}-{i}" for i in range(200)]


def test_drain_respects_limit_and_order(sink):
    sink.progress(10); sink.log("hello"); sink.progress(20)
    assert sink.drain(limit=2) == [ProgressUpdate(10), LogLine("hello")]
    assert sink.drain() == [ProgressUpdate(20)]
    assert sink.drain() == []


def test_outcome_and_summary_shapes():
    assert str(Outcome.succeeded()) == "Succeeded"
    assert str(Outcome.failed(FailureKind.LAUNCH, "no 7z")) == "Failed(no 7z)"
    s = BatchSummary(succeeded=3, failed=1, not_started=6, canceled=True)
    assert (s.completed, s.total) == (4, 10)
    assert BatchSummary() == BatchSummary(0, 0, 0, False)
