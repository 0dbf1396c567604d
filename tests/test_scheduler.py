import threading
import time

import pytest

from core.errors import ExtractionCancelled, RecognitionUnavailableError
from core.models.domain import RecognitionOutput, RecognitionTask
from core.recognition.cancellation import CancellationToken
from core.recognition.progress import ProgressTracker
from core.recognition.scheduler import RecognitionScheduler
from tests.fakes import EngineFactory, FakeEngine, constant, variant_with_marker


def make_tasks(count: int):
    return [RecognitionTask(task_id=i, variant=variant_with_marker(i)) for i in range(count)]


def marker_echo(image):
    marker = int(image[0, 0, 0])
    if marker in (3, 7):
        raise RuntimeError(f"engine crashed on {marker}")
    return RecognitionOutput(text=f"text {marker}", confidence=0.8)


def test_failing_tasks_are_skipped():
    with RecognitionScheduler(EngineFactory(marker_echo), pool_size=2) as scheduler:
        batch = scheduler.run(make_tasks(10))

    assert len(batch.results) == 8
    assert len(batch.failures) == 2
    assert [r.task.task_id for r in batch.results] == [0, 1, 2, 4, 5, 6, 8, 9]
    assert [r.text for r in batch.results][:2] == ["text 0", "text 1"]
    assert sorted(f.task.task_id for f in batch.failures) == [3, 7]
    assert "engine crashed" in batch.failures[0].error


def test_concurrency_never_exceeds_pool_size():
    active = 0
    peak = 0
    lock = threading.Lock()

    def responder(image):
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        time.sleep(0.01)
        with lock:
            active -= 1
        return RecognitionOutput(text="x", confidence=1.0)

    with RecognitionScheduler(EngineFactory(responder), pool_size=2) as scheduler:
        batch = scheduler.run(make_tasks(12))

    assert len(batch.results) == 12
    assert 1 <= peak <= 2


def test_engines_are_created_once_and_reused():
    factory = EngineFactory(constant("ok"))
    scheduler = RecognitionScheduler(factory, pool_size=2)
    scheduler.run(make_tasks(5))
    scheduler.run(make_tasks(5))
    scheduler.shutdown()

    assert len(factory.engines) == 2
    assert sum(engine.calls for engine in factory.engines) == 10
    assert all(engine.closed for engine in factory.engines)


def test_unavailable_engine_raises():
    scheduler = RecognitionScheduler(EngineFactory(constant("ok"), available=False), pool_size=2)
    with pytest.raises(RecognitionUnavailableError):
        scheduler.run(make_tasks(1))
    assert not scheduler.initialized


def test_factory_errors_become_unavailability():
    def factory():
        raise OSError("missing binary")

    with pytest.raises(RecognitionUnavailableError):
        RecognitionScheduler(factory).ensure_initialized()


def test_empty_batch_does_not_start_pool():
    factory = EngineFactory(constant("ok"))
    scheduler = RecognitionScheduler(factory)
    batch = scheduler.run([])
    assert batch.results == [] and batch.failures == []
    assert factory.engines == []


def test_results_are_stripped_and_confidence_clamped():
    factory = EngineFactory(lambda image: RecognitionOutput(text="  Zyn \n", confidence=1.7))
    with RecognitionScheduler(factory, pool_size=1) as scheduler:
        result = scheduler.run(make_tasks(1)).results[0]
    assert result.text == "Zyn"
    assert result.confidence == 1.0


def test_batch_progress_reaches_completion():
    seen = []
    with RecognitionScheduler(EngineFactory(constant("ok")), pool_size=2) as scheduler:
        scheduler.run(make_tasks(6), on_progress=seen.append)
    assert seen
    assert all(0.0 <= value <= 1.0 for value in seen)
    assert seen[-1] == 1.0


def test_tracker_progress_is_monotonic():
    reported = []
    tracker = ProgressTracker(reported.append)
    with RecognitionScheduler(EngineFactory(constant("ok"), delay=0.002), pool_size=2) as scheduler:
        scheduler.run(make_tasks(8), on_progress=tracker.stage_callback("full_image"))
    tracker.complete()

    assert reported == sorted(reported)
    assert len(reported) == len(set(reported))
    assert reported[-1] == 100


def test_tracker_ignores_broken_listener():
    def listener(value):
        raise RuntimeError("listener failed")

    tracker = ProgressTracker(listener)
    assert tracker.report(40) == 40
    assert tracker.report(10) == 40
    assert tracker.history == [40]


def test_cancelled_batch_raises():
    token = CancellationToken()
    token.cancel()
    factory = EngineFactory(constant("ok"))
    with RecognitionScheduler(factory, pool_size=2) as scheduler:
        with pytest.raises(ExtractionCancelled):
            scheduler.run(make_tasks(4), cancel=token)
    assert sum(engine.calls for engine in factory.engines) == 0


def test_cancel_during_batch_stops_remaining_tasks():
    token = CancellationToken()

    def responder(image):
        token.cancel()
        return RecognitionOutput(text="x", confidence=1.0)

    factory = EngineFactory(responder)
    with RecognitionScheduler(factory, pool_size=1) as scheduler:
        with pytest.raises(ExtractionCancelled):
            scheduler.run(make_tasks(5), cancel=token)
    assert sum(engine.calls for engine in factory.engines) == 1


def test_pool_size_must_be_positive():
    with pytest.raises(ValueError):
        RecognitionScheduler(EngineFactory(constant("ok")), pool_size=0)


def test_concurrent_first_use_builds_pool_once():
    factory = EngineFactory(constant("ok"))

    def slow_factory():
        time.sleep(0.01)
        return factory()

    scheduler = RecognitionScheduler(slow_factory, pool_size=3)
    start = threading.Barrier(16)
    errors = []

    def initialize():
        try:
            start.wait()
            scheduler.ensure_initialized()
        except Exception as exc:  # noqa: BLE001 - collected for the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=initialize) for _ in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    scheduler.shutdown()

    assert errors == []
    assert len(factory.engines) == 3


def test_partial_pool_is_closed_when_startup_fails():
    built = []

    def factory():
        engine = FakeEngine(constant("ok"), available=len(built) < 2)
        built.append(engine)
        return engine

    scheduler = RecognitionScheduler(factory, pool_size=3)
    with pytest.raises(RecognitionUnavailableError):
        scheduler.ensure_initialized()

    assert len(built) == 3
    assert built[0].closed and built[1].closed
    assert not scheduler.initialized


def test_run_after_shutdown_restarts_pool():
    factory = EngineFactory(constant("ok"))
    scheduler = RecognitionScheduler(factory, pool_size=1)
    scheduler.run(make_tasks(1))
    scheduler.shutdown()

    batch = scheduler.run(make_tasks(2))
    scheduler.shutdown()

    assert len(batch.results) == 2
    assert len(factory.engines) == 2
