"""
Test suite for ClientDriver.

Uses a scripted transport and a recording sleep: no network, no waiting.

System role: Verification of the continuation/polling client loop
"""

import random
import threading
import uuid

import pytest

from facescan.client.driver import ClientDriver, DriverState
from facescan.client.exceptions import (
    DriverBusyError,
    DriverGaveUpError,
    JobFailedError,
    TransportError,
)
from facescan.configs.client import ClientSettings

JOB_ID = str(uuid.uuid4())


def body(status="processing", processed=0, total=4, token=None, results=None, error=None):
    return {
        "job_id": JOB_ID,
        "status": status,
        "results": results or [],
        "next_token": token,
        "processing": {
            "total": total,
            "processed": processed,
            "is_complete": status == "complete",
        },
        "error": error,
    }


def item(index, similarity=0.0):
    return {
        "item_id": f"file-{index}",
        "index": index,
        "similarity": similarity,
        "matched": similarity > 0,
    }


class ScriptedTransport:
    """Returns (or raises) the next scripted response for each call."""

    def __init__(self, analyze=(), polls=()):
        self.analyze_script = list(analyze)
        self.poll_script = list(polls)
        self.analyze_calls = []
        self.poll_calls = 0

    def analyze(self, job_id, token=None, face=None, face_content_type="image/jpeg", batch_size=None):
        self.analyze_calls.append({"token": token, "face": face, "batch_size": batch_size})
        return self._next(self.analyze_script)

    def get_job(self, job_id):
        self.poll_calls += 1
        return self._next(self.poll_script)

    @staticmethod
    def _next(script):
        outcome = script.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def settings() -> ClientSettings:
    """Provide pacing and polling policy without environment overrides."""
    return ClientSettings(
        min_interval_seconds=1.0,
        jitter_seconds=0.5,
        poll_base_seconds=1.0,
        poll_max_seconds=8.0,
        poll_backoff_factor=2.0,
        max_poll_attempts=3,
    )


@pytest.fixture
def sleeps() -> list[float]:
    """Provide a list collecting requested sleeps."""
    return []


def make_driver(transport, settings, sleeps, **kwargs):
    return ClientDriver(
        transport,
        settings=settings,
        sleep=sleeps.append,
        clock=lambda: 0.0,
        rng=random.Random(7),
        **kwargs,
    )


class TestHappyPath:
    """Test continuation until completion."""

    def test_passes_each_token_back(self, settings, sleeps):
        # Arrange
        transport = ScriptedTransport(
            analyze=[
                body(token="t0"),
                body(processed=2, token="t1", results=[item(0), item(1, 91.0)]),
                body(status="complete", processed=4, results=[item(0), item(1, 91.0), item(2), item(3)]),
            ]
        )
        driver = make_driver(transport, settings, sleeps, batch_size=2)

        # Act
        snapshot = driver.run(JOB_ID, b"face")

        # Assert
        assert [c["token"] for c in transport.analyze_calls] == [None, "t0", "t1"]
        assert all(c["face"] == b"face" for c in transport.analyze_calls)
        assert all(c["batch_size"] == 2 for c in transport.analyze_calls)
        assert snapshot.processing.is_complete is True
        assert [m.item_id for m in snapshot.matches] == ["file-1"]
        assert driver.state == DriverState.DONE
        assert transport.poll_calls == 0

    def test_reports_progress_after_every_tick(self, settings, sleeps):
        seen = []
        transport = ScriptedTransport(
            analyze=[body(token="t0"), body(status="complete", processed=4)]
        )
        driver = make_driver(transport, settings, sleeps, on_progress=seen.append)

        driver.run(JOB_ID, b"face")

        assert [(p.processed, p.is_complete) for p in seen] == [(0, False), (4, True)]

    def test_spaces_calls_with_jitter(self, settings, sleeps):
        """Test that consecutive calls wait at least the minimum interval."""
        transport = ScriptedTransport(
            analyze=[body(token="t0"), body(token="t1", processed=2), body(status="complete", processed=4)]
        )
        driver = make_driver(transport, settings, sleeps)

        driver.run(JOB_ID, b"face")

        assert len(sleeps) == 2
        assert all(1.0 <= s <= 1.5 for s in sleeps)


class TestPollingFallback:
    """Test recovery from failed continuation calls."""

    def test_resumes_from_polled_token(self, settings, sleeps):
        """Test that a lost response is recovered through a status poll."""
        # Arrange
        transport = ScriptedTransport(
            analyze=[
                body(token="t0"),
                TransportError("read timeout"),
                body(status="complete", processed=4),
            ],
            polls=[body(processed=2, token="t1")],
        )
        driver = make_driver(transport, settings, sleeps)

        # Act
        snapshot = driver.run(JOB_ID, b"face")

        # Assert
        assert [c["token"] for c in transport.analyze_calls] == [None, "t0", "t1"]
        assert transport.poll_calls == 1
        assert snapshot.processing.is_complete is True

    def test_resumes_with_same_token_when_tick_not_applied(self, settings, sleeps):
        transport = ScriptedTransport(
            analyze=[
                body(token="t0"),
                TransportError("HTTP 502", status_code=502),
                body(status="complete", processed=4),
            ],
            polls=[body(processed=0, token="t0")],
        )
        driver = make_driver(transport, settings, sleeps)

        driver.run(JOB_ID, b"face")

        assert [c["token"] for c in transport.analyze_calls] == [None, "t0", "t0"]

    def test_polling_finds_job_complete(self, settings, sleeps):
        transport = ScriptedTransport(
            analyze=[body(token="t0"), TransportError("connection reset")],
            polls=[TransportError("connection reset"), body(status="complete", processed=4)],
        )
        driver = make_driver(transport, settings, sleeps)

        snapshot = driver.run(JOB_ID, b"face")

        assert snapshot.processing.is_complete is True
        assert len(transport.analyze_calls) == 2
        assert transport.poll_calls == 2

    def test_restarts_bootstrap_when_job_still_pending(self, settings, sleeps):
        transport = ScriptedTransport(
            analyze=[TransportError("timeout"), body(token="t0"), body(status="complete", processed=4)],
            polls=[body(status="pending")],
        )
        driver = make_driver(transport, settings, sleeps)

        driver.run(JOB_ID, b"face")

        assert [c["token"] for c in transport.analyze_calls] == [None, None, "t0"]

    def test_poll_delays_back_off(self, settings, sleeps):
        """Test that consecutive polls wait longer each time."""
        transport = ScriptedTransport(
            analyze=[body(token="t0"), TransportError("timeout")],
            polls=[
                TransportError("timeout"),
                body(processed=0),
                body(status="complete", processed=4),
            ],
        )
        driver = make_driver(transport, settings, sleeps)

        driver.run(JOB_ID, b"face")

        initial, first_retry, second_retry = sleeps[-3:]
        assert initial == 1.0
        assert 1.0 <= first_retry <= 1.5
        assert 2.0 <= second_retry <= 2.5

    def test_poll_delays_capped(self, settings, sleeps):
        settings = settings.model_copy(
            update={"max_poll_attempts": 6, "poll_max_seconds": 3.0, "jitter_seconds": 0.0}
        )
        transport = ScriptedTransport(
            analyze=[body(token="t0"), TransportError("timeout")],
            polls=[body(processed=0)] * 5 + [body(status="complete", processed=4)],
        )
        driver = make_driver(transport, settings, sleeps)

        driver.run(JOB_ID, b"face")

        assert sleeps[-5:] == [1.0, 2.0, 3.0, 3.0, 3.0]

    def test_gives_up_after_max_polls(self, settings, sleeps):
        transport = ScriptedTransport(
            analyze=[body(token="t0"), TransportError("timeout")],
            polls=[TransportError("timeout")] * 3,
        )
        driver = make_driver(transport, settings, sleeps)

        with pytest.raises(DriverGaveUpError) as exc_info:
            driver.run(JOB_ID, b"face")

        assert transport.poll_calls == 3
        assert exc_info.value.details["attempts"] == 3

    def test_gives_up_when_polls_never_show_a_token(self, settings, sleeps):
        transport = ScriptedTransport(
            analyze=[body(token="t0"), TransportError("timeout")],
            polls=[body(processed=2)] * 3,
        )
        driver = make_driver(transport, settings, sleeps)

        with pytest.raises(DriverGaveUpError):
            driver.run(JOB_ID, b"face")

        assert transport.poll_calls == 3

    def test_non_retryable_poll_error_raises(self, settings, sleeps):
        transport = ScriptedTransport(
            analyze=[body(token="t0"), TransportError("timeout")],
            polls=[TransportError("job not found", status_code=404, retryable=False)],
        )
        driver = make_driver(transport, settings, sleeps)

        with pytest.raises(TransportError, match="job not found"):
            driver.run(JOB_ID, b"face")

        assert transport.poll_calls == 1


class TestFailures:
    """Test errors that end the run."""

    def test_non_retryable_rejection_raises(self, settings, sleeps):
        """Test that a refused token is not retried through polling."""
        transport = ScriptedTransport(
            analyze=[
                body(token="t0"),
                TransportError("invalid token", status_code=400, retryable=False),
            ]
        )
        driver = make_driver(transport, settings, sleeps)

        with pytest.raises(TransportError):
            driver.run(JOB_ID, b"face")

        assert transport.poll_calls == 0

    def test_failed_job_raises(self, settings, sleeps):
        transport = ScriptedTransport(
            analyze=[body(status="error", error="Unsupported storage provider")]
        )
        driver = make_driver(transport, settings, sleeps)

        with pytest.raises(JobFailedError, match="Unsupported storage provider"):
            driver.run(JOB_ID, b"face")


class TestSingleInFlight:
    """Test the per-job in-flight guard."""

    def test_second_driver_for_same_job_is_refused(self, settings, sleeps):
        # Arrange
        entered = threading.Event()
        release = threading.Event()

        class BlockingTransport(ScriptedTransport):
            def analyze(self, *args, **kwargs):
                entered.set()
                release.wait(timeout=5)
                return body(status="complete", processed=4)

        first = make_driver(BlockingTransport(), settings, sleeps)
        second = make_driver(BlockingTransport(), settings, [])
        worker = threading.Thread(target=first.run, args=(JOB_ID, b"face"))
        worker.start()
        entered.wait(timeout=5)

        # Act / Assert
        try:
            with pytest.raises(DriverBusyError):
                second.run(JOB_ID, b"face")
        finally:
            release.set()
            worker.join(timeout=5)

    def test_guard_released_after_run(self, settings, sleeps):
        transport = ScriptedTransport(
            analyze=[body(status="complete", processed=4), body(status="complete", processed=4)]
        )
        driver = make_driver(transport, settings, sleeps)

        driver.run(JOB_ID, b"face")
        driver.run(JOB_ID, b"face")

        assert len(transport.analyze_calls) == 2
