"""Tests for waiting on the DLP job-completion notification."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from prometheus_client import REGISTRY
from structlog.testing import capture_logs

from dlp_numerical_stats.services.completion_waiter import (
    JobCompletionListener,
    wait_for_job_completion,
)
from tests.conftest import JOB_NAME, StubChannel, StubMessage


def _notification_count(outcome: str) -> float:
    value = REGISTRY.get_sample_value(
        "dlp_job_notifications_handled_total", {"outcome": outcome}
    )
    return value or 0.0


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def test_matching_message_is_acked_and_signals_completion() -> None:
    sleep = RecordingSleep()
    listener = JobCompletionListener(JOB_NAME, sleep=sleep)
    message = StubMessage(JOB_NAME)

    listener.handle_message(message)

    assert message.acked
    assert not message.nacked
    assert listener.done
    assert sleep.calls == [0.5]


def test_other_job_message_is_nacked_without_signal() -> None:
    sleep = RecordingSleep()
    listener = JobCompletionListener(JOB_NAME, sleep=sleep)
    message = StubMessage("projects/calling-project/dlpJobs/r-other")
    nacks_before = _notification_count("nack")

    listener.handle_message(message)

    assert message.nacked
    assert not message.acked
    assert not listener.done
    assert sleep.calls == []
    assert _notification_count("nack") == nacks_before + 1


def test_message_without_job_attribute_is_nacked() -> None:
    listener = JobCompletionListener(JOB_NAME, sleep=RecordingSleep())
    message = StubMessage(None)

    listener.handle_message(message)

    assert message.nacked
    assert not listener.done


def test_zero_settle_delay_skips_sleep() -> None:
    sleep = RecordingSleep()
    listener = JobCompletionListener(JOB_NAME, settle_delay_seconds=0, sleep=sleep)

    listener.handle_message(StubMessage(JOB_NAME))

    assert listener.done
    assert sleep.calls == []


class CountingEvent(threading.Event):
    def __init__(self) -> None:
        super().__init__()
        self.set_calls = 0
        self._count_lock = threading.Lock()

    def set(self) -> None:
        with self._count_lock:
            self.set_calls += 1
        super().set()


def test_concurrent_matching_messages_signal_once() -> None:
    sleep = RecordingSleep()
    event = CountingEvent()
    listener = JobCompletionListener(JOB_NAME, sleep=sleep, event=event)
    matching = [StubMessage(JOB_NAME) for _ in range(16)]
    others = [StubMessage(f"projects/p/dlpJobs/r-{i}") for i in range(16)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(listener.handle_message, matching + others))

    assert listener.done
    assert listener.wait(0) is True
    assert all(m.acked and not m.nacked for m in matching)
    assert all(m.nacked and not m.acked for m in others)
    assert event.set_calls == 1
    assert sleep.calls == [0.5]


def test_empty_job_name_is_rejected() -> None:
    with pytest.raises(ValueError):
        JobCompletionListener("")


def test_wait_completes_when_notification_arrives() -> None:
    message = StubMessage(JOB_NAME)
    channel = StubChannel([StubMessage("projects/p/dlpJobs/r-other"), message])
    listener = JobCompletionListener(JOB_NAME, sleep=RecordingSleep())

    outcome = wait_for_job_completion(
        channel, JOB_NAME, timeout_seconds=5, listener=listener
    )

    assert outcome.completed is True
    assert outcome.job_name == JOB_NAME
    assert message.acked
    assert channel.started == 1
    assert channel.stopped == 1


def test_wait_timeout_is_not_an_error_and_stops_listener() -> None:
    channel = StubChannel([StubMessage("projects/p/dlpJobs/r-other")])

    with capture_logs() as logs:
        outcome = wait_for_job_completion(
            channel, JOB_NAME, timeout_seconds=0.01, settle_delay_seconds=0
        )

    assert outcome.completed is False
    assert outcome.elapsed_seconds >= 0
    assert channel.stopped == 1
    assert any(entry["event"] == "job_wait_timed_out" for entry in logs)


def test_listener_is_stopped_when_wait_raises() -> None:
    class ExplodingListener(JobCompletionListener):
        def wait(self, timeout_seconds: float) -> bool:
            raise RuntimeError("interrupted")

    channel = StubChannel()
    listener = ExplodingListener(JOB_NAME)

    with pytest.raises(RuntimeError, match="interrupted"):
        wait_for_job_completion(channel, JOB_NAME, listener=listener)

    assert channel.started == 1
    assert channel.stopped == 1


def test_duplicate_notification_is_acked_without_second_signal() -> None:
    sleep = RecordingSleep()
    event = CountingEvent()
    listener = JobCompletionListener(JOB_NAME, sleep=sleep, event=event)
    first, duplicate = StubMessage(JOB_NAME), StubMessage(JOB_NAME)

    listener.handle_message(first)
    listener.handle_message(duplicate)

    assert first.acked and duplicate.acked
    assert event.set_calls == 1
    assert sleep.calls == [0.5]
