from __future__ import annotations

import logging
import threading
from datetime import timedelta

import pytest

from services.scheduler import ScheduledService


def test_run_once_swallows_task_errors(caplog: pytest.LogCaptureFixture) -> None:
    def broken() -> None:
        raise RuntimeError("store unavailable")

    service = ScheduledService("Update rates", timedelta(minutes=1), broken)

    with caplog.at_level(logging.ERROR):
        assert service.run_once() is False

    assert "Update rates" in caplog.text
    assert "store unavailable" in caplog.text


def test_run_once_reports_success() -> None:
    calls: list[int] = []
    service = ScheduledService("tick", timedelta(seconds=1), lambda: calls.append(1))

    assert service.run_once() is True
    assert calls == [1]


def test_run_forever_honours_max_runs() -> None:
    calls: list[int] = []
    service = ScheduledService("tick", timedelta(milliseconds=1), lambda: calls.append(1))

    service.run_forever(max_runs=3)

    assert len(calls) == 3


def test_run_forever_stops_when_event_set() -> None:
    stop = threading.Event()
    calls: list[int] = []

    def task() -> None:
        calls.append(1)
        stop.set()

    ScheduledService("tick", timedelta(hours=1), task).run_forever(stop)

    assert calls == [1]


def test_run_forever_keeps_ticking_after_failure() -> None:
    attempts: list[int] = []

    def flaky() -> None:
        attempts.append(1)
        if len(attempts) == 1:
            raise ValueError("first tick fails")

    ScheduledService("tick", timedelta(milliseconds=1), flaky).run_forever(max_runs=2)

    assert len(attempts) == 2


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ScheduledService("tick", timedelta(0), lambda: None)
