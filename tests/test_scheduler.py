"""Unit tests for runtime.scheduler."""

import threading

from signal_bot.runtime.scheduler import PeriodicTask, Scheduler


def test_overlapping_run_is_skipped():
    started = threading.Event()
    release = threading.Event()

    def slow():
        started.set()
        release.wait(5)

    task = PeriodicTask("slow", 60, slow)
    worker = threading.Thread(target=task.run_once)
    worker.start()
    assert started.wait(5)
    assert task.run_once() is False
    assert task.skipped == 1
    release.set()
    worker.join(5)
    assert task.run_once() is True
    assert task.runs == 2


def test_exceptions_do_not_escape():
    def boom():
        raise RuntimeError("tick failed")

    task = PeriodicTask("boom", 60, boom)
    assert task.run_once() is True
    assert not task.is_running


def test_scheduler_runs_tasks_until_stopped():
    done = threading.Event()
    calls = []

    def tick():
        calls.append(1)
        if len(calls) >= 3:
            done.set()

    scheduler = Scheduler()
    scheduler.add(PeriodicTask("fast", 0.01, tick))
    scheduler.start()
    assert done.wait(5)
    scheduler.stop()
    count = len(calls)
    assert count >= 3
    assert not scheduler._threads
