"""Tests for the private event-loop runner."""

import asyncio

import pytest

from pgtext.client.loop import EventLoopRunner


async def _add(a, b):
    await asyncio.sleep(0)
    return a + b


async def _fail():
    raise LookupError("missing")


def test_run_returns_result():
    runner = EventLoopRunner()
    try:
        assert runner.run(_add(2, 3)) == 5
    finally:
        runner.close()


def test_run_propagates_errors():
    runner = EventLoopRunner()
    try:
        with pytest.raises(LookupError, match="missing"):
            runner.run(_fail())
        # Still usable afterwards
        assert runner.run(_add(1, 1)) == 2
    finally:
        runner.close()


def test_close_is_idempotent():
    runner = EventLoopRunner()
    runner.close()
    runner.close()
    assert runner.closed


def test_run_after_close_raises():
    runner = EventLoopRunner()
    runner.close()
    with pytest.raises(RuntimeError, match="closed"):
        runner.run(_add(1, 2))


def test_works_inside_running_loop():
    runner = EventLoopRunner()

    async def caller():
        return runner.run(_add(10, 5))

    try:
        assert asyncio.run(caller()) == 15
    finally:
        runner.close()


def test_run_from_loop_thread_raises():
    runner = EventLoopRunner()

    async def nested():
        with pytest.raises(RuntimeError, match="own loop thread"):
            runner.run(_add(1, 2))
        return True

    try:
        assert runner.run(nested())
    finally:
        runner.close()


def test_shutdown_from_loop_thread_does_not_block():
    runner = EventLoopRunner()
    finished = []

    async def last_task():
        finished.append(True)

    async def shut_down_inside():
        runner.shutdown(last_task())
        return runner.closed

    assert runner.run(shut_down_inside())
    runner._thread.join(timeout=5)
    assert not runner._thread.is_alive()
    assert finished == [True]


def test_shutdown_runs_final_coroutine():
    runner = EventLoopRunner()
    finished = []

    async def last_task():
        finished.append(True)

    runner.shutdown(last_task())
    assert runner.closed
    assert finished == [True]
    # Later shutdowns are no-ops
    runner.shutdown(last_task())
    assert finished == [True]
