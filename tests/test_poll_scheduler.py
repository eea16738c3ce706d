"""Tests for the execution polling loop."""

import threading
import time
from datetime import timedelta
from unittest.mock import MagicMock, call

import pytest

from sfn_invoker.invoke.poll import PollScheduler, Sleeper
from sfn_invoker.invoke.types import ExecutionDescription, ExecutionStatus


EXECUTION_ARN = "arn:aws:states:us-east-1:123456789012:execution:my_step_function:execution-id"
RUNNING = ExecutionDescription(status="RUNNING")
SUCCEEDED = ExecutionDescription(status="SUCCEEDED", output="some output")


def make_scheduler(descriptions, interval=60, sleeper=None):
    client = MagicMock()
    client.describe.side_effect = list(descriptions)
    if sleeper is None:
        sleeper = MagicMock()
        sleeper.sleep.return_value = False
    lines = []
    scheduler = PollScheduler(client, timedelta(seconds=interval), lines.append, sleeper)
    return scheduler, client, sleeper, lines


class TestPollScheduler:
    """Test the RUNNING -> terminal state machine."""

    def test_polls_until_terminal(self):
        """[RUNNING, RUNNING, SUCCEEDED] gives 3 describes and 2 sleeps."""
        scheduler, client, sleeper, lines = make_scheduler([RUNNING, RUNNING, SUCCEEDED])

        outcome = scheduler.await_completion(EXECUTION_ARN)

        assert client.describe.call_count == 3
        client.describe.assert_called_with(EXECUTION_ARN)
        assert sleeper.sleep.call_args_list == [call(60.0, None), call(60.0, None)]
        assert outcome.description == SUCCEEDED
        assert outcome.poll_count == 3
        assert outcome.cancelled is False

    def test_terminal_on_first_describe(self):
        scheduler, client, sleeper, lines = make_scheduler([SUCCEEDED])

        outcome = scheduler.await_completion(EXECUTION_ARN)

        assert client.describe.call_count == 1
        sleeper.sleep.assert_not_called()
        assert outcome.poll_count == 1

    @pytest.mark.parametrize("status", ["FAILED", "TIMED_OUT", "ABORTED", "SOMETHING_NEW"])
    def test_any_non_running_status_ends_loop(self, status):
        final = ExecutionDescription(status=status)
        scheduler, client, sleeper, lines = make_scheduler([RUNNING, final])

        outcome = scheduler.await_completion(EXECUTION_ARN)

        assert outcome.description.status == status
        assert client.describe.call_count == 2
        assert sleeper.sleep.call_count == 1

    def test_progress_lines(self):
        scheduler, client, sleeper, lines = make_scheduler([RUNNING, SUCCEEDED], interval=10)

        scheduler.await_completion(EXECUTION_ARN)

        assert lines == [
            "Function still executing, sleeping for 10s",
            "Final execution status: SUCCEEDED",
            "Output: some output",
        ]

    def test_cancel_event_passed_to_sleeper(self):
        cancel_event = threading.Event()
        scheduler, client, sleeper, lines = make_scheduler([RUNNING, SUCCEEDED])

        scheduler.await_completion(EXECUTION_ARN, cancel_event)

        sleeper.sleep.assert_called_once_with(60.0, cancel_event)

    def test_cancelled_wait_stops_polling(self):
        """A cancelled sleep ends the loop without another describe."""
        sleeper = MagicMock()
        sleeper.sleep.return_value = True
        scheduler, client, sleeper, lines = make_scheduler([RUNNING, SUCCEEDED], sleeper=sleeper)

        outcome = scheduler.await_completion(EXECUTION_ARN, threading.Event())

        assert outcome.cancelled is True
        assert outcome.description is None
        assert outcome.poll_count == 1
        assert client.describe.call_count == 1
        assert not any(line.startswith("Final execution status") for line in lines)

    def test_remote_error_propagates(self):
        scheduler, client, sleeper, lines = make_scheduler([RUNNING, RuntimeError("boom")])

        with pytest.raises(RuntimeError, match="boom"):
            scheduler.await_completion(EXECUTION_ARN)

    def test_status_enum_classification(self):
        assert not ExecutionStatus.is_terminal("RUNNING")
        assert ExecutionStatus.is_terminal("SUCCEEDED")
        assert ExecutionStatus.is_terminal("UNKNOWN")
        assert ExecutionStatus.is_success("SUCCEEDED")
        assert not ExecutionStatus.is_success("FAILED")


class TestSleeper:
    """Test the cancellable sleeper."""

    def test_sleep_without_event(self):
        start = time.time()
        assert Sleeper().sleep(0.05) is False
        assert time.time() - start >= 0.04

    def test_sleep_runs_to_completion(self):
        assert Sleeper().sleep(0.01, threading.Event()) is False

    def test_set_event_cancels_immediately(self):
        cancel_event = threading.Event()
        cancel_event.set()

        start = time.time()
        assert Sleeper().sleep(30, cancel_event) is True
        assert time.time() - start < 1

    def test_event_set_from_other_thread(self):
        cancel_event = threading.Event()
        timer = threading.Timer(0.05, cancel_event.set)
        timer.start()

        start = time.time()
        cancelled = Sleeper().sleep(30, cancel_event)
        timer.join()

        assert cancelled is True
        assert time.time() - start < 5

    def test_zero_interval_does_not_block(self):
        assert Sleeper().sleep(0) is False
