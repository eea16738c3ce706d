"""Execution polling loop.

Blocks until a started execution leaves the RUNNING state, sleeping for the
configured interval between status queries. There is no iteration limit and
no timeout: polling ends when the execution finishes or the caller cancels.
"""

import logging
import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional

from ..clients.stepfunctions import ExecutionClient
from .types import ExecutionDescription, ExecutionStatus


logger = logging.getLogger(__name__)

OutputSink = Callable[[str], None]


class Sleeper:
    """Suspends the calling thread between polls.

    The wait is cancellable: when a cancel event is supplied, setting it
    wakes the sleeper immediately.
    """

    def sleep(self, seconds: float, cancel_event: Optional[threading.Event] = None) -> bool:
        """
        Sleep for the given number of seconds.

        Args:
            seconds: Time to wait
            cancel_event: Optional event that aborts the wait when set

        Returns:
            True if the wait was cancelled, False if it ran to completion
        """
        if cancel_event is None:
            threading.Event().wait(seconds)
            return False
        return cancel_event.wait(seconds)


@dataclass
class PollOutcome:
    """Result of polling an execution."""
    description: Optional[ExecutionDescription]
    poll_count: int
    wait_duration_ms: int
    cancelled: bool = False


class PollScheduler:
    """Polls an execution until it reaches a terminal status."""

    def __init__(
        self,
        client: ExecutionClient,
        poll_interval: timedelta,
        sink: OutputSink,
        sleeper: Optional[Sleeper] = None
    ):
        """
        Args:
            client: Client used to describe the execution
            poll_interval: Delay between consecutive status queries
            sink: Receives human-readable progress lines
            sleeper: Sleeper used between polls (default: real sleeper)
        """
        self.client = client
        self.poll_interval = poll_interval
        self.sink = sink
        self.sleeper = sleeper or Sleeper()

    def await_completion(
        self,
        execution_arn: str,
        cancel_event: Optional[threading.Event] = None
    ) -> PollOutcome:
        """
        Poll until the execution leaves RUNNING or the cancel event is set.

        Args:
            execution_arn: ARN of the execution to watch
            cancel_event: Optional event that stops polling when set

        Returns:
            PollOutcome with the last description and poll statistics
        """
        start_time = time.time()
        interval_sec = self.poll_interval.total_seconds()

        description = self.client.describe(execution_arn)
        poll_count = 1

        while not ExecutionStatus.is_terminal(description.status):
            self.sink(f"Function still executing, sleeping for {_format_interval(self.poll_interval)}")
            if self.sleeper.sleep(interval_sec, cancel_event):
                logger.info(f"Polling of {execution_arn} cancelled after {poll_count} polls")
                return PollOutcome(
                    description=None,
                    poll_count=poll_count,
                    wait_duration_ms=_elapsed_ms(start_time),
                    cancelled=True
                )

            description = self.client.describe(execution_arn)
            poll_count += 1

        self.sink(f"Final execution status: {description.status}")
        self.sink(f"Output: {description.output}")
        logger.debug(f"Execution {execution_arn} finished after {poll_count} polls")

        return PollOutcome(
            description=description,
            poll_count=poll_count,
            wait_duration_ms=_elapsed_ms(start_time)
        )


def _elapsed_ms(start_time: float) -> int:
    return int((time.time() - start_time) * 1000)


def _format_interval(interval: timedelta) -> str:
    seconds = interval.total_seconds()
    if seconds == int(seconds):
        return f"{int(seconds)}s"
    return f"{seconds}s"
