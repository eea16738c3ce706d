"""
Invocation module.
Starts Step Function executions and polls them to completion.
"""

from .types import (
    ExecutionDescription,
    ExecutionResult,
    ExecutionStatus,
    InvocationConfig,
    InvocationTemplate,
)
from .poll import PollOutcome, PollScheduler, Sleeper
from .service import InvocationService

__all__ = [
    "ExecutionDescription",
    "ExecutionResult",
    "ExecutionStatus",
    "InvocationConfig",
    "InvocationTemplate",
    "PollOutcome",
    "PollScheduler",
    "Sleeper",
    "InvocationService",
]
