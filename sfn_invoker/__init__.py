"""Invoke AWS Step Functions and wait for the result."""

from .exceptions import InvalidConfiguration, InvocationError, RemoteCallFailure
from .invoke import ExecutionResult, InvocationConfig, InvocationService, InvocationTemplate

__all__ = [
    "InvalidConfiguration",
    "InvocationError",
    "RemoteCallFailure",
    "ExecutionResult",
    "InvocationConfig",
    "InvocationService",
    "InvocationTemplate",
]
