"""Invoker exceptions."""

from typing import List
from dataclasses import dataclass


class InvocationError(Exception):
    """Base class for errors that abort an invocation."""

    exit_code = 1


class InvalidConfiguration(InvocationError):
    """Raised when the step inputs cannot be turned into a configuration.

    Always raised before any remote call is made.
    """

    exit_code = 2


class RemoteCallFailure(InvocationError):
    """Raised when a start or describe call to the execution service fails."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")


@dataclass
class ValidationError:
    """Single validation error."""
    message: str
    path: str = ""


class StepValidationError(InvalidConfiguration):
    """Raised when a step definition file fails validation.

    Collects every problem found so the CLI can report them all at once.
    """

    def __init__(self, errors: List[ValidationError]):
        self.errors = errors

        messages = []
        for error in errors:
            prefix = f"{error.path}: " if error.path else ""
            messages.append(f"Validation error: {prefix}{error.message}")

        super().__init__("\n".join(messages))
