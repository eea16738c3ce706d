"""
Data types for Step Function invocations.

Defines the raw step inputs, the resolved per-invocation configuration and the
result handed back to the host.
"""

from dataclasses import dataclass, asdict
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, Optional


DEFAULT_POLL_INTERVAL = timedelta(seconds=30)


class ExecutionStatus(str, Enum):
    """Execution status codes reported by the service."""
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"
    ABORTED = "ABORTED"

    @classmethod
    def is_terminal(cls, status: Optional[str]) -> bool:
        """Anything other than RUNNING ends the poll loop."""
        return status != cls.RUNNING.value

    @classmethod
    def is_success(cls, status: Optional[str]) -> bool:
        return status == cls.SUCCEEDED.value


CANCELLED_STATUS = "CANCELLED"


@dataclass(frozen=True)
class InvocationTemplate:
    """
    Step inputs as configured by the host, before interpolation.

    Attributes:
        state_machine_arn: ARN of the state machine to start (may hold placeholders)
        payload: Execution input, usually JSON (may hold placeholders)
        use_instance_credentials: Use the default credential chain instead of explicit keys
        aws_access_key_id: Access key, ignored with instance credentials
        aws_secret_key: Secret key, ignored with instance credentials
        aws_region: Region of the state machine
        poll_interval_seconds: Optional override of the poll interval, in seconds
    """
    state_machine_arn: str = ""
    payload: str = ""
    use_instance_credentials: bool = False
    aws_access_key_id: str = ""
    aws_secret_key: str = ""
    aws_region: str = ""
    poll_interval_seconds: Optional[str] = None

    def __post_init__(self):
        # None inputs from the host are treated as empty strings
        for name in ('state_machine_arn', 'payload', 'aws_access_key_id',
                     'aws_secret_key', 'aws_region'):
            if getattr(self, name) is None:
                object.__setattr__(self, name, "")


@dataclass(frozen=True)
class InvocationConfig:
    """
    Resolved configuration for a single invocation.

    Built once after interpolation and never mutated.
    """
    state_machine_arn: str
    payload: str
    aws_access_key_id: str = ""
    aws_secret_key: str = ""
    aws_region: str = ""
    poll_interval: timedelta = DEFAULT_POLL_INTERVAL
    use_instance_credentials: bool = False

    def to_dict(self, mask_secrets: bool = True) -> Dict[str, Any]:
        """Convert to a printable dict; the secret key is masked by default."""
        result = asdict(self)
        result['poll_interval'] = self.poll_interval.total_seconds()
        if mask_secrets and self.aws_secret_key:
            result['aws_secret_key'] = '***'
        return result


@dataclass(frozen=True)
class ExecutionDescription:
    """Status snapshot of a running or finished execution."""
    status: str
    output: Optional[str] = None


@dataclass(frozen=True)
class ExecutionResult:
    """
    Outcome of an invocation.

    Attributes:
        execution_arn: ARN of the started execution
        output: Final execution output, absent when the execution produced none
        success: True only when the execution finished with SUCCEEDED
        status: Final status code, or CANCELLED when polling was cancelled
        cancelled: True when polling stopped before the execution finished
    """
    execution_arn: str
    output: Optional[str] = None
    success: bool = False
    status: Optional[str] = None
    cancelled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict, omitting None values."""
        result = {}
        for k, v in asdict(self).items():
            if v is not None:
                result[k] = v
        return result
