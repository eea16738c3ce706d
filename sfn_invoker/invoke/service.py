"""
Invocation service.

Resolves the step inputs into a configuration, starts the Step Function
execution, waits for it to finish and assembles the result. Progress is
reported to an output sink one line at a time.
"""

import logging
import re
import threading
from datetime import timedelta
from typing import Callable, Mapping, Optional

from ..clients.stepfunctions import ExecutionClient, create_stepfunctions_client
from ..exceptions import InvalidConfiguration
from ..security.masking import SecretMasker
from ..variables.substitution import MappingResolver, VariableInterpolator, Variables
from .poll import OutputSink, PollScheduler, Sleeper
from .types import (
    CANCELLED_STATUS,
    DEFAULT_POLL_INTERVAL,
    ExecutionResult,
    ExecutionStatus,
    InvocationConfig,
    InvocationTemplate,
)


logger = logging.getLogger(__name__)

ClientFactory = Callable[[InvocationConfig], ExecutionClient]


class InvocationService:
    """
    Invokes a Step Function and waits for the result.

    Remote call failures are not caught or retried here; they propagate to
    the caller and abort the invocation.
    """

    POLL_INTERVAL_PATTERN = re.compile(r'[0-9]+')

    def __init__(
        self,
        client_factory: ClientFactory = create_stepfunctions_client,
        sink: OutputSink = print,
        sleeper: Optional[Sleeper] = None,
        masker: Optional[SecretMasker] = None
    ):
        """
        Initialize the service.

        Args:
            client_factory: Builds an authenticated client from a configuration
            sink: Receives progress lines
            sleeper: Sleeper used between polls (default: real sleeper)
            masker: Masker whose values are masked in every invocation; each
                invocation works on its own copy
        """
        self.client_factory = client_factory
        self.sink = sink
        self.sleeper = sleeper or Sleeper()
        self.masker = masker or SecretMasker()
        self.interpolator = VariableInterpolator()

    def build_configuration(
        self,
        template: InvocationTemplate,
        variables: Variables,
        masker: Optional[SecretMasker] = None
    ) -> InvocationConfig:
        """
        Create the final configuration for one invocation.

        Args:
            template: Raw step inputs, possibly containing placeholders
            variables: Build variables used to resolve the placeholders
            masker: Masker for this invocation (default: a fresh copy of the
                service masker)

        Returns:
            Resolved, immutable configuration

        Raises:
            InvalidConfiguration: If the poll interval override is not a
                non-negative integer no larger than threading.TIMEOUT_MAX
        """
        masker = masker or self.masker.copy()
        interpolate = self.interpolator.interpolate

        secret_key = interpolate(template.aws_secret_key, variables)
        masker.add(secret_key)
        emit = self._emitter(masker)
        emit(f"Build variables: {self._snapshot(variables, masker)}")

        config = InvocationConfig(
            aws_access_key_id=interpolate(template.aws_access_key_id, variables),
            aws_secret_key=secret_key,
            aws_region=interpolate(template.aws_region, variables),
            state_machine_arn=interpolate(template.state_machine_arn, variables),
            payload=interpolate(template.payload, variables),
            poll_interval=self._parse_poll_interval(template.poll_interval_seconds, variables),
            use_instance_credentials=template.use_instance_credentials
        )

        for field_name in ('state_machine_arn', 'payload'):
            unresolved = self.interpolator.find_unresolved(getattr(config, field_name), variables)
            if unresolved:
                logger.warning(f"Unresolved placeholders in {field_name}: {unresolved}")

        return config

    def invoke(
        self,
        config: InvocationConfig,
        cancel_event: Optional[threading.Event] = None,
        masker: Optional[SecretMasker] = None
    ) -> ExecutionResult:
        """
        Start the configured Step Function and wait for it to finish.

        Args:
            config: Resolved configuration
            cancel_event: Optional event; setting it stops polling
            masker: Masker for this invocation (default: a fresh copy of the
                service masker)

        Returns:
            ExecutionResult; success is True only for a SUCCEEDED execution
        """
        masker = masker or self.masker.copy()
        masker.add(config.aws_secret_key)
        emit = self._emitter(masker)
        client = self.client_factory(config)

        emit(f"Invoking Step Function {config.state_machine_arn} with payload {config.payload}")
        execution_arn = client.start(config.state_machine_arn, config.payload)
        emit(f"Started execution with ARN: {execution_arn}")

        scheduler = PollScheduler(client, config.poll_interval, emit, self.sleeper)
        outcome = scheduler.await_completion(execution_arn, cancel_event)

        if outcome.cancelled:
            emit(f"Polling cancelled; execution {execution_arn} may still be running")
            return ExecutionResult(
                execution_arn=execution_arn,
                success=False,
                status=CANCELLED_STATUS,
                cancelled=True
            )

        description = outcome.description
        return ExecutionResult(
            execution_arn=execution_arn,
            output=description.output,
            success=ExecutionStatus.is_success(description.status),
            status=description.status
        )

    def run(
        self,
        template: InvocationTemplate,
        variables: Variables,
        cancel_event: Optional[threading.Event] = None
    ) -> ExecutionResult:
        """Build the configuration from the step inputs and invoke it."""
        masker = self.masker.copy()
        config = self.build_configuration(template, variables, masker)
        return self.invoke(config, cancel_event, masker)

    def _parse_poll_interval(self, raw: Optional[str], variables: Variables) -> timedelta:
        if raw is None or raw == "":
            return DEFAULT_POLL_INTERVAL

        value = self.interpolator.interpolate(raw, variables)
        if not self.POLL_INTERVAL_PATTERN.fullmatch(value):
            raise InvalidConfiguration(
                f"Poll interval must be a non-negative number of seconds, got '{value}'"
            )

        # Longer digit strings are out of range anyway
        if len(value) > 19 or int(value) > threading.TIMEOUT_MAX:
            raise InvalidConfiguration(
                f"Poll interval must be at most {int(threading.TIMEOUT_MAX)} seconds, got '{value}'"
            )
        return timedelta(seconds=int(value))

    def _snapshot(self, variables: Variables, masker: SecretMasker):
        if isinstance(variables, MappingResolver):
            variables = variables.variables
        if isinstance(variables, Mapping):
            return masker.mask_dict(dict(sorted(variables.items())))
        return f"<{type(variables).__name__}>"

    def _emitter(self, masker: SecretMasker) -> OutputSink:
        def emit(line: str) -> None:
            self.sink(masker.mask_text(line))
        return emit
