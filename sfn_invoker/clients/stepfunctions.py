"""AWS Step Functions execution client.

Wraps the boto3 ``stepfunctions`` client behind the two calls the invoker
needs: start an execution and describe it.
"""

import logging
from typing import Any, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import InvalidConfiguration, RemoteCallFailure
from ..invoke.types import ExecutionDescription, InvocationConfig


logger = logging.getLogger(__name__)


class ExecutionClient(Protocol):
    """Starts and describes executions of a remote workflow."""

    def start(self, state_machine_arn: str, payload: str) -> str:
        ...

    def describe(self, execution_arn: str) -> ExecutionDescription:
        ...


class StepFunctionsClient:
    """ExecutionClient backed by boto3."""

    def __init__(self, sfn: Any):
        """
        Args:
            sfn: A boto3 ``stepfunctions`` client
        """
        self.sfn = sfn

    def start(self, state_machine_arn: str, payload: str) -> str:
        """Start an execution and return its ARN."""
        try:
            response = self.sfn.start_execution(
                stateMachineArn=state_machine_arn,
                input=payload
            )
        except (BotoCoreError, ClientError) as e:
            raise RemoteCallFailure('StartExecution', str(e)) from e

        return response['executionArn']

    def describe(self, execution_arn: str) -> ExecutionDescription:
        """Fetch the current status and output of an execution."""
        try:
            response = self.sfn.describe_execution(executionArn=execution_arn)
        except (BotoCoreError, ClientError) as e:
            raise RemoteCallFailure('DescribeExecution', str(e)) from e

        description = ExecutionDescription(
            status=response['status'],
            output=response.get('output')
        )
        logger.debug(f"Execution {execution_arn} status: {description.status}")
        return description


def create_stepfunctions_client(config: InvocationConfig) -> StepFunctionsClient:
    """
    Build an authenticated client for the configured region.

    With instance credentials the default boto3 credential chain is used
    (environment, shared config, instance profile); otherwise the explicit
    access key and secret from the configuration.
    """
    region: Optional[str] = config.aws_region or None
    kwargs = {'region_name': region}

    if config.use_instance_credentials:
        logger.debug("Using default credential chain for Step Functions client")
    else:
        kwargs['aws_access_key_id'] = config.aws_access_key_id
        kwargs['aws_secret_access_key'] = config.aws_secret_key

    try:
        sfn = boto3.client('stepfunctions', **kwargs)
    except BotoCoreError as e:
        raise InvalidConfiguration(f"Cannot create Step Functions client: {e}") from e

    return StepFunctionsClient(sfn)
