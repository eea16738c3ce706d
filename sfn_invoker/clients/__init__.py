"""Execution service clients."""

from .stepfunctions import ExecutionClient, StepFunctionsClient, create_stepfunctions_client

__all__ = ['ExecutionClient', 'StepFunctionsClient', 'create_stepfunctions_client']
