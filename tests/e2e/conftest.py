"""Fixtures and utilities for E2E tests against a real Step Function."""

import os

import pytest


def skip_if_no_e2e() -> None:
    """Skip test if E2E tests are not enabled."""
    if not os.getenv("SFN_INVOKER_E2E"):
        pytest.skip("E2E tests disabled (set SFN_INVOKER_E2E to enable)")


@pytest.fixture
def state_machine_arn():
    """ARN of a state machine that echoes its input."""
    skip_if_no_e2e()
    arn = os.getenv("SFN_INVOKER_E2E_STATE_MACHINE_ARN")
    if not arn:
        pytest.skip("SFN_INVOKER_E2E_STATE_MACHINE_ARN not set")
    return arn
