"""Tests for step definition loading and validation."""

import json

import pytest

from sfn_invoker.exceptions import InvalidConfiguration, StepValidationError
from sfn_invoker.invoke.types import InvocationTemplate
from sfn_invoker.loader import StepLoader, load_step


STEP_FUNCTION_ARN = "arn:aws:states:us-east-1:123456789012:stateMachine:my_step_function"


def write_step(tmp_path, content):
    step_path = tmp_path / "step.yaml"
    step_path.write_text(content)
    return step_path


class TestStepLoader:
    """Test loading step definitions from YAML."""

    def test_full_step(self, tmp_path):
        step_path = write_step(tmp_path, f"""
version: "1"
name: nightly export
state_machine_arn: {STEP_FUNCTION_ARN}
use_instance_credentials: false
aws_access_key_id: ${{ACCESS_KEY}}
aws_secret_key: ${{SECRET}}
aws_region: us-east-1
poll_interval_seconds: "$POLL_INTERVAL"
payload: '{{"message":"${{MESSAGE}}!"}}'
""")

        template = load_step(step_path)

        assert template == InvocationTemplate(
            state_machine_arn=STEP_FUNCTION_ARN,
            payload='{"message":"${MESSAGE}!"}',
            aws_access_key_id="${ACCESS_KEY}",
            aws_secret_key="${SECRET}",
            aws_region="us-east-1",
            poll_interval_seconds="$POLL_INTERVAL"
        )

    def test_structured_payload_serialized_as_json(self, tmp_path):
        step_path = write_step(tmp_path, f"""
state_machine_arn: {STEP_FUNCTION_ARN}
use_instance_credentials: true
payload:
  message: ${{MESSAGE}}
  items: [1, 2]
""")

        template = StepLoader().load(step_path)

        assert json.loads(template.payload) == {"message": "${MESSAGE}", "items": [1, 2]}
        assert template.use_instance_credentials is True
        assert template.poll_interval_seconds is None

    def test_integer_poll_interval(self, tmp_path):
        step_path = write_step(tmp_path, f"""
state_machine_arn: {STEP_FUNCTION_ARN}
poll_interval_seconds: 10
payload: "{{}}"
""")

        assert StepLoader().load(step_path).poll_interval_seconds == "10"

    def test_on_off_words_stay_strings(self, tmp_path):
        step_path = write_step(tmp_path, f"""
state_machine_arn: {STEP_FUNCTION_ARN}
payload: on
""")

        assert StepLoader().load(step_path).payload == "on"

    def test_missing_required_fields(self, tmp_path):
        step_path = write_step(tmp_path, "aws_region: us-east-1\n")

        with pytest.raises(StepValidationError) as exc_info:
            StepLoader().load(step_path)

        messages = [error.message for error in exc_info.value.errors]
        assert "'state_machine_arn' field is required" in messages
        assert "'payload' field is required" in messages
        assert exc_info.value.exit_code == 2

    def test_unknown_field_rejected(self, tmp_path):
        step_path = write_step(tmp_path, f"""
state_machine_arn: {STEP_FUNCTION_ARN}
payload: "{{}}"
function_name: legacy
""")

        with pytest.raises(StepValidationError, match="Unknown field 'function_name'"):
            StepLoader().load(step_path)

    def test_wrong_types(self, tmp_path):
        step_path = write_step(tmp_path, f"""
state_machine_arn: {STEP_FUNCTION_ARN}
payload: "{{}}"
aws_region: 42
use_instance_credentials: "yes"
poll_interval_seconds: 1.5
""")

        with pytest.raises(StepValidationError) as exc_info:
            StepLoader().load(step_path)

        paths = {error.path for error in exc_info.value.errors}
        assert paths == {"aws_region", "use_instance_credentials", "poll_interval_seconds"}

    def test_unsupported_version(self, tmp_path):
        step_path = write_step(tmp_path, f"""
version: "2"
state_machine_arn: {STEP_FUNCTION_ARN}
payload: "{{}}"
""")

        with pytest.raises(StepValidationError, match="Unsupported version"):
            StepLoader().load(step_path)

    def test_not_a_mapping(self, tmp_path):
        step_path = write_step(tmp_path, "- just\n- a list\n")

        with pytest.raises(InvalidConfiguration, match="must be a YAML object"):
            StepLoader().load(step_path)

    def test_invalid_yaml(self, tmp_path):
        step_path = write_step(tmp_path, "payload: [unclosed\n")

        with pytest.raises(StepValidationError, match="Failed to load step definition"):
            StepLoader().load(step_path)

    def test_parse_dict(self):
        template = StepLoader().parse({"state_machine_arn": STEP_FUNCTION_ARN, "payload": None})

        assert template.payload == ""
        assert template.aws_secret_key == ""
