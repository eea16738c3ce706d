"""Step definition loader with strict validation."""

import json
from pathlib import Path
from typing import Any, Dict, List
import yaml

from sfn_invoker.exceptions import StepValidationError, ValidationError
from sfn_invoker.invoke.types import InvocationTemplate


class PreservingLoader(yaml.SafeLoader):
    """YAML loader that keeps 'on'/'off'/'yes'/'no' as strings."""
    pass


# Drop the implicit bool resolvers for words like 'on', 'off', 'yes' and 'no';
# only true/false remain booleans
PreservingLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp) for tag, regexp in resolvers
        if tag != 'tag:yaml.org,2002:bool' or first in 'tTfF'
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class StepLoader:
    """
    Loads a Step Function invocation step from YAML.

    Example:

        version: "1"
        state_machine_arn: ${ARN}
        use_instance_credentials: true
        aws_region: us-east-1
        poll_interval_seconds: 10
        payload:
          message: ${MESSAGE}
    """

    SUPPORTED_VERSIONS = {"1"}
    STRING_FIELDS = ('state_machine_arn', 'aws_access_key_id', 'aws_secret_key', 'aws_region')
    KNOWN_FIELDS = {
        'version', 'name', 'state_machine_arn', 'payload', 'use_instance_credentials',
        'aws_access_key_id', 'aws_secret_key', 'aws_region', 'poll_interval_seconds'
    }

    def __init__(self):
        self.errors: List[ValidationError] = []

    def load(self, step_path: Path) -> InvocationTemplate:
        """Load, validate and convert a step file."""
        self.errors = []
        try:
            with open(step_path, 'r') as f:
                step = yaml.load(f, Loader=PreservingLoader)
        except (OSError, yaml.YAMLError) as e:
            self._add_error(f"Failed to load step definition: {e}")
            self._raise_validation_errors()

        return self.parse(step)

    def parse(self, step: Any) -> InvocationTemplate:
        """Validate an already-decoded step definition."""
        self.errors = []
        if step is None or not isinstance(step, dict):
            self._add_error("Step definition must be a YAML object/dictionary")
            self._raise_validation_errors()

        version = step.get('version', '1')
        if str(version) not in self.SUPPORTED_VERSIONS:
            self._add_error(f"Unsupported version '{version}'. Supported: {sorted(self.SUPPORTED_VERSIONS)}", 'version')

        for key in step.keys():
            if key not in self.KNOWN_FIELDS:
                self._add_error(f"Unknown field '{key}'", str(key))

        if not step.get('state_machine_arn'):
            self._add_error("'state_machine_arn' field is required", 'state_machine_arn')
        if 'payload' not in step:
            self._add_error("'payload' field is required", 'payload')

        for field_name in self.STRING_FIELDS:
            value = step.get(field_name)
            if value is not None and not isinstance(value, str):
                self._add_error(f"'{field_name}' must be a string, got {type(value).__name__}", field_name)

        use_instance_credentials = step.get('use_instance_credentials', False)
        if not isinstance(use_instance_credentials, bool):
            self._add_error("'use_instance_credentials' must be true or false", 'use_instance_credentials')

        poll_interval = step.get('poll_interval_seconds')
        if isinstance(poll_interval, bool) or not isinstance(poll_interval, (type(None), int, str)):
            self._add_error("'poll_interval_seconds' must be an integer or a string", 'poll_interval_seconds')
        elif isinstance(poll_interval, int):
            poll_interval = str(poll_interval)

        if self.errors:
            self._raise_validation_errors()

        return InvocationTemplate(
            state_machine_arn=step.get('state_machine_arn'),
            payload=self._payload_text(step.get('payload')),
            use_instance_credentials=use_instance_credentials,
            aws_access_key_id=step.get('aws_access_key_id'),
            aws_secret_key=step.get('aws_secret_key'),
            aws_region=step.get('aws_region'),
            poll_interval_seconds=poll_interval
        )

    def _payload_text(self, payload: Any) -> str:
        # Structured payloads are sent as JSON
        if payload is None:
            return ""
        if isinstance(payload, (dict, list)):
            return json.dumps(payload)
        return str(payload)

    def _add_error(self, message: str, path: str = ""):
        self.errors.append(ValidationError(message=message, path=path))

    def _raise_validation_errors(self):
        raise StepValidationError(self.errors)


def load_step(step_path: Path) -> InvocationTemplate:
    """Convenience function to load a step definition."""
    return StepLoader().load(step_path)
