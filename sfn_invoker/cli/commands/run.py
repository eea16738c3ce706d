"""Run command implementation."""

import dataclasses
import json
import logging
import os
import signal
import threading
from argparse import Namespace
from pathlib import Path
from typing import Dict

from sfn_invoker.exceptions import InvalidConfiguration, RemoteCallFailure, StepValidationError
from sfn_invoker.invoke.service import InvocationService
from sfn_invoker.invoke.types import ExecutionResult
from sfn_invoker.loader import StepLoader
from sfn_invoker.security.masking import SecretMasker, SecretsMaskingFilter


logger = logging.getLogger(__name__)

EXIT_CANCELLED = 130


def parse_variables(args: Namespace) -> Dict[str, str]:
    """Collect build variables: environment, then --var-file, then --var."""
    variables = {}

    if args.env_vars:
        variables.update(os.environ)

    if args.var_file:
        var_file = Path(args.var_file)
        if not var_file.exists():
            raise FileNotFoundError(f"Variables file not found: {var_file}")

        with open(var_file, 'r') as f:
            file_vars = json.load(f)
            if not isinstance(file_vars, dict):
                raise ValueError(f"Variables file must contain a JSON object, got {type(file_vars).__name__}")

            # Convert all values to strings
            for key, value in file_vars.items():
                variables[str(key)] = str(value)

    if args.var:
        for item in args.var:
            if '=' not in item:
                raise ValueError(f"Invalid variable format: {item}. Expected KEY=VALUE")
            key, value = item.split('=', 1)
            variables[key] = value

    return variables


def configure_logging(args: Namespace, masker: SecretMasker) -> None:
    """Set up logging from the CLI flags and mask secrets in every handler."""
    log_level = getattr(logging, args.log_level.upper())
    if args.debug:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.ERROR
    elif args.verbose:
        log_level = logging.DEBUG

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    masking_filter = SecretsMaskingFilter(masker)
    for handler in logging.getLogger().handlers:
        handler.addFilter(masking_filter)


def write_result(result: ExecutionResult, result_file: Path) -> None:
    """Write the execution result as JSON."""
    result_file.parent.mkdir(parents=True, exist_ok=True)
    with open(result_file, 'w') as f:
        json.dump(result.to_dict(), f, indent=2)
    logger.info(f"Wrote execution result to {result_file}")


def run_step(args: Namespace) -> int:
    """
    Run a Step Function invocation step.

    Returns:
        0 when the execution succeeded, 1 when it did not or a remote call
        failed, 2 for invalid configuration, 130 when cancelled
    """
    masker = SecretMasker()
    configure_logging(args, masker)

    cancel_event = threading.Event()

    def request_cancel(signum, frame):
        logger.warning(f"Received signal {signum}, cancelling")
        cancel_event.set()

    previous_handlers = {}
    try:
        # Signal handlers can only be installed from the main thread
        if threading.current_thread() is threading.main_thread():
            for signum in (signal.SIGINT, signal.SIGTERM):
                previous_handlers[signum] = signal.signal(signum, request_cancel)

        step_path = Path(args.step).resolve()
        if not step_path.exists():
            logger.error(f"Step definition not found: {step_path}")
            return 1

        logger.info(f"Loading step definition: {step_path}")
        template = StepLoader().load(step_path)
        if args.poll_interval is not None:
            template = dataclasses.replace(template, poll_interval_seconds=args.poll_interval)

        variables = parse_variables(args)
        service = InvocationService(sink=print, masker=masker)
        config = service.build_configuration(template, variables)
        masker.add(config.aws_secret_key)

        if args.dry_run:
            print(json.dumps(config.to_dict(), indent=2))
            logger.info("[DRY RUN] Configuration resolved successfully")
            return 0

        result = service.invoke(config, cancel_event)

        if args.result_file:
            write_result(result, Path(args.result_file).resolve())

        if result.cancelled:
            return EXIT_CANCELLED
        return 0 if result.success else 1

    except StepValidationError as e:
        for error in e.errors:
            logger.error(f"Validation error: {error.message}")
        return e.exit_code
    except InvalidConfiguration as e:
        logger.error(f"Invalid configuration: {e}")
        return e.exit_code
    except RemoteCallFailure as e:
        logger.error(f"Remote call failed: {e}")
        return e.exit_code
    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Validation error: {e}")
        return 2
    finally:
        for signum, handler in previous_handlers.items():
            if handler is not None:
                signal.signal(signum, handler)
