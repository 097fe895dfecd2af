"""
orchestra.runner.main - Batch execution of requests from a JSON file

Loads a list of execution requests, builds adapters and a Dispatcher from
settings, runs the batch concurrently and returns the terminal results.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from orchestra.exceptions import ConfigurationError
from orchestra.execution.dispatcher import Dispatcher
from orchestra.execution.ratelimit import ProviderLimiter
from orchestra.execution.request import ExecutionRequest
from orchestra.execution.result import ExecutionResult
from orchestra.integrations.factory import create_configured_adapters
from orchestra.settings import OrchestraSettings

logger = logging.getLogger(__name__)


def load_requests(path: Path, default_max_attempts: int = 3) -> list[ExecutionRequest]:
    """
    Parse a JSON file holding a list of execution requests.

    Entries without ``max_attempts`` get ``default_max_attempts``.

    Raises:
        ConfigurationError: If the file is unreadable or malformed
    """
    try:
        raw: Any = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read requests from {path}: {e}") from e

    if not isinstance(raw, list):
        raise ConfigurationError(f"{path} must contain a JSON list of requests")

    entries = [
        {"max_attempts": default_max_attempts, **entry} if isinstance(entry, dict) else entry
        for entry in raw
    ]
    try:
        return TypeAdapter(list[ExecutionRequest]).validate_python(entries)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid request in {path}: {e}") from e


async def run_requests(
    requests: list[ExecutionRequest],
    settings: OrchestraSettings,
) -> list[ExecutionResult]:
    """Dispatch ``requests`` with adapters and limits built from ``settings``."""
    adapters = create_configured_adapters(settings)
    if not adapters:
        raise ConfigurationError("No tool provider is configured")

    dispatcher = Dispatcher(
        adapters,
        settings.build_dispatcher_config(),
        limiter=ProviderLimiter(settings.build_provider_limits()),
    )
    logger.info(
        f"Dispatching {len(requests)} request(s)",
        extra={"providers": sorted(str(p) for p in adapters)},
    )
    try:
        return await dispatcher.submit_many(requests)
    finally:
        await dispatcher.shutdown()
