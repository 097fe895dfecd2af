"""
orchestra - Tool Execution for Autonomous Agents

Executes agent actions against external tool providers (issue trackers,
model APIs) and returns one uniform, inspectable outcome however the
provider responded or failed.

This package provides:
1. ExecutionResult: strict success-or-failure outcome with an ErrorKind
2. Error normalization: provider error bodies collapsed into one message
3. Tool adapters: Jira and model-call adapters behind a common ABC
4. Dispatcher: concurrent execution with bounded retry and backoff

Example:
    >>> from orchestra import Dispatcher, ExecutionRequest, ProviderType
    >>> from orchestra.integrations import create_configured_adapters
    >>> from orchestra.settings import get_settings

    >>> settings = get_settings()
    >>> dispatcher = Dispatcher(
    ...     create_configured_adapters(settings),
    ...     settings.build_dispatcher_config(),
    ... )
    >>> result = await dispatcher.submit(
    ...     ExecutionRequest(id="r-1", provider=ProviderType.JIRA, payload={...})
    ... )
"""

__version__ = "0.1.0"

from orchestra.exceptions import (
    ConfigurationError,
    DispatcherError,
    DuplicateRequestError,
    OrchestraError,
    ProviderNotConfiguredError,
    UnknownProviderError,
)
from orchestra.execution import (
    Dispatcher,
    DispatcherConfig,
    ErrorKind,
    ExecutionRequest,
    ExecutionResult,
    ProviderErrorPayload,
    ProviderType,
    normalize,
)

__all__ = [
    "ConfigurationError",
    "Dispatcher",
    "DispatcherConfig",
    "DispatcherError",
    "DuplicateRequestError",
    "ErrorKind",
    "ExecutionRequest",
    "ExecutionResult",
    "OrchestraError",
    "ProviderErrorPayload",
    "ProviderNotConfiguredError",
    "ProviderType",
    "UnknownProviderError",
    "__version__",
    "normalize",
]
