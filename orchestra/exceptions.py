"""
orchestra.exceptions - Hard failures

Provider and business failures never raise: they come back as
``ExecutionResult.failure``. The exceptions here are reserved for programming
and configuration errors that must stop the caller.

Example:
    >>> from orchestra.exceptions import UnknownProviderError
    >>>
    >>> try:
    ...     await dispatcher.submit(request)
    ... except UnknownProviderError as e:
    ...     logger.error(f"Misrouted request: {e}")
"""


class OrchestraError(Exception):
    """Base exception for all orchestra errors."""


class DispatcherError(OrchestraError):
    """Raised when the dispatcher itself cannot process a request."""


class UnknownProviderError(DispatcherError):
    """
    Raised when a request names a provider with no registered adapter.

    This is a routing bug in the caller, not a provider failure.
    """


class DuplicateRequestError(DispatcherError):
    """Raised when a request id is submitted while a request with that id is in flight."""


class ConfigurationError(OrchestraError):
    """Raised when settings cannot produce a working component."""


class ProviderNotConfiguredError(ConfigurationError):
    """
    Raised when an adapter is requested for a provider without credentials.

    This can occur due to:
    - Missing JIRA_BASE_URL / JIRA_EMAIL / JIRA_API_TOKEN
    - Missing model API key for the configured model provider
    """
