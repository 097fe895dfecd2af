"""
orchestra.execution - Execution Pipeline

Uniform results, error normalization and the concurrent retrying dispatcher.

Architecture:
- result.py: ExecutionResult and ErrorKind
- normalizer.py: ProviderErrorPayload and normalize()
- request.py: ExecutionRequest and ProviderType
- dispatcher.py: Dispatcher with retry/backoff and cancellation
- ratelimit.py: ProviderLimiter for per-provider concurrency and rate limits
- events.py: ExecutionEvent and sinks for execution history
"""

from .config import DispatcherConfig
from .dispatcher import Dispatcher, RequestState
from .events import ExecutionEvent, ExecutionEventSink, InMemoryEventSink
from .normalizer import UNKNOWN_VALIDATION_ERROR, ProviderErrorPayload, normalize
from .ratelimit import ProviderLimiter, ProviderLimits
from .request import ExecutionRequest, ProviderType
from .result import ErrorKind, ExecutionResult

__all__ = [
    # Results
    "ErrorKind",
    "ExecutionResult",
    # Normalization
    "ProviderErrorPayload",
    "UNKNOWN_VALIDATION_ERROR",
    "normalize",
    # Requests
    "ExecutionRequest",
    "ProviderType",
    # Dispatch
    "Dispatcher",
    "DispatcherConfig",
    "RequestState",
    "ProviderLimiter",
    "ProviderLimits",
    # Events
    "ExecutionEvent",
    "ExecutionEventSink",
    "InMemoryEventSink",
]
