"""
Tool Provider Adapter Layer

Provider-specific adapters behind the common ToolAdapter ABC. Each adapter
calls its provider and maps every outcome into an ExecutionResult; error
bodies flow through the normalizer on the way.
"""

from orchestra.integrations.base import ToolAdapter, classify_status
from orchestra.integrations.factory import create_adapter, create_configured_adapters
from orchestra.integrations.jira import JiraCredentials, JiraToolAdapter
from orchestra.integrations.model import ModelCall, ModelToolAdapter

__all__ = [
    "JiraCredentials",
    "JiraToolAdapter",
    "ModelCall",
    "ModelToolAdapter",
    "ToolAdapter",
    "classify_status",
    "create_adapter",
    "create_configured_adapters",
]
