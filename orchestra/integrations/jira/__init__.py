"""
Jira issue-tracker integration.

Provides the JiraToolAdapter plus the action payload models an agent uses to
address it.
"""

from orchestra.integrations.jira.adapter import JiraToolAdapter
from orchestra.integrations.jira.types import (
    CreateIssueAction,
    DeleteIssueAction,
    GetIssueAction,
    JiraCredentials,
    UpdateIssueAction,
)

__all__ = [
    "CreateIssueAction",
    "DeleteIssueAction",
    "GetIssueAction",
    "JiraCredentials",
    "JiraToolAdapter",
    "UpdateIssueAction",
]
