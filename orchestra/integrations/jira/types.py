"""
Jira adapter payload types.

An agent addresses the Jira adapter with ``{"action": <name>, ...}``; each
action has its own model so validation errors name the offending field.
"""

from typing import Any, Literal, Self

from pydantic import BaseModel, Field, SecretStr, model_validator


# Project key, a hyphen and a number, e.g. PROJ-42
ISSUE_KEY_PATTERN = r"^[A-Z][A-Z0-9_]*-\d+$"


class JiraCredentials(BaseModel):
    """Connection details for one Jira site (Basic auth: account email + API token)."""

    base_url: str = Field(..., min_length=1, description="e.g. https://acme.atlassian.net")
    email: str = Field(..., min_length=1)
    api_token: SecretStr

    def browse_url(self, issue_key: str) -> str:
        return f"{self.base_url.rstrip('/')}/browse/{issue_key}"


class CreateIssueAction(BaseModel):
    action: Literal["create_issue"] = "create_issue"
    project_key: str = Field(..., min_length=1, description="Jira project key, e.g. PROJ")
    summary: str = Field(..., min_length=1, description="Brief summary of the issue")
    description: str = Field(default="", description="Issue description (markdown)")
    issue_type: str = Field(default="Task", min_length=1, description="Bug, Story, Task, ...")


class UpdateIssueAction(BaseModel):
    action: Literal["update_issue"] = "update_issue"
    issue_key: str = Field(..., pattern=ISSUE_KEY_PATTERN)
    summary: str | None = None
    description: str | None = None

    @model_validator(mode="after")
    def _requires_a_field(self) -> Self:
        if not self.summary and not self.description:
            raise ValueError(
                "At least one field must be provided for update: summary or description"
            )
        return self


class GetIssueAction(BaseModel):
    action: Literal["get_issue"] = "get_issue"
    issue_key: str = Field(..., pattern=ISSUE_KEY_PATTERN)


class DeleteIssueAction(BaseModel):
    action: Literal["delete_issue"] = "delete_issue"
    issue_key: str = Field(..., pattern=ISSUE_KEY_PATTERN)


JiraAction = CreateIssueAction | UpdateIssueAction | GetIssueAction | DeleteIssueAction

JIRA_ACTIONS: dict[str, type[BaseModel]] = {
    "create_issue": CreateIssueAction,
    "update_issue": UpdateIssueAction,
    "get_issue": GetIssueAction,
    "delete_issue": DeleteIssueAction,
}


# ---------------------------------------------------------------------------
# Atlassian Document Format helpers
# ---------------------------------------------------------------------------


def text_to_adf(text: str) -> dict[str, Any]:
    """Wrap plain/markdown text in a minimal ADF document, one paragraph per block."""
    blocks = [block.strip() for block in text.split("\n\n") if block.strip()]
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {"type": "paragraph", "content": [{"type": "text", "text": block}]}
            for block in blocks
        ],
    }


def adf_to_text(node: Any) -> str:
    """Extract plain text from an ADF node. Tolerates plain strings and junk."""
    if node is None:
        return ""
    if isinstance(node, str):
        return node
    if not isinstance(node, dict):
        return ""

    if node.get("type") == "text":
        text = node.get("text")
        return text if isinstance(text, str) else ""
    if node.get("type") == "hardBreak":
        return "\n"

    children = node.get("content")
    if not isinstance(children, list):
        return ""
    parts = [adf_to_text(child) for child in children]
    # Block-level children are separated by blank lines
    if node.get("type") in ("doc", "bulletList", "orderedList"):
        return "\n\n".join(p for p in parts if p)
    return "".join(parts)
