"""
Jira issue-tracker adapter.

Implements ToolAdapter against the Jira Cloud REST API (v3) using httpx.
Every response, including transport failures, is mapped to an
ExecutionResult; validation failures carry the normalized Jira error body.
"""

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from orchestra.execution.normalizer import ProviderErrorPayload, normalize
from orchestra.execution.request import ProviderType
from orchestra.execution.result import ErrorKind, ExecutionResult
from orchestra.integrations.base import ToolAdapter, classify_status, truncate_detail
from orchestra.integrations.jira.types import (
    JIRA_ACTIONS,
    CreateIssueAction,
    DeleteIssueAction,
    GetIssueAction,
    JiraAction,
    JiraCredentials,
    UpdateIssueAction,
    adf_to_text,
    text_to_adf,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/rest/api/3"

AUTH_FAILED_MESSAGE = "Failed to authenticate with Jira. Please verify the API token."
SERVER_ERROR_MESSAGE = "Jira server error occurred. Please try again later."
RATE_LIMITED_MESSAGE = "Jira rate limit exceeded. Please try again later."
CONNECT_FAILED_MESSAGE = "Failed to connect to Jira. Please verify the integration URL."
TIMEOUT_MESSAGE = "Timed out waiting for Jira. Please try again later."
PARSE_FAILED_MESSAGE = "Failed to parse Jira API response."


class JiraToolAdapter(ToolAdapter):
    """Jira REST adapter.

    The HTTP client is created lazily unless one is injected (tests pass a
    client built on ``httpx.MockTransport``).
    """

    provider = ProviderType.JIRA

    def __init__(
        self,
        credentials: JiraCredentials,
        *,
        timeout_seconds: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._credentials = credentials
        self._timeout_seconds = timeout_seconds
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._credentials.base_url.rstrip("/"),
                auth=httpx.BasicAuth(
                    self._credentials.email,
                    self._credentials.api_token.get_secret_value(),
                ),
                headers={"Accept": "application/json"},
                timeout=self._timeout_seconds,
            )
        return self._client

    async def invoke(self, payload: dict[str, Any]) -> ExecutionResult:
        action = self._parse_action(payload)
        if isinstance(action, ExecutionResult):
            return action

        method, path, body = self._build_request(action)
        try:
            response = await self._get_client().request(method, path, json=body)
        except httpx.TimeoutException:
            logger.warning(
                f"Jira {action.action} timed out",
                extra={"provider": self.provider.value, "action": action.action},
            )
            return ExecutionResult.failure(TIMEOUT_MESSAGE, ErrorKind.TRANSIENT)
        except httpx.TransportError:
            logger.warning(
                f"Failed to connect to Jira for {action.action}",
                exc_info=True,
                extra={"provider": self.provider.value, "action": action.action},
            )
            return ExecutionResult.failure(CONNECT_FAILED_MESSAGE, ErrorKind.TRANSIENT)
        except httpx.HTTPError as e:
            logger.error(
                f"Failed to communicate with Jira for {action.action}: {e}",
                extra={"provider": self.provider.value, "action": action.action},
            )
            return ExecutionResult.failure(
                f"Failed to communicate with Jira: {type(e).__name__}", ErrorKind.UNKNOWN
            )

        return self._map_response(action, response)

    async def shutdown(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # -- Request building ------------------------------------------------------

    def _parse_action(self, payload: dict[str, Any]) -> JiraAction | ExecutionResult:
        name = payload.get("action") if isinstance(payload, dict) else None
        model = JIRA_ACTIONS.get(name) if isinstance(name, str) else None
        if model is None:
            supported = ", ".join(JIRA_ACTIONS)
            return ExecutionResult.failure(
                normalize(
                    ProviderErrorPayload(
                        field_errors={"action": f"must be one of: {supported}"}
                    )
                ),
                ErrorKind.VALIDATION,
            )
        return self.parse_payload(model, payload)

    def _build_request(self, action: BaseModel) -> tuple[str, str, dict[str, Any] | None]:
        if isinstance(action, CreateIssueAction):
            fields: dict[str, Any] = {
                "project": {"key": action.project_key},
                "summary": action.summary,
                "issuetype": {"name": action.issue_type},
            }
            if action.description:
                fields["description"] = text_to_adf(action.description)
            return "POST", f"{API_PREFIX}/issue", {"fields": fields}

        if isinstance(action, UpdateIssueAction):
            fields = {}
            if action.summary:
                fields["summary"] = action.summary
            if action.description:
                fields["description"] = text_to_adf(action.description)
            return "PUT", f"{API_PREFIX}/issue/{action.issue_key}", {"fields": fields}

        if isinstance(action, GetIssueAction):
            return "GET", f"{API_PREFIX}/issue/{action.issue_key}", None

        if isinstance(action, DeleteIssueAction):
            return "DELETE", f"{API_PREFIX}/issue/{action.issue_key}", None

        raise TypeError(f"Unsupported Jira action: {type(action).__name__}")

    # -- Response mapping ------------------------------------------------------

    def _map_response(self, action: JiraAction, response: httpx.Response) -> ExecutionResult:
        status_code = response.status_code
        kind = classify_status(status_code)
        log_extra = {
            "provider": self.provider.value,
            "action": action.action,
            "status_code": status_code,
        }

        if kind is None:
            return self._summarize_success(action, response)

        if kind is ErrorKind.VALIDATION:
            message = normalize(ProviderErrorPayload.from_body(response.content))
            logger.warning(
                f"Jira rejected {action.action}: {message}",
                extra={**log_extra, "error_kind": kind.value},
            )
            return ExecutionResult.failure(message, kind)

        if kind is ErrorKind.AUTH:
            logger.error(f"Jira {action.action} not authorized ({status_code})", extra=log_extra)
            if status_code == 401:
                return ExecutionResult.failure(AUTH_FAILED_MESSAGE, kind)
            return ExecutionResult.failure(self._forbidden_message(action), kind)

        if kind is ErrorKind.NOT_FOUND:
            logger.warning(f"Jira {action.action} target not found", extra=log_extra)
            return ExecutionResult.failure(self._not_found_message(action), kind)

        if kind is ErrorKind.TRANSIENT:
            logger.warning(f"Jira {action.action} failed transiently ({status_code})", extra=log_extra)
            if status_code == 429:
                return ExecutionResult.failure(RATE_LIMITED_MESSAGE, kind)
            return ExecutionResult.failure(SERVER_ERROR_MESSAGE, kind)

        detail = truncate_detail(response.text) or response.reason_phrase
        logger.error(
            f"Unexpected Jira response {status_code} for {action.action}",
            extra={**log_extra, "detail": detail},
        )
        return ExecutionResult.failure(
            f"Unexpected Jira response ({status_code}): {detail}", ErrorKind.UNKNOWN
        )

    def _summarize_success(self, action: JiraAction, response: httpx.Response) -> ExecutionResult:
        if isinstance(action, UpdateIssueAction):
            url = self._credentials.browse_url(action.issue_key)
            return ExecutionResult.success(
                f"Successfully updated Jira issue {action.issue_key} ({url})"
            )

        if isinstance(action, DeleteIssueAction):
            return ExecutionResult.success(f"Successfully deleted Jira issue {action.issue_key}")

        try:
            data = response.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            logger.error(
                f"Could not decode Jira response for {action.action}",
                extra={"provider": self.provider.value, "action": action.action},
            )
            return ExecutionResult.failure(PARSE_FAILED_MESSAGE, ErrorKind.UNKNOWN)

        if isinstance(action, CreateIssueAction):
            issue_key = data.get("key")
            if not isinstance(issue_key, str) or not issue_key:
                return ExecutionResult.failure(PARSE_FAILED_MESSAGE, ErrorKind.UNKNOWN)
            logger.info(f"Created Jira issue {issue_key}", extra={"issue_key": issue_key})
            url = self._credentials.browse_url(issue_key)
            return ExecutionResult.success(f"Successfully created Jira issue {issue_key} ({url})")

        return ExecutionResult.success(self._describe_issue(action.issue_key, data))

    def _describe_issue(self, requested_key: str, data: dict[str, Any]) -> str:
        fields = data.get("fields")
        if not isinstance(fields, dict):
            fields = {}

        def _name(value: Any, key: str = "name") -> str | None:
            if isinstance(value, dict) and isinstance(value.get(key), str):
                return value[key]
            return None

        issue_key = data.get("key") if isinstance(data.get("key"), str) else requested_key
        lines = [
            f"{issue_key}: {fields.get('summary') or ''}".rstrip(),
            f"Status: {_name(fields.get('status')) or 'Unknown'}",
            f"Type: {_name(fields.get('issuetype')) or 'Unknown'}",
            f"Assignee: {_name(fields.get('assignee'), 'displayName') or 'Unassigned'}",
        ]
        priority = _name(fields.get("priority"))
        if priority:
            lines.append(f"Priority: {priority}")
        lines.append(f"URL: {self._credentials.browse_url(issue_key)}")

        description = adf_to_text(fields.get("description")).strip()
        if description:
            lines.extend(["", description])
        return "\n".join(lines)

    @staticmethod
    def _forbidden_message(action: JiraAction) -> str:
        if isinstance(action, CreateIssueAction):
            return (
                f"You do not have permission to create issues in Jira project "
                f"'{action.project_key}'."
            )
        verb = action.action.removesuffix("_issue")
        return f"You do not have permission to {verb} Jira issue '{action.issue_key}'."

    @staticmethod
    def _not_found_message(action: JiraAction) -> str:
        if isinstance(action, CreateIssueAction):
            return (
                f"Jira project '{action.project_key}' or issue type "
                f"'{action.issue_type}' not found."
            )
        return f"Jira issue '{action.issue_key}' not found or you do not have access to it."
