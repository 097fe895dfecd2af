"""
Tests for orchestra.execution.result.

Tests:
- success/failure factories
- Either/or invariant enforced on direct construction
- Immutability and value equality
"""

import pytest
from pydantic import ValidationError

from orchestra.execution.result import UNKNOWN_ERROR, ErrorKind, ExecutionResult


class TestFactories:
    @pytest.mark.parametrize("message", ["done", "Successfully created Jira issue PROJ-1", ""])
    def test_success_has_no_error(self, message):
        result = ExecutionResult.success(message)

        assert result.is_success is True
        assert result.message == message
        assert result.error_message is None
        assert result.error_kind is None

    @pytest.mark.parametrize("kind", list(ErrorKind))
    def test_failure_has_no_message(self, kind):
        result = ExecutionResult.failure("summary: is required", kind)

        assert result.is_success is False
        assert result.message is None
        assert result.error_message == "summary: is required"
        assert result.error_kind is kind

    @pytest.mark.parametrize("blank", ["", "   "])
    def test_failure_with_blank_message_still_has_error_text(self, blank):
        result = ExecutionResult.failure(blank, ErrorKind.UNKNOWN)

        assert result.error_message == UNKNOWN_ERROR


class TestInvariant:
    def test_rejects_both_message_and_error(self):
        with pytest.raises(ValidationError):
            ExecutionResult(
                is_success=True,
                message="ok",
                error_message="boom",
                error_kind=ErrorKind.UNKNOWN,
            )

    def test_rejects_neither(self):
        with pytest.raises(ValidationError):
            ExecutionResult(is_success=False)

    def test_rejects_failure_without_kind(self):
        with pytest.raises(ValidationError):
            ExecutionResult(is_success=False, error_message="boom")

    def test_rejects_success_with_error_kind(self):
        with pytest.raises(ValidationError):
            ExecutionResult(is_success=True, message="ok", error_kind=ErrorKind.AUTH)

    def test_is_frozen(self):
        result = ExecutionResult.success("ok")

        with pytest.raises(ValidationError):
            result.message = "changed"


class TestEquality:
    def test_equal_when_all_fields_match(self):
        assert ExecutionResult.success("ok") == ExecutionResult.success("ok")
        assert ExecutionResult.failure("x", ErrorKind.AUTH) == ExecutionResult.failure(
            "x", ErrorKind.AUTH
        )

    def test_not_equal_when_kind_differs(self):
        assert ExecutionResult.failure("x", ErrorKind.AUTH) != ExecutionResult.failure(
            "x", ErrorKind.NOT_FOUND
        )

    def test_hashable(self):
        results = {ExecutionResult.success("ok"), ExecutionResult.success("ok")}
        assert len(results) == 1


class TestRetryable:
    @pytest.mark.parametrize(
        "kind,expected",
        [
            (ErrorKind.TRANSIENT, True),
            (ErrorKind.UNKNOWN, True),
            (ErrorKind.VALIDATION, False),
            (ErrorKind.AUTH, False),
            (ErrorKind.NOT_FOUND, False),
        ],
    )
    def test_retryable_kinds(self, kind, expected):
        assert ExecutionResult.failure("x", kind).is_retryable is expected

    def test_success_is_not_retryable(self):
        assert ExecutionResult.success("ok").is_retryable is False
