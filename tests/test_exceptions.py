"""
Exception Tests for tracker-core
"""

import pytest

from tracker_core.exceptions import (
    ClosedError,
    ConfigurationError,
    ErrorCategory,
    ErrorSeverity,
    NotCallableError,
    TrackerCoreError,
    describe_error,
    is_sensitive_key,
)


class TestTrackerCoreError:
    """Base exception"""

    def test_defaults(self):
        error = TrackerCoreError("something failed")

        assert error.message == "something failed"
        assert error.error_code == "TRACKERCOREERROR"
        assert error.severity == ErrorSeverity.MEDIUM
        assert error.category == ErrorCategory.SYSTEM
        assert str(error) == "TrackerCoreError: something failed"

    def test_to_dict(self):
        cause = OSError("disk")
        error = TrackerCoreError("failed", details={"path": "/tmp"}, cause=cause)

        data = error.to_dict()

        assert data["error_type"] == "TrackerCoreError"
        assert data["details"] == {"path": "/tmp"}
        assert data["cause"] == "disk"
        assert "timestamp" in data


class TestSpecificErrors:
    """Errors raised by the trackers"""

    def test_closed_error(self):
        error = ClosedError("tracker_1.settled")

        assert isinstance(error, TrackerCoreError)
        assert error.category == ErrorCategory.LIFECYCLE
        assert error.details["component"] == "tracker_1.settled"
        assert "closed" in error.message

    def test_not_callable_error(self):
        error = NotCallableError("save", 42)

        assert error.category == ErrorCategory.VALIDATION
        assert error.details == {"operation": "save", "value_type": "int"}
        assert "not callable" in error.message

    def test_configuration_error(self):
        error = ConfigurationError("stack", expected_type="'context'", actual_value="x")

        assert error.category == ErrorCategory.CONFIGURATION
        assert error.severity == ErrorSeverity.CRITICAL
        assert error.details["actual_value"] == "x"
        assert "stack" in error.message

    def test_raise_and_catch_as_base(self):
        with pytest.raises(TrackerCoreError):
            raise NotCallableError("op", None)


class TestDescribeError:
    """describe_error"""

    def test_user_error(self):
        description = describe_error(KeyError("missing"))

        assert description == {"error_type": "KeyError", "message": "'missing'"}

    def test_user_error_traceback(self):
        try:
            raise ValueError("boom")
        except ValueError as error:
            description = describe_error(error, include_traceback=True)

        assert "ValueError: boom" in description["traceback"]

    def test_tracker_error_hides_sensitive_details(self):
        error = TrackerCoreError(
            "failed", details={"api_token": "secret", "operation": "save"}
        )

        description = describe_error(error)

        assert description["details"] == {"operation": "save"}
        assert description["error_code"] == "TRACKERCOREERROR"

    def test_context_on_request(self):
        error = TrackerCoreError("failed", context={"tracker_id": "t1"})

        assert "context" not in describe_error(error)
        assert describe_error(error, include_context=True)["context"] == {
            "tracker_id": "t1"
        }

    def test_configuration_key_is_kept(self):
        """Detail names merely containing "key" are not treated as secrets"""
        error = ConfigurationError("stack", expected_type="'context'", actual_value="x")

        description = describe_error(error)

        assert description["details"]["config_key"] == "stack"
        assert description["category"] == "configuration"

    def test_tracker_error_traceback(self):
        try:
            raise NotCallableError("op", 1)
        except NotCallableError as error:
            description = describe_error(error, include_traceback=True)

        assert "NotCallableError" in description["traceback"]

    def test_sensitive_key_matching(self):
        assert is_sensitive_key("password")
        assert is_sensitive_key("API_KEY")
        assert is_sensitive_key("refresh_token")
        assert not is_sensitive_key("config_key")
        assert not is_sensitive_key("tokenizer")
