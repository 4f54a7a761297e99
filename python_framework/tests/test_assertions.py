"""Tests for ResultAssertions test helper."""

import pytest

from railway import ErrorCode, Result, ResultAssertions


class TestAssertSuccess:
    def test_returns_value(self):
        assert ResultAssertions.assert_success(Result.success(42)) == 42

    def test_fails_on_failure_with_clear_message(self):
        result = Result.failure(ErrorCode.VALIDATION_ERROR, "no certificates supplied")
        with pytest.raises(AssertionError, match="Expected Success but got Failure"):
            ResultAssertions.assert_success(result)

    def test_success_value(self):
        ResultAssertions.assert_success_value(Result.success("0"), "0")


class TestAssertFailure:
    def test_checks_error_code(self):
        error = ResultAssertions.assert_failure(
            Result.failure(ErrorCode.TECHNICAL_ERROR, "bad"),
            ErrorCode.TECHNICAL_ERROR,
        )
        assert error.message == "bad"

    def test_fails_on_wrong_error_code(self):
        result = Result.failure(ErrorCode.TECHNICAL_ERROR, "x")
        with pytest.raises(AssertionError, match="Expected error code VALIDATION_ERROR"):
            ResultAssertions.assert_failure(result, ErrorCode.VALIDATION_ERROR)

    def test_fails_on_success(self):
        with pytest.raises(AssertionError, match="Expected Failure but got Success"):
            ResultAssertions.assert_failure(Result.success(42))

    def test_message_contains_is_case_insensitive(self):
        result = Result.failure(ErrorCode.TECHNICAL_ERROR, "Failed to generate JKS")
        ResultAssertions.assert_failure_message_contains(result, "generate jks")
