"""Unit tests for confluence_client.retry_logic module."""

import pytest
from unittest.mock import patch, MagicMock

from src.confluence_client.retry_logic import (
    BACKOFF_DELAYS,
    _is_rate_limit_error,
    retry_on_rate_limit,
)
from src.confluence_client.errors import APIAccessError, AuthAttempt, ExternalServiceError


class TestIsRateLimitError:
    """Test cases for _is_rate_limit_error function."""

    def test_detects_external_service_error_429(self):
        """A 429 ExternalServiceError is a rate limit."""
        assert _is_rate_limit_error(ExternalServiceError("get_page_by_id(1)", 429, "")) is True

    def test_ignores_external_service_error_404(self):
        """Other statuses are not rate limits, whatever the message says."""
        error = ExternalServiceError("get_page_by_id(1)", 404, "rate limit exceeded")
        assert _is_rate_limit_error(error) is False

    def test_detects_status_code_attribute(self):
        """status_code=429 on an HTTP library error is a rate limit."""
        error = Exception("API error")
        error.status_code = 429
        assert _is_rate_limit_error(error) is True

    def test_detects_response_status_code_attribute(self):
        """response.status_code=429 is a rate limit."""
        error = Exception("API error")
        error.response = MagicMock()
        error.response.status_code = 429
        assert _is_rate_limit_error(error) is True

    def test_detects_rate_limit_phrases(self):
        """Common rate limit phrases are recognised without a status."""
        assert _is_rate_limit_error(Exception("Rate limit exceeded")) is True
        assert _is_rate_limit_error(Exception("Too many requests, slow down")) is True

    def test_bare_number_in_message_is_not_a_rate_limit(self):
        """A page id containing 429 must not trigger retries."""
        assert _is_rate_limit_error(Exception("Page 14290 not found")) is False

    def test_api_access_error_without_attempts_is_not_a_rate_limit(self):
        """An APIAccessError carrying no attempts falls through to the message."""
        assert _is_rate_limit_error(APIAccessError("get_page_by_id(1) failed")) is False

    def test_api_access_error_uses_primary_status(self):
        """An APIAccessError is judged by its primary attempt."""
        error = APIAccessError("failed", attempts=[AuthAttempt("app", 404, "")])
        assert _is_rate_limit_error(error) is False


class TestRetryOnRateLimit:
    """Test cases for retry_on_rate_limit function."""

    def test_success_on_first_attempt(self):
        """The result is returned without sleeping."""
        mock_func = MagicMock(return_value="success")
        result = retry_on_rate_limit(mock_func, "arg1", kwarg1="value1")

        assert result == "success"
        mock_func.assert_called_once_with("arg1", kwarg1="value1")

    @patch('time.sleep')
    def test_exponential_backoff_timing(self, mock_sleep):
        """Backoff waits 1s, 2s then 4s."""
        rate_limited = ExternalServiceError("create_page", 429, "")
        mock_func = MagicMock(side_effect=[rate_limited, rate_limited, rate_limited, "success"])

        result = retry_on_rate_limit(mock_func)

        assert result == "success"
        assert mock_func.call_count == 4
        assert [c[0][0] for c in mock_sleep.call_args_list] == [1, 2, 4]
        assert tuple(c[0][0] for c in mock_sleep.call_args_list) == BACKOFF_DELAYS

    @patch('time.sleep')
    def test_raises_api_access_error_after_max_retries(self, mock_sleep):
        """A persistent rate limit ends in APIAccessError."""
        mock_func = MagicMock(side_effect=ExternalServiceError("create_page", 429, ""))

        with pytest.raises(APIAccessError) as exc_info:
            retry_on_rate_limit(mock_func)

        assert str(exc_info.value) == "Confluence API failure (after 3 retries)"
        assert isinstance(exc_info.value.__cause__, ExternalServiceError)
        assert mock_func.call_count == 4
        assert mock_sleep.call_count == 3

    def test_fails_fast_on_non_rate_limit_error(self):
        """Other errors propagate on the first attempt."""
        mock_func = MagicMock(side_effect=ExternalServiceError("create_page", 500, "boom"))

        with pytest.raises(ExternalServiceError):
            retry_on_rate_limit(mock_func)

        assert mock_func.call_count == 1

    @patch('time.sleep')
    def test_preserves_function_arguments(self, mock_sleep):
        """Every retry receives the same arguments."""
        rate_limited = Exception("Too many requests")
        mock_func = MagicMock(side_effect=[rate_limited, "success"])

        retry_on_rate_limit(mock_func, "a", "b", key="value")

        for call in mock_func.call_args_list:
            assert call[0] == ("a", "b")
            assert call[1] == {"key": "value"}
