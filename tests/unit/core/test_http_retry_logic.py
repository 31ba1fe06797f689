# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from unittest.mock import Mock, patch
import pytest
import requests

from forcemap.core._http import _HttpClient


class TestHttpClientRetryLogic:
    """Test retry logic in _HttpClient."""

    def test_default_configuration(self):
        client = _HttpClient()
        assert client.max_attempts == 5
        assert client.base_delay == 0.5
        assert client.max_backoff == 60.0
        assert client.jitter is True
        assert client.retry_transient_errors is True

    def test_custom_configuration(self):
        client = _HttpClient(retries=3, backoff=1.0, max_backoff=30.0, jitter=False, retry_transient_errors=False)
        assert client.max_attempts == 3
        assert client.base_delay == 1.0
        assert client.max_backoff == 30.0
        assert client.jitter is False
        assert client.retry_transient_errors is False

    @patch("requests.request")
    def test_successful_request_no_retry(self, mock_request):
        mock_request.return_value = Mock(status_code=200)
        client = _HttpClient()
        response = client._request("GET", "https://test.example.com")
        assert response.status_code == 200
        assert mock_request.call_count == 1
        assert client.last_retry_count == 0

    @patch("requests.request")
    @patch("time.sleep")
    def test_network_error_retry(self, mock_sleep, mock_request):
        mock_request.side_effect = [
            requests.exceptions.ConnectionError("Network error"),
            requests.exceptions.ConnectionError("Network error"),
            Mock(status_code=200),
        ]
        client = _HttpClient(jitter=False)
        response = client._request("GET", "https://test.example.com")
        assert response.status_code == 200
        assert mock_request.call_count == 3
        mock_sleep.assert_any_call(0.5)
        mock_sleep.assert_any_call(1.0)
        assert client.last_retry_count == 2

    @patch("requests.request")
    @patch("time.sleep")
    def test_network_error_exhausts_attempts(self, mock_sleep, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError("down")
        client = _HttpClient(retries=2, jitter=False)
        with pytest.raises(requests.exceptions.ConnectionError):
            client._request("GET", "https://test.example.com")
        assert mock_request.call_count == 2

    @patch("requests.request")
    @patch("time.sleep")
    def test_transient_status_retry(self, mock_sleep, mock_request):
        mock_request.side_effect = [Mock(status_code=503, headers={}), Mock(status_code=200, headers={})]
        client = _HttpClient(jitter=False)
        response = client._request("GET", "https://test.example.com")
        assert response.status_code == 200
        mock_sleep.assert_called_once_with(0.5)

    @patch("requests.request")
    @patch("time.sleep")
    def test_retry_after_header_wins(self, mock_sleep, mock_request):
        mock_request.side_effect = [
            Mock(status_code=429, headers={"Retry-After": "3"}),
            Mock(status_code=200, headers={}),
        ]
        client = _HttpClient(jitter=False)
        client._request("GET", "https://test.example.com")
        mock_sleep.assert_called_once_with(3)

    @patch("requests.request")
    @patch("time.sleep")
    def test_transient_retry_can_be_disabled(self, mock_sleep, mock_request):
        mock_request.return_value = Mock(status_code=503, headers={})
        client = _HttpClient(retry_transient_errors=False)
        assert client._request("GET", "https://test.example.com").status_code == 503
        mock_sleep.assert_not_called()

    @patch("requests.request")
    def test_non_transient_status_is_returned(self, mock_request):
        mock_request.return_value = Mock(status_code=404, headers={})
        client = _HttpClient()
        assert client._request("GET", "https://test.example.com").status_code == 404
        assert mock_request.call_count == 1

    @patch("requests.request")
    def test_default_timeouts_by_method(self, mock_request):
        mock_request.return_value = Mock(status_code=200)
        client = _HttpClient()
        client._request("GET", "https://test.example.com")
        assert mock_request.call_args.kwargs["timeout"] == 10
        client._request("PATCH", "https://test.example.com")
        assert mock_request.call_args.kwargs["timeout"] == 120

    @patch("requests.request")
    def test_configured_timeout(self, mock_request):
        mock_request.return_value = Mock(status_code=200)
        _HttpClient(timeout=7)._request("POST", "https://test.example.com")
        assert mock_request.call_args.kwargs["timeout"] == 7

    def test_session_is_used_and_closed(self):
        session = Mock()
        session.request.return_value = Mock(status_code=200)
        client = _HttpClient(session=session)
        client._request("GET", "https://test.example.com")
        session.request.assert_called_once()
        client.close()
        session.close.assert_called_once()
        client.close()

    def test_backoff_is_capped(self):
        client = _HttpClient(backoff=10.0, max_backoff=15.0, jitter=False)
        assert client._calculate_retry_delay(5) == 15.0
