"""Tests for OAuth1 signed requests."""

from unittest.mock import patch

import pytest
import requests

from jira_gateway.core.exceptions import OAuth1Error, OAuth1HttpRequestError
from jira_gateway.integrations.oauth1 import OAuth1Provider

URL = "https://jira.example.com/rest/api/latest/issue/PROJ-1/assignee"


def _response(status_code=200, content=b""):
    response = requests.Response()
    response.status_code = status_code
    response._content = content
    response.encoding = "utf-8"
    response.url = URL
    return response


@pytest.fixture
def provider(private_key_pem):
    """Provider signing with the test application key."""
    return OAuth1Provider("gateway-consumer", private_key_pem, timeout=5)


class TestOAuth1Provider:
    """Test OAuth1Provider."""

    def test_requires_keys(self):
        """Test a provider cannot be built without application keys."""
        with pytest.raises(OAuth1Error):
            OAuth1Provider("", "")

    @patch("requests.Session.send")
    def test_request_is_signed(self, mock_send, provider):
        """Test requests carry an RSA-SHA1 OAuth1 authorization header."""
        mock_send.return_value = _response(content=b"[]")

        response = provider.make_authorized_request("user-access-token", URL, "GET")

        assert response.content == b"[]"
        prepared = mock_send.call_args.args[0]
        authorization = prepared.headers["Authorization"]
        if isinstance(authorization, bytes):
            authorization = authorization.decode()
        assert authorization.startswith("OAuth ")
        assert 'oauth_signature_method="RSA-SHA1"' in authorization
        assert 'oauth_consumer_key="gateway-consumer"' in authorization
        assert 'oauth_token="user-access-token"' in authorization
        assert prepared.method == "GET"
        assert prepared.headers["Accept"] == "application/json"

    @patch("requests.Session.send")
    def test_json_body(self, mock_send, provider):
        """Test payloads are sent as JSON."""
        mock_send.return_value = _response(status_code=204)

        provider.make_authorized_request("user-access-token", URL, "PUT", {"name": "jdoe"})

        prepared = mock_send.call_args.args[0]
        assert prepared.method == "PUT"
        assert prepared.body == b'{"name": "jdoe"}'
        assert prepared.headers["Content-Type"] == "application/json"

    @patch("requests.Session.send")
    def test_transport_timeout(self, mock_send, provider):
        """Test the configured timeout is applied."""
        mock_send.return_value = _response()

        provider.make_authorized_request("user-access-token", URL, "GET")

        assert mock_send.call_args.kwargs["timeout"] == 5

    @patch("requests.Session.send")
    def test_certificate_verification_disabled(self, mock_send, private_key_pem):
        """Test certificate verification can be turned off."""
        mock_send.return_value = _response()
        provider = OAuth1Provider("gateway-consumer", private_key_pem, verify_ssl=False)

        provider.make_authorized_request("user-access-token", URL, "GET")

        assert mock_send.call_args.kwargs["verify"] is False

    @patch("requests.Session.send")
    def test_not_found(self, mock_send, provider):
        """Test error statuses raise with the upstream code and body."""
        mock_send.return_value = _response(
            status_code=404, content=b'{"errorMessages":["Issue Does Not Exist"]}'
        )

        with pytest.raises(OAuth1HttpRequestError) as exc_info:
            provider.make_authorized_request("user-access-token", URL, "GET")

        assert exc_info.value.code == 404
        assert exc_info.value.message == '{"errorMessages":["Issue Does Not Exist"]}'

    @patch("requests.Session.send")
    def test_unauthorized(self, mock_send, provider):
        """Test rejected tokens raise an HTTP request error."""
        mock_send.return_value = _response(status_code=401, content=b"oauth_problem=token_rejected")

        with pytest.raises(OAuth1HttpRequestError) as exc_info:
            provider.make_authorized_request("user-access-token", URL, "GET")

        assert exc_info.value.code == 401

    @patch("requests.Session.send")
    def test_connection_error(self, mock_send, provider):
        """Test transport failures raise OAuth1Error."""
        mock_send.side_effect = requests.exceptions.ConnectionError("Network error")

        with pytest.raises(OAuth1Error) as exc_info:
            provider.make_authorized_request("user-access-token", URL, "GET")

        assert not isinstance(exc_info.value, OAuth1HttpRequestError)

    def test_invalid_private_key(self):
        """Test unusable private keys fail while signing."""
        provider = OAuth1Provider("gateway-consumer", "not a pem key")

        with patch("requests.Session.send") as mock_send:
            with pytest.raises(OAuth1Error):
                provider.make_authorized_request("user-access-token", URL, "GET")
            mock_send.assert_not_called()
