"""Tests for the bootstrap guard and credential resolution."""

from unittest.mock import Mock

import pytest

from jira_gateway.core.exceptions import (
    AuthorizationError,
    AuthorizationKeyError,
    AuthorizationMissingCredentialError,
    AuthorizationUnexpectedError,
    IntegrationUnavailableError,
    OAuth1Error,
)
from jira_gateway.core.messages import MessageCatalog
from jira_gateway.integrations.oauth1 import OAuth1Provider
from jira_gateway.services.authorization import AccessCredentialResolver, BootstrapGuard
from jira_gateway.services.integration import JiraIntegrationStore

JIRA_URL = "https://jira.example.com"


@pytest.fixture
def store():
    """Integration store double."""
    return Mock(spec=JiraIntegrationStore)


@pytest.fixture
def resolver(store):
    """Credential resolver over the store double."""
    return AccessCredentialResolver(store, MessageCatalog())


class TestBootstrapGuard:
    """Test BootstrapGuard."""

    def test_ready_when_settings_exist(self, store):
        """Test no error once the integration is configured."""
        store.get_settings.return_value = Mock()
        BootstrapGuard(store, MessageCatalog()).ensure_ready()

    def test_unavailable_without_settings(self, store):
        """Test the guard fails when settings are absent."""
        store.get_settings.return_value = None

        with pytest.raises(IntegrationUnavailableError) as exc_info:
            BootstrapGuard(store, MessageCatalog()).ensure_ready()

        assert exc_info.value.status_code == 503
        assert exc_info.value.message == "Integration jira is unavailable."
        assert exc_info.value.solution


class TestResolve:
    """Test AccessCredentialResolver.resolve."""

    def test_returns_token(self, store, resolver):
        """Test the stored token is returned."""
        store.get_access_token.return_value = "token-123"

        assert resolver.resolve(JIRA_URL, 7) == "token-123"
        store.get_access_token.assert_called_once_with(JIRA_URL, 7)

    @pytest.mark.parametrize("token", [None, "", "   "])
    def test_missing_token(self, store, resolver, token):
        """Test absent or blank tokens mean the user has not authorized."""
        store.get_access_token.return_value = token

        with pytest.raises(AuthorizationMissingCredentialError) as exc_info:
            resolver.resolve(JIRA_URL, 7)

        assert exc_info.value.status_code == 401
        assert JIRA_URL in exc_info.value.message

    def test_store_failure(self, store, resolver):
        """Test store errors are wrapped with the cause preserved."""
        cause = AuthorizationError("token table unavailable")
        store.get_access_token.side_effect = cause

        with pytest.raises(AuthorizationUnexpectedError) as exc_info:
            resolver.resolve(JIRA_URL, 7)

        assert exc_info.value.status_code == 500
        assert exc_info.value.__cause__ is cause

    def test_token_not_in_error_message(self, store, resolver):
        """Test error messages never carry a credential."""
        store.get_access_token.return_value = "   "

        with pytest.raises(AuthorizationMissingCredentialError) as exc_info:
            resolver.resolve(JIRA_URL, 7)

        assert "token-123" not in str(exc_info.value)


class TestResolveProvider:
    """Test AccessCredentialResolver.resolve_provider."""

    def test_returns_provider(self, store, resolver):
        """Test the signing context is returned."""
        provider = Mock(spec=OAuth1Provider)
        store.get_oauth1_provider.return_value = provider

        assert resolver.resolve_provider(JIRA_URL) is provider

    def test_key_error(self, store, resolver):
        """Test signing context failures are deployment errors."""
        cause = OAuth1Error("No application link registered")
        store.get_oauth1_provider.side_effect = cause

        with pytest.raises(AuthorizationKeyError) as exc_info:
            resolver.resolve_provider(JIRA_URL)

        assert exc_info.value.status_code == 500
        assert exc_info.value.__cause__ is cause

    def test_key_error_is_not_missing_credential(self, store, resolver):
        """Test the three authorization failures stay distinct."""
        store.get_oauth1_provider.side_effect = OAuth1Error("bad key")

        with pytest.raises(AuthorizationKeyError) as exc_info:
            resolver.resolve_provider(JIRA_URL)

        assert not isinstance(exc_info.value, AuthorizationMissingCredentialError)
        assert not isinstance(exc_info.value, AuthorizationUnexpectedError)
