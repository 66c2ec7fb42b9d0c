"""Core utilities for the JIRA API gateway."""

from .exceptions import (
    GatewayError,
    IntegrationUnavailableError,
    InvalidJiraURLError,
    AuthorizationMissingCredentialError,
    AuthorizationUnexpectedError,
    AuthorizationKeyError,
    JiraAuthorizationError,
    TokenVerificationError,
    AuthorizationError,
    OAuth1Error,
    OAuth1HttpRequestError,
)
from .messages import MessageCatalog, get_message_catalog

__all__ = [
    "GatewayError",
    "IntegrationUnavailableError",
    "InvalidJiraURLError",
    "AuthorizationMissingCredentialError",
    "AuthorizationUnexpectedError",
    "AuthorizationKeyError",
    "JiraAuthorizationError",
    "TokenVerificationError",
    "AuthorizationError",
    "OAuth1Error",
    "OAuth1HttpRequestError",
    "MessageCatalog",
    "get_message_catalog",
]
