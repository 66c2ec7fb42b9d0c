"""Signed calls to the JIRA REST API and translation of their outcome."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from pydantic import BaseModel

from ..core.exceptions import JiraAuthorizationError, OAuth1Error, OAuth1HttpRequestError
from ..core.logging import LogEvent, log_event
from ..core.messages import JIRA_REQUEST_ERROR, MessageCatalog
from ..integrations.oauth1 import OAuth1Provider


HTTP_GET = "GET"
HTTP_PUT = "PUT"


class ErrorResponse(BaseModel):
    """Structured error payload returned to callers."""

    status: int
    message: Optional[str] = None
    solution: Optional[str] = None


@dataclass(frozen=True)
class NormalizedResponse:
    """Outcome of a JIRA operation as returned to the caller.

    Exactly one of body (upstream passthrough) and error is set.
    """

    status_code: int
    body: Optional[str] = None
    error: Optional[ErrorResponse] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


class ResponseTranslator:
    """Maps upstream outcomes to NormalizedResponse."""

    def bad_request(self) -> NormalizedResponse:
        return NormalizedResponse(status_code=400, error=ErrorResponse(status=400))

    def not_found(self, error: OAuth1HttpRequestError) -> NormalizedResponse:
        return NormalizedResponse(
            status_code=404,
            error=ErrorResponse(status=404, message=error.message),
        )

    def success(self, body: str) -> NormalizedResponse:
        return NormalizedResponse(status_code=200, body=body)


class SignedCallExecutor:
    """Dispatches a signed call and translates its outcome.

    A 404 from JIRA is an ordinary, caller-meaningful response. Every other
    signing or transport failure is unexpected at this point, since the
    credential and signing context were already resolved.
    """

    def __init__(self, messages: MessageCatalog, translator: Optional[ResponseTranslator] = None):
        self.messages = messages
        self.translator = translator or ResponseTranslator()

    def execute(
        self,
        access_token: str,
        provider: OAuth1Provider,
        url: str,
        method: str,
        issue_key: Optional[str],
        body: Optional[Dict[str, Any]] = None,
    ) -> NormalizedResponse:
        if not issue_key:
            return self.translator.bad_request()

        try:
            response = provider.make_authorized_request(access_token, url, method, body)
        except OAuth1HttpRequestError as e:
            if e.code == 404:
                log_event(
                    LogEvent.JIRA_CALL_NOT_FOUND,
                    "JIRA returned not found",
                    method=method,
                    issue_key=issue_key,
                )
                return self.translator.not_found(e)
            raise self._failure(url, method, e) from e
        except OAuth1Error as e:
            raise self._failure(url, method, e) from e

        try:
            text = self._decode(response)
        except (UnicodeDecodeError, LookupError) as e:
            raise self._failure(url, method, e) from e

        log_event(
            LogEvent.JIRA_CALL_SUCCEEDED,
            "JIRA call succeeded",
            method=method,
            issue_key=issue_key,
            upstream_status=response.status_code,
        )
        return self.translator.success(text)

    @staticmethod
    def _decode(response: requests.Response) -> str:
        return response.content.decode(response.encoding or "utf-8")

    def _failure(self, url: str, method: str, error: Exception) -> JiraAuthorizationError:
        endpoint = url.split("?", 1)[0]
        log_event(
            LogEvent.JIRA_CALL_FAILED,
            "JIRA call failed",
            level="ERROR",
            method=method,
            endpoint=endpoint,
            error_type=type(error).__name__,
        )
        return JiraAuthorizationError(self.messages.get_message(JIRA_REQUEST_ERROR, endpoint))


class SearchAssignableUsersService:
    """Searches users that can be assigned to an issue."""

    def __init__(self, executor: SignedCallExecutor):
        self.executor = executor

    def search_assignable_users(
        self,
        access_token: str,
        provider: OAuth1Provider,
        search_url: str,
        issue_key: Optional[str],
    ) -> NormalizedResponse:
        return self.executor.execute(access_token, provider, search_url, HTTP_GET, issue_key)


class UserAssignService:
    """Assigns (or, with an empty username, unassigns) an issue."""

    def __init__(self, executor: SignedCallExecutor):
        self.executor = executor

    def assign_user_to_issue(
        self,
        access_token: str,
        provider: OAuth1Provider,
        assignee_url: str,
        issue_key: str,
        username: Optional[str],
    ) -> NormalizedResponse:
        return self.executor.execute(
            access_token,
            provider,
            assignee_url,
            HTTP_PUT,
            issue_key,
            body={"name": username},
        )
