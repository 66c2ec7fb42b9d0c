"""JIRA API routes.

Relays user search and issue assignment to the JIRA instance given in the
``url`` query parameter, signed with the access token the calling user granted
for that instance.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Path, Query
from fastapi.responses import JSONResponse, Response

from ..auth.security import JwtAuthentication, get_token_verifier
from ..config import Settings, get_settings
from ..core.logging import set_user_context
from ..core.messages import MessageCatalog, get_message_catalog
from ..core.urls import JiraUrlBuilder
from ..services.authorization import AccessCredentialResolver, BootstrapGuard
from ..services.integration import JiraIntegrationStore, get_integration_store
from ..services.jira_api import (
    NormalizedResponse,
    SearchAssignableUsersService,
    SignedCallExecutor,
    UserAssignService,
)

router = APIRouter()


class JiraApiResource:
    """Orchestrates caller verification, credential resolution and the signed call."""

    def __init__(
        self,
        token_verifier: JwtAuthentication,
        bootstrap_guard: BootstrapGuard,
        credential_resolver: AccessCredentialResolver,
        url_builder: JiraUrlBuilder,
        search_service: SearchAssignableUsersService,
        assign_service: UserAssignService,
    ):
        self.token_verifier = token_verifier
        self.bootstrap_guard = bootstrap_guard
        self.credential_resolver = credential_resolver
        self.url_builder = url_builder
        self.search_service = search_service
        self.assign_service = assign_service

    def _identify_caller(self, authorization_header: Optional[str]) -> int:
        user_id = self.token_verifier.get_user_id_from_authorization_header(authorization_header)
        set_user_context(user_id)
        return user_id

    def search_assignable_users(
        self,
        issue_key: Optional[str],
        username: Optional[str],
        authorization_header: Optional[str],
        jira_url: str,
    ) -> NormalizedResponse:
        user_id = self._identify_caller(authorization_header)

        self.bootstrap_guard.ensure_ready()

        if username is None:
            username = ""

        self.url_builder.validate_base_url(jira_url)

        access_token = self.credential_resolver.resolve(jira_url, user_id)
        provider = self.credential_resolver.resolve_provider(jira_url)

        search_url = self.url_builder.assignable_users_search_url(
            jira_url, issue_key or "", username
        )

        return self.search_service.search_assignable_users(
            access_token, provider, search_url, issue_key
        )

    def assign_issue_to_user(
        self,
        issue_key: str,
        username: Optional[str],
        authorization_header: Optional[str],
        jira_url: str,
    ) -> NormalizedResponse:
        user_id = self._identify_caller(authorization_header)

        self.bootstrap_guard.ensure_ready()

        self.url_builder.validate_base_url(jira_url)

        access_token = self.credential_resolver.resolve(jira_url, user_id)
        provider = self.credential_resolver.resolve_provider(jira_url)

        assignee_url = self.url_builder.issue_assignee_url(jira_url, issue_key)

        # An empty or absent username unassigns the issue in JIRA
        return self.assign_service.assign_user_to_issue(
            access_token, provider, assignee_url, issue_key, username
        )


def get_jira_api_resource(
    token_verifier: JwtAuthentication = Depends(get_token_verifier),
    store: JiraIntegrationStore = Depends(get_integration_store),
    settings: Settings = Depends(get_settings),
    messages: MessageCatalog = Depends(get_message_catalog),
) -> JiraApiResource:
    """Wire the request-scoped collaborators of the JIRA routes."""
    executor = SignedCallExecutor(messages)
    return JiraApiResource(
        token_verifier=token_verifier,
        bootstrap_guard=BootstrapGuard(store, messages),
        credential_resolver=AccessCredentialResolver(store, messages),
        url_builder=JiraUrlBuilder(settings.jira_max_results, messages),
        search_service=SearchAssignableUsersService(executor),
        assign_service=UserAssignService(executor),
    )


def to_http_response(result: NormalizedResponse) -> Response:
    """Render a NormalizedResponse, forwarding upstream bodies verbatim."""
    if result.is_error:
        return JSONResponse(
            status_code=result.status_code,
            content=result.error.model_dump(exclude_none=True),
        )
    return Response(
        content=result.body or "",
        status_code=result.status_code,
        media_type="application/json",
    )


@router.get("/user/assignable/search")
def search_assignable_users(
    issue_key: Optional[str] = Query(None, alias="issueKey"),
    username: Optional[str] = Query(None),
    jira_url: str = Query(..., alias="url"),
    authorization: Optional[str] = Header(None),
    resource: JiraApiResource = Depends(get_jira_api_resource),
):
    """Get the users that can be assigned to an issue.

    Returns JIRA's user list, 400 if no issue key was provided, 401 if the
    caller is not authenticated or has not authorized JIRA access, or 404 if
    JIRA cannot find the issue.
    """
    result = resource.search_assignable_users(issue_key, username, authorization, jira_url)
    return to_http_response(result)


@router.put("/issue/{issue_key}/assignee")
def assign_issue_to_user(
    issue_key: str = Path(...),
    username: Optional[str] = Query(None),
    jira_url: str = Query(..., alias="url"),
    authorization: Optional[str] = Header(None),
    resource: JiraApiResource = Depends(get_jira_api_resource),
):
    """Assign a user to an issue. An empty username unassigns the issue.

    Returns JIRA's response, 401 if the caller is not authenticated or has not
    authorized JIRA access, or 404 if JIRA cannot find the issue or the user.
    """
    result = resource.assign_issue_to_user(issue_key, username, authorization, jira_url)
    return to_http_response(result)
