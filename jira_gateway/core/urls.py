"""JIRA REST API URL construction."""

from urllib.parse import quote, urljoin, urlparse

from .exceptions import InvalidJiraURLError
from .messages import INVALID_URL_ERROR, MessageCatalog

PATH_JIRA_API_SEARCH_USERS = (
    "rest/api/latest/user/assignable/search?issueKey={issue_key}&username={username}"
    "&maxResults={max_results}"
)

PATH_JIRA_API_ASSIGN_ISSUE = "rest/api/latest/issue/{issue_key}/assignee"

ALLOWED_SCHEMES = ("http", "https")


class JiraUrlBuilder:
    """Resolves JIRA API paths against a caller-supplied JIRA base URL."""

    def __init__(self, max_results: int, messages: MessageCatalog):
        self.max_results = max_results
        self.messages = messages

    def validate_base_url(self, jira_url: str) -> str:
        """Check that the JIRA base URL is absolute with a usable host and port.

        Raises:
            InvalidJiraURLError: If the URL has no http(s) scheme, no host or
                a malformed port
        """
        try:
            parsed = urlparse(jira_url)
            hostname = parsed.hostname
            # Raises ValueError for non-numeric or out of range ports
            parsed.port
        except ValueError as e:
            raise self._invalid(jira_url) from e

        if parsed.scheme.lower() not in ALLOWED_SCHEMES or not hostname:
            raise self._invalid(jira_url)

        return jira_url

    def assignable_users_search_url(self, jira_url: str, issue_key: str, username: str) -> str:
        path = PATH_JIRA_API_SEARCH_USERS.format(
            issue_key=quote(issue_key, safe=""),
            username=quote(username, safe=""),
            max_results=self.max_results,
        )
        return self._resolve(jira_url, path)

    def issue_assignee_url(self, jira_url: str, issue_key: str) -> str:
        path = PATH_JIRA_API_ASSIGN_ISSUE.format(issue_key=quote(issue_key, safe=""))
        return self._resolve(jira_url, path)

    def _resolve(self, jira_url: str, path: str) -> str:
        base = self.validate_base_url(jira_url)
        # Keep any context path (e.g. https://host/jira) when resolving relative paths
        if not base.endswith("/"):
            base = base + "/"

        try:
            resolved = urljoin(base, path)
        except ValueError as e:
            raise self._invalid(jira_url) from e

        if urlparse(resolved).scheme.lower() not in ALLOWED_SCHEMES:
            raise self._invalid(jira_url)

        return resolved

    def _invalid(self, jira_url: str) -> InvalidJiraURLError:
        return InvalidJiraURLError(self.messages.get_message(INVALID_URL_ERROR, jira_url))
