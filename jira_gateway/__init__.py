"""JIRA API gateway: user search and issue assignment on behalf of platform users."""

__version__ = "1.0.0"
