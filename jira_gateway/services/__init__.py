"""Gateway services: bootstrap check, credential resolution and signed JIRA calls."""
