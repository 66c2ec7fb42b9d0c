"""Caller token verification."""
