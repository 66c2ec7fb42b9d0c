"""Integration store persistence."""
