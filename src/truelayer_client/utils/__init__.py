"""Shared utilities: HTTP pipeline helpers and log sanitization."""
