"""Shared helpers: HTTP access, logging utilities and the error taxonomy."""
