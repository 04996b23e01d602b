"""Renderers for a finished run: plain text, JSON and unified-style diff."""
