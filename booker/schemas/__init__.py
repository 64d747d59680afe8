"""Bundled JSON schemas for response contracts."""
