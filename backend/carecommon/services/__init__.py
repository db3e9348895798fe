"""Startup services: config loading and request context."""
