"""Shared helpers (console, logging)."""
