"""Adapters for external news providers."""
