"""Request-scoped domain models."""
