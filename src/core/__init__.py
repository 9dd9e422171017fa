"""Core: configuration, domain, services."""
