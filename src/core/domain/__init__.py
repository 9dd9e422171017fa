"""Domain models and value types.

Plain data only (Pydantic v2 and enums): the domain knows nothing about the
CLI, templates or the filesystem.
"""
