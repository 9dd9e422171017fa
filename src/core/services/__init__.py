"""Application services (parsing, lint, playbooks, summaries)."""
