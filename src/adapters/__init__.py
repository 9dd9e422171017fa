"""Adapters: template rendering and exporters."""
