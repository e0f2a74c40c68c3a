"""Ingestion layer.

This package contains the adapters that turn controller output (and the
simulation fallback) into normalized telemetry patches for the state store.
"""

__all__: list[str] = []
