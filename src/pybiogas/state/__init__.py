"""State/store layer.

This package is the single source of truth for gateway state: connection
status, the latest telemetry snapshot, relay status and demo presence.
Live serial records, simulation ticks and relay commands all write through
the store; readers get frozen snapshots or subscribe to change events.
"""
