"""Telemetry source ownership policy.

A live serial session, once connected, always wins for the fields it
supplies. The simulation fallback only fills what no live source owns.
"""

from __future__ import annotations

from enum import StrEnum

TELEMETRY_HARDWARE_FIELDS: frozenset[str] = frozenset({"temperature_c", "humidity_pct", "methane_raw"})
SIMULATED_ONLY_FIELDS: frozenset[str] = frozenset({"ph"})


class TelemetrySource(StrEnum):
    NONE = "none"
    DEMO = "demo"
    LIVE = "live"


def effective_source(*, demo_mode: bool, live_connected: bool) -> TelemetrySource:
    """Derive the active telemetry source. Live takes precedence over demo."""
    if live_connected:
        return TelemetrySource.LIVE
    if demo_mode:
        return TelemetrySource.DEMO
    return TelemetrySource.NONE


def simulated_fields(source: TelemetrySource) -> frozenset[str]:
    """Fields the simulation fallback may write while *source* is active."""
    # ph never comes from hardware.
    if source == TelemetrySource.DEMO:
        return SIMULATED_ONLY_FIELDS | TELEMETRY_HARDWARE_FIELDS
    return SIMULATED_ONLY_FIELDS
