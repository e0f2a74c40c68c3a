"""Data models for gateway state."""

from pybiogas.models._base import BiogasModel, utcnow
from pybiogas.models.npk import NpkReading
from pybiogas.models.relay import RelayCommand, RelayId, RelayStates
from pybiogas.models.telemetry import ConnectionState, TelemetryPatch, TelemetrySnapshot

__all__ = [
    "BiogasModel",
    "ConnectionState",
    "NpkReading",
    "RelayCommand",
    "RelayId",
    "RelayStates",
    "TelemetryPatch",
    "TelemetrySnapshot",
    "utcnow",
]
