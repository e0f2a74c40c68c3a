"""Tank telemetry models."""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import Field

from pybiogas._constants import DEFAULT_PH
from pybiogas.models._base import BiogasModel


class ConnectionState(enum.StrEnum):
    """Lifecycle of the serial link to the controller."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class TelemetrySnapshot(BiogasModel):
    """Latest known tank readings.

    ``methane_raw`` is the raw MQ-4 analog reading (0-1023 on an Arduino
    ADC), not a calibrated concentration.
    """

    temperature_c: float = 0.0
    humidity_pct: float = 0.0
    methane_raw: int = Field(default=0, ge=0)
    ph: float = DEFAULT_PH
    captured_at: datetime | None = None


class TelemetryPatch(BiogasModel):
    """Field-granular telemetry update.

    ``None`` means "no valid value in this update"; the store keeps the
    previous value for that field.
    """

    temperature_c: float | None = None
    humidity_pct: float | None = None
    methane_raw: int | None = Field(default=None, ge=0)
    ph: float | None = None
