"""Controller telemetry record parsing.

The controller sketch prints free text such as::

    Temp: 25.00 °C | Humidity: 60.00 % | MQ4 Analog: 300 | MQ4 Digital: 0

Labels are matched loosely so unit text, separators and irregular
whitespace around them do not matter.
"""

from __future__ import annotations

import logging
import re

from pybiogas._constants import HUMIDITY_LABEL, METHANE_LABEL, TEMPERATURE_LABEL
from pybiogas.ingestion.normalize import safe_float, safe_uint
from pybiogas.models.telemetry import TelemetryPatch

_logger = logging.getLogger(__name__)

_TEMPERATURE = re.compile(re.escape(TEMPERATURE_LABEL) + r"\s*([\d.]+)")
_HUMIDITY = re.compile(re.escape(HUMIDITY_LABEL) + r"\s*([\d.]+)")
_METHANE = re.compile(re.escape(METHANE_LABEL) + r"\s*(\d+)")


def parse_telemetry_line(line: str) -> TelemetryPatch | None:
    """Parse one record into a telemetry patch.

    Returns ``None`` unless all three labels are present in the record.
    A label whose value is not a usable number yields ``None`` for that
    field only, so the store keeps its previous value.
    """
    text = line.strip()
    if not text:
        return None

    temperature = _TEMPERATURE.search(text)
    humidity = _HUMIDITY.search(text)
    methane = _METHANE.search(text)
    if temperature is None or humidity is None or methane is None:
        _logger.debug("Discarding incomplete telemetry record: %r", text)
        return None

    return TelemetryPatch(
        temperature_c=safe_float(temperature.group(1)),
        humidity_pct=safe_float(humidity.group(1)),
        methane_raw=safe_uint(methane.group(1)),
    )
