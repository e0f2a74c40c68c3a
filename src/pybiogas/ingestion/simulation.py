"""Simulation fallback for missing hardware inputs.

ph is never supplied by the controller, so it is always simulated. When no
serial session is connected but demo mode is on, temperature, humidity and
methane are simulated too. A connected session always owns those fields.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import random

from pybiogas._constants import (
    HUMIDITY_RANGE,
    METHANE_RANGE,
    NPK_K_RANGE,
    NPK_N_RANGE,
    NPK_P_RANGE,
    PH_RANGE,
    TEMPERATURE_RANGE,
)
from pybiogas.models._base import utcnow
from pybiogas.models.npk import NpkReading
from pybiogas.models.telemetry import TelemetryPatch
from pybiogas.state.events import UpdateSource
from pybiogas.state.policy import TelemetrySource, effective_source
from pybiogas.state.store import GatewayStateStore

_logger = logging.getLogger(__name__)


def sample_npk(rng: random.Random) -> NpkReading:
    """Draw a mock NPK reading."""
    return NpkReading(
        n=rng.randrange(*NPK_N_RANGE),
        p=rng.randrange(*NPK_P_RANGE),
        k=rng.randrange(*NPK_K_RANGE),
        captured_at=utcnow(),
    )


class TelemetrySimulator:
    """Periodic synthetic telemetry producer."""

    def __init__(
        self,
        store: GatewayStateStore,
        *,
        interval: float,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._interval = interval
        self._rng = rng or random.Random()
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sample(self, source: TelemetrySource) -> TelemetryPatch:
        """Draw the synthetic values *source* leaves to the simulation."""
        ph = round(self._rng.uniform(*PH_RANGE), 2)
        if source != TelemetrySource.DEMO:
            return TelemetryPatch(ph=ph)
        return TelemetryPatch(
            ph=ph,
            temperature_c=round(self._rng.uniform(*TEMPERATURE_RANGE), 1),
            humidity_pct=round(self._rng.uniform(*HUMIDITY_RANGE), 1),
            methane_raw=self._rng.randint(*METHANE_RANGE),
        )

    def tick(self) -> TelemetrySource:
        """Run one simulation step and return the source it ran under."""
        source = effective_source(
            demo_mode=self._store.demo_mode,
            live_connected=self._store.is_connected,
        )
        update_source = UpdateSource.DEMO if source == TelemetrySource.DEMO else UpdateSource.SIMULATED
        self._store.apply_telemetry(self.sample(source), source=update_source)
        _logger.debug("Simulation tick source=%s", source)
        return source

    async def run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self.tick()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self.run(), name="pybiogas-simulation")

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
