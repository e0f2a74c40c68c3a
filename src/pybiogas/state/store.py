"""In-memory gateway state store.

This is the only component allowed to mutate gateway state. Writers are
plain synchronous methods: on a single asyncio loop each call is atomic
with respect to every other writer, and readers always observe a complete
frozen snapshot.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import Field

from pybiogas.models._base import BiogasModel
from pybiogas.models.npk import NpkReading
from pybiogas.models.relay import RelayStates
from pybiogas.models.telemetry import ConnectionState, TelemetryPatch, TelemetrySnapshot
from pybiogas.state.events import StateChange, StateSection, UpdateSource
from pybiogas.state.policy import TELEMETRY_HARDWARE_FIELDS, effective_source, simulated_fields

_logger = logging.getLogger(__name__)

StateListener = Callable[[StateChange], None]


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _is_valid(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, float):
        return math.isfinite(value)
    return True


class GatewayState(BiogasModel):
    """Fully-formed snapshot of everything the presentation layer renders."""

    connection: ConnectionState = ConnectionState.DISCONNECTED
    telemetry: TelemetrySnapshot = Field(default_factory=TelemetrySnapshot)
    relays: RelayStates = Field(default_factory=RelayStates)
    demo_mode: bool = False
    npk: NpkReading = Field(default_factory=NpkReading)


class GatewayStateStore:
    """Shared state with field-granular writers and many readers.

    Readers either poll the accessors or register a listener with
    :meth:`subscribe`; listeners are called synchronously after each
    accepted write.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._state = GatewayState()
        self._listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    @property
    def state(self) -> GatewayState:
        return self._state

    @property
    def connection_state(self) -> ConnectionState:
        return self._state.connection

    @property
    def is_connected(self) -> bool:
        return self._state.connection == ConnectionState.CONNECTED

    @property
    def telemetry(self) -> TelemetrySnapshot:
        return self._state.telemetry

    @property
    def relays(self) -> RelayStates:
        return self._state.relays

    @property
    def demo_mode(self) -> bool:
        return self._state.demo_mode

    @property
    def npk(self) -> NpkReading:
        return self._state.npk

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener* for state changes. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _publish(self, section: StateSection, source: UpdateSource, data: dict[str, Any]) -> None:
        change = StateChange(section=section, source=source, observed_at=self._clock(), data=data)
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                _logger.debug("State listener failed for section=%s", section, exc_info=True)

    # ------------------------------------------------------------------
    # Writers
    # ------------------------------------------------------------------

    def set_connection_state(self, connection: ConnectionState) -> None:
        if self._state.connection == connection:
            return
        self._state = self._state.model_copy(update={"connection": connection})
        self._publish(StateSection.CONNECTION, UpdateSource.LOCAL, {"connection": connection})

    def apply_telemetry(self, patch: TelemetryPatch, *, source: UpdateSource) -> TelemetrySnapshot | None:
        """Write the valid fields of *patch*.

        Non-live sources may only write the fields the simulation policy
        grants them, so a connected serial session always owns the hardware
        fields. Returns the new snapshot, or ``None`` if nothing was written.
        """
        update = {key: value for key, value in patch.model_dump().items() if _is_valid(value)}

        if source != UpdateSource.LIVE:
            active = effective_source(demo_mode=self._state.demo_mode, live_connected=self.is_connected)
            allowed = simulated_fields(active)
            update = {key: value for key, value in update.items() if key in allowed}

        if not update:
            return None

        data = dict(update)
        if TELEMETRY_HARDWARE_FIELDS & update.keys():
            update["captured_at"] = self._clock()

        telemetry = self._state.telemetry.model_copy(update=update)
        self._state = self._state.model_copy(update={"telemetry": telemetry})
        self._publish(StateSection.TELEMETRY, source, data)
        return telemetry

    def set_relay(self, relay_id: int, on: bool, *, source: UpdateSource = UpdateSource.OPTIMISTIC) -> None:
        relays = self._state.relays.with_relay(relay_id, on)
        if relays == self._state.relays:
            return
        self._state = self._state.model_copy(update={"relays": relays})
        self._publish(StateSection.RELAYS, source, relays.model_dump())

    def reset_relays(self) -> None:
        """Force every relay Off (fail-safe)."""
        relays = RelayStates()
        changed = relays != self._state.relays
        self._state = self._state.model_copy(update={"relays": relays})
        if changed:
            self._publish(StateSection.RELAYS, UpdateSource.FAILSAFE, relays.model_dump())

    def set_demo_mode(self, enabled: bool) -> None:
        if self._state.demo_mode == enabled:
            return
        self._state = self._state.model_copy(update={"demo_mode": enabled})
        self._publish(StateSection.DEMO, UpdateSource.LOCAL, {"demo_mode": enabled})

    def set_npk(self, reading: NpkReading) -> None:
        self._state = self._state.model_copy(update={"npk": reading})
        self._publish(StateSection.NPK, UpdateSource.DEMO, reading.model_dump())
