"""High-level async gateway between the tank controller and the dashboard."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable
from typing import Any

from pybiogas._gateway.relays import RelayController
from pybiogas._transport import PortSelector, SerialPortInfo, SerialTransport, Transport, list_serial_ports
from pybiogas.config import GatewayConfig
from pybiogas.exceptions import BiogasTransportError, PortSelectionCancelledError
from pybiogas.ingestion.lines import LineAssembler
from pybiogas.ingestion.simulation import TelemetrySimulator, sample_npk
from pybiogas.ingestion.telemetry import parse_telemetry_line
from pybiogas.models.npk import NpkReading
from pybiogas.models.telemetry import ConnectionState
from pybiogas.state.events import UpdateSource
from pybiogas.state.store import GatewayState, GatewayStateStore, StateListener

_logger = logging.getLogger(__name__)


class BiogasGateway:
    """Async gateway for the biogas tank controller.

    Usage::

        async with BiogasGateway(GatewayConfig(port="/dev/ttyUSB0")) as gateway:
            gateway.subscribe(print)
            await gateway.open()
            await gateway.toggle_relay(1, True)

    The simulation fallback starts on entering the context or on the first
    :meth:`open` or :meth:`connect_demo`, and stops on exit. Callers that do
    not use ``async with`` should call :meth:`aclose` when done.
    """

    def __init__(
        self,
        config: GatewayConfig | None = None,
        *,
        store: GatewayStateStore | None = None,
        transport_factory: Callable[[], Transport] | None = None,
        port_selector: PortSelector | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config or GatewayConfig()
        self._store = store or GatewayStateStore()
        self._port_selector = port_selector
        self._transport_factory = transport_factory or self._default_transport
        self._rng = rng or random.Random()
        self._transport: Transport | None = None
        self._read_task: asyncio.Task[None] | None = None
        self._open_lock = asyncio.Lock()
        self._assembler = LineAssembler()
        self._simulator = TelemetrySimulator(
            self._store,
            interval=self._config.simulation_interval,
            rng=self._rng,
        )
        self._relays = RelayController(
            self._store,
            transport_getter=lambda: self._transport,
            on_write_failure=self._handle_disconnect,
        )

    def _default_transport(self) -> Transport:
        return SerialTransport(self._config, port_selector=self._port_selector)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> BiogasGateway:
        self._start_simulation()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the serial session and stop the simulation fallback."""
        await self.close()
        await self._simulator.stop()

    def _start_simulation(self) -> None:
        if self._config.simulation_enabled:
            self._simulator.start()

    @property
    def simulation_running(self) -> bool:
        return self._simulator.is_running

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def store(self) -> GatewayStateStore:
        return self._store

    @property
    def state(self) -> GatewayState:
        return self._store.state

    @property
    def connection_state(self) -> ConnectionState:
        return self._store.connection_state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a state change listener. Returns an unsubscribe callable."""
        return self._store.subscribe(listener)

    @staticmethod
    def list_ports() -> list[SerialPortInfo]:
        return list_serial_ports()

    # ------------------------------------------------------------------
    # Serial session
    # ------------------------------------------------------------------

    async def open(self) -> bool:
        """Open the serial session and start the read loop.

        Returns ``True`` once connected and ``False`` if port selection was
        cancelled. Raises :class:`pybiogas.exceptions.EndpointUnavailableError`
        (a ``ConnectionError``) when no port could be opened; the gateway is
        left disconnected either way.
        """
        self._start_simulation()
        async with self._open_lock:
            if self._transport is not None and self._transport.is_open:
                return True

            transport = self._transport_factory()
            self._store.set_connection_state(ConnectionState.CONNECTING)
            try:
                await transport.open()
            except PortSelectionCancelledError:
                _logger.warning("User cancelled port selection.")
                self._store.set_connection_state(ConnectionState.DISCONNECTED)
                return False
            except Exception as exc:
                _logger.debug("Serial connection error: %s", exc)
                self._store.set_connection_state(ConnectionState.DISCONNECTED)
                self._store.reset_relays()
                raise

            self._transport = transport
            self._assembler.reset()
            self._store.set_connection_state(ConnectionState.CONNECTED)
            self._read_task = asyncio.get_running_loop().create_task(
                self._read_loop(transport),
                name="pybiogas-serial-reader",
            )
            return True

    async def close(self) -> None:
        """Close the serial session (idempotent) and wait for the read loop to exit."""
        task = self._read_task
        self._read_task = None
        transport = self._transport
        if transport is not None:
            await self._handle_disconnect(transport)
        if task is not None and task is not asyncio.current_task():
            await task

    async def _read_loop(self, transport: Transport) -> None:
        try:
            while True:
                chunk = await transport.read_text()
                if not chunk:
                    break
                for record in self._assembler.feed(chunk):
                    self._handle_record(record)
        except BiogasTransportError:
            _logger.error("Serial read error", exc_info=True)
        finally:
            await self._handle_disconnect(transport)

    def _handle_record(self, record: str) -> None:
        patch = parse_telemetry_line(record)
        if patch is None:
            return
        self._store.apply_telemetry(patch, source=UpdateSource.LIVE)

    async def _handle_disconnect(self, transport: Transport) -> None:
        """Tear down *transport* and force relays Off if it is the active session."""
        if transport is not self._transport:
            await transport.close()
            return

        _logger.debug("Cleaning up connection...")
        self._transport = None
        self._store.set_connection_state(ConnectionState.DISCONNECTED)
        # Relays are assumed Off once the link is gone; the sketch is expected to do the same.
        self._store.reset_relays()
        await transport.close()

    # ------------------------------------------------------------------
    # Relay control
    # ------------------------------------------------------------------

    async def toggle_relay(self, relay_id: int, on: bool) -> bool:
        """Switch a relay; see :meth:`pybiogas._gateway.relays.RelayController.toggle`."""
        return await self._relays.toggle(relay_id, on)

    # ------------------------------------------------------------------
    # Demo source
    # ------------------------------------------------------------------

    async def connect_demo(self) -> bool:
        """Connect the mock NPK sensor, enabling demo telemetry."""
        self._start_simulation()
        if self._config.demo_connect_delay > 0:
            await asyncio.sleep(self._config.demo_connect_delay)
        self._store.set_demo_mode(True)
        return True

    def disconnect_demo(self) -> None:
        self._store.set_demo_mode(False)

    async def read_npk(self) -> NpkReading | None:
        """Take a mock NPK reading. Returns ``None`` unless demo mode is on."""
        if not self._store.demo_mode:
            return None
        if self._config.npk_read_delay > 0:
            await asyncio.sleep(self._config.npk_read_delay)
        reading = sample_npk(self._rng)
        self._store.set_npk(reading)
        return reading
