from __future__ import annotations

import asyncio
import logging
import random

import pytest

from pybiogas.config import GatewayConfig
from pybiogas.exceptions import BiogasTransportError, EndpointUnavailableError, PortSelectionCancelledError
from pybiogas.gateway import BiogasGateway
from pybiogas.models.telemetry import ConnectionState
from pybiogas.state.events import StateChange, StateSection


def _gateway(transport, **config_overrides) -> BiogasGateway:
    options = {"simulation_enabled": False, "demo_connect_delay": 0, "npk_read_delay": 0}
    options.update(config_overrides)
    config = GatewayConfig(port="/dev/ttyFAKE0", **options)
    return BiogasGateway(config, transport_factory=lambda: transport, rng=random.Random(42))


@pytest.mark.asyncio
async def test_chunked_telemetry_updates_state(fake_transport, settle) -> None:
    async with _gateway(fake_transport) as gateway:
        assert await gateway.open() is True
        assert gateway.connection_state == ConnectionState.CONNECTED

        fake_transport.feed("Te", "mp: 25.5 | Humidity: 6", "0.0 % | MQ4 Analog: 300\n")
        await settle(lambda: gateway.state.telemetry.captured_at is not None)

        telemetry = gateway.state.telemetry
        assert telemetry.temperature_c == 25.5
        assert telemetry.humidity_pct == 60.0
        assert telemetry.methane_raw == 300


@pytest.mark.asyncio
async def test_incomplete_record_leaves_values_unchanged(fake_transport, settle) -> None:
    async with _gateway(fake_transport) as gateway:
        changes: list[StateChange] = []
        gateway.subscribe(changes.append)
        await gateway.open()

        fake_transport.feed("Temp: 25.5 | Humidity: 60.0 % | MQ4 Analog: 300\n")
        fake_transport.feed("Temp: 31.0 | Humidity: 70.0 %\n")
        fake_transport.feed("Temp: 26.0 | Humidity: 61.0 % | MQ4 Analog: 305\n")
        await settle(lambda: gateway.state.telemetry.methane_raw == 305)

        telemetry_changes = [c for c in changes if c.section == StateSection.TELEMETRY]
        assert [c.data["temperature_c"] for c in telemetry_changes] == [25.5, 26.0]


@pytest.mark.asyncio
async def test_toggle_then_read_error_forces_relays_off(fake_transport, settle) -> None:
    async with _gateway(fake_transport) as gateway:
        await gateway.open()

        assert await gateway.toggle_relay(1, True) is True
        assert await gateway.toggle_relay(2, True) is True
        assert fake_transport.writes == ["R1ON\n", "R2ON\n"]
        assert gateway.state.relays.relay1 is True

        fake_transport.fail_read()
        await settle(lambda: gateway.connection_state == ConnectionState.DISCONNECTED)

        assert gateway.state.relays.relay1 is False
        assert gateway.state.relays.relay2 is False
        assert not fake_transport.is_open


@pytest.mark.asyncio
async def test_write_failure_disconnects_and_resets(fake_transport, settle) -> None:
    async with _gateway(fake_transport) as gateway:
        await gateway.open()
        await gateway.toggle_relay(1, True)

        fake_transport.write_error = BiogasTransportError("unplugged")
        assert await gateway.toggle_relay(2, True) is False

        assert gateway.connection_state == ConnectionState.DISCONNECTED
        assert gateway.state.relays.relay1 is False
        assert gateway.state.relays.relay2 is False
        assert not fake_transport.is_open


@pytest.mark.asyncio
async def test_toggle_without_session_performs_no_write(fake_transport) -> None:
    async with _gateway(fake_transport) as gateway:
        assert await gateway.toggle_relay(1, True) is False

        assert fake_transport.writes == []
        assert gateway.state.relays.relay1 is False


@pytest.mark.asyncio
async def test_close_is_idempotent_and_fail_safe(fake_transport) -> None:
    async with _gateway(fake_transport) as gateway:
        await gateway.open()
        await gateway.toggle_relay(2, True)

        await gateway.close()
        await gateway.close()

        assert gateway.connection_state == ConnectionState.DISCONNECTED
        assert gateway.state.relays.relay2 is False
        assert not fake_transport.is_open
        assert await gateway.toggle_relay(2, True) is False
        assert fake_transport.writes == ["R2ON\n"]


@pytest.mark.asyncio
async def test_open_is_a_no_op_while_connected(fake_transport) -> None:
    async with _gateway(fake_transport) as gateway:
        assert await gateway.open() is True
        assert await gateway.open() is True
        assert fake_transport.open_calls == 1


@pytest.mark.asyncio
async def test_cancelled_port_selection_is_silent(fake_transport) -> None:
    fake_transport.open_error = PortSelectionCancelledError("No port selected")
    async with _gateway(fake_transport) as gateway:
        assert await gateway.open() is False
        assert gateway.connection_state == ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_unavailable_endpoint_raises_connection_error(fake_transport) -> None:
    fake_transport.open_error = EndpointUnavailableError("No serial ports available")
    async with _gateway(fake_transport) as gateway:
        with pytest.raises(ConnectionError):
            await gateway.open()
        assert gateway.connection_state == ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_connection_state_passes_through_connecting(fake_transport) -> None:
    async with _gateway(fake_transport) as gateway:
        states: list[ConnectionState] = []
        gateway.subscribe(
            lambda change: states.append(change.data["connection"])
            if change.section == StateSection.CONNECTION
            else None
        )
        await gateway.open()
        await gateway.close()

    assert states == [ConnectionState.CONNECTING, ConnectionState.CONNECTED, ConnectionState.DISCONNECTED]


@pytest.mark.asyncio
async def test_reopen_after_disconnect_discards_stale_fragment(make_transport, settle) -> None:
    transports = [make_transport(), make_transport()]
    config = GatewayConfig(port="/dev/ttyFAKE0", simulation_enabled=False)
    gateway = BiogasGateway(config, transport_factory=lambda: transports.pop(0))
    first, second = transports

    async with gateway:
        await gateway.open()
        first.feed("Temp: 99")
        await settle(lambda: first._chunks.empty())  # noqa: SLF001
        await gateway.close()

        await gateway.open()
        second.feed(".0 | Humidity: 10 | MQ4 Analog: 1\nTemp: 20 | Humidity: 50 | MQ4 Analog: 200\n")
        await settle(lambda: gateway.state.telemetry.methane_raw == 200)

        assert gateway.state.telemetry.temperature_c == 20.0


@pytest.mark.asyncio
async def test_demo_mode_and_npk_reading(fake_transport) -> None:
    async with _gateway(fake_transport) as gateway:
        assert await gateway.read_npk() is None

        assert await gateway.connect_demo() is True
        assert gateway.state.demo_mode is True

        reading = await gateway.read_npk()
        assert reading is not None
        assert gateway.state.npk == reading
        assert 20 <= reading.n < 200

        gateway.disconnect_demo()
        assert gateway.state.demo_mode is False


@pytest.mark.asyncio
async def test_close_during_relay_write_keeps_relays_off(fake_transport, settle) -> None:
    async with _gateway(fake_transport) as gateway:
        await gateway.open()
        fake_transport.write_gate = asyncio.Event()

        toggle = asyncio.ensure_future(gateway.toggle_relay(1, True))
        await settle(lambda: fake_transport.write_pending)

        await gateway.close()
        fake_transport.write_gate.set()

        assert await toggle is False
        assert gateway.connection_state == ConnectionState.DISCONNECTED
        assert gateway.state.relays.relay1 is False
        assert gateway.state.relays.relay2 is False


@pytest.mark.asyncio
async def test_simulation_starts_without_context_manager(fake_transport) -> None:
    gateway = _gateway(fake_transport, simulation_enabled=True)
    assert gateway.simulation_running is False

    await gateway.connect_demo()
    assert gateway.simulation_running is True

    await gateway.open()
    await gateway.aclose()
    assert gateway.simulation_running is False
    assert gateway.connection_state == ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_unavailable_endpoint_is_not_logged_as_error(fake_transport, caplog) -> None:
    fake_transport.open_error = EndpointUnavailableError("No serial ports available")
    caplog.set_level(logging.DEBUG, logger="pybiogas")
    async with _gateway(fake_transport) as gateway:
        with pytest.raises(EndpointUnavailableError):
            await gateway.open()

    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]
