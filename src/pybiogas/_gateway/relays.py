"""Relay (motor) control for :class:`pybiogas.gateway.BiogasGateway`.

Commands are write-then-assume: the controller sends no acknowledgement,
so relay state is updated only after the write itself succeeds.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from pybiogas._transport import Transport
from pybiogas.exceptions import BiogasTransportError
from pybiogas.models.relay import RelayCommand
from pybiogas.state.events import UpdateSource
from pybiogas.state.store import GatewayStateStore

_logger = logging.getLogger(__name__)


class RelayController:
    def __init__(
        self,
        store: GatewayStateStore,
        *,
        transport_getter: Callable[[], Transport | None],
        on_write_failure: Callable[[Transport], Awaitable[None]],
    ) -> None:
        self._store = store
        self._transport_getter = transport_getter
        self._on_write_failure = on_write_failure

    async def toggle(self, relay_id: int, on: bool) -> bool:
        """Switch *relay_id* on or off.

        Returns ``True`` when the command was written and the relay state
        updated. Without a connected session nothing is written and
        ``False`` is returned. A failed write triggers the fail-safe path
        and also returns ``False``, as does a write that completes after the
        session was closed.

        Raises :class:`ValueError` for an unknown relay id.
        """
        command = RelayCommand.for_relay(relay_id, on)

        transport = self._transport_getter()
        if transport is None or not transport.is_open or not self._store.is_connected:
            _logger.warning("Serial writer not available; ignoring %s", command)
            return False

        try:
            await transport.write(command.to_wire())
        except BiogasTransportError as exc:
            _logger.error("Failed to write %s to serial: %s", command, exc)
            await self._on_write_failure(transport)
            return False

        if self._transport_getter() is not transport or not self._store.is_connected:
            # Torn down while the write was in flight.
            _logger.debug("Session closed during %s; relay state not updated", command)
            return False

        _logger.debug("Relay command sent: %s", command)
        self._store.set_relay(relay_id, on, source=UpdateSource.OPTIMISTIC)
        return True
