"""Serial transport to the tank controller.

Built on ``serial_asyncio`` stream pairs: the reader is drained as decoded
text by the gateway's read loop, the writer carries relay commands.
"""

from __future__ import annotations

import asyncio
import codecs
import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

import serial
import serial_asyncio
from serial.tools import list_ports

from pybiogas.config import GatewayConfig
from pybiogas.exceptions import BiogasTransportError, EndpointUnavailableError, PortSelectionCancelledError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SerialPortInfo:
    device: str
    description: str


PortSelector = Callable[[Sequence[SerialPortInfo]], str | None | Awaitable[str | None]]
"""Chooses a device from the listed ports; ``None`` means the user cancelled."""


def list_serial_ports() -> list[SerialPortInfo]:
    """Return the serial ports currently present on the host."""
    return [
        SerialPortInfo(device=port.device, description=port.description or "Unknown")
        for port in list_ports.comports()
    ]


class Transport(Protocol):
    """Structural transport interface used by the gateway.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`SerialTransport`) concrete.
    """

    @property
    def is_open(self) -> bool: ...

    async def open(self) -> None: ...

    async def read_text(self) -> str: ...

    async def write(self, command: str) -> None: ...

    async def close(self) -> None: ...


class SerialTransport:
    """Exclusive serial session at the configured fixed baud rate."""

    def __init__(self, config: GatewayConfig, *, port_selector: PortSelector | None = None) -> None:
        self._config = config
        self._port_selector = port_selector
        self._port: str | None = None
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._write_lock = asyncio.Lock()
        self._decoder = codecs.getincrementaldecoder(config.encoding)(errors="replace")

    @property
    def port(self) -> str | None:
        return self._port

    @property
    def is_open(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    async def _resolve_port(self) -> str:
        if self._config.port:
            return self._config.port

        ports = list_serial_ports()
        if self._port_selector is not None:
            choice = self._port_selector(ports)
            if inspect.isawaitable(choice):
                choice = await choice
            if not choice:
                raise PortSelectionCancelledError("No port selected")
            return choice

        if not ports:
            raise EndpointUnavailableError("No serial ports available")
        return ports[0].device

    async def open(self) -> None:
        """Open the serial port.

        Raises :class:`EndpointUnavailableError` when no port can be
        opened and :class:`PortSelectionCancelledError` when the port
        selector declines to choose one.
        """
        if self.is_open:
            return
        port = await self._resolve_port()
        _logger.debug("Opening serial port %s at %d baud", port, self._config.baudrate)
        try:
            reader, writer = await serial_asyncio.open_serial_connection(
                url=port,
                baudrate=self._config.baudrate,
            )
        except (serial.SerialException, OSError, ValueError) as exc:
            raise EndpointUnavailableError(f"Could not open {port}: {exc}", port=port) from exc

        self._port = port
        self._reader = reader
        self._writer = writer
        self._decoder.reset()

    async def read_text(self) -> str:
        """Return the next decoded chunk, or ``""`` at end-of-stream."""
        reader = self._reader
        if reader is None:
            return ""
        while True:
            try:
                data = await reader.read(self._config.read_chunk_size)
            except (serial.SerialException, OSError) as exc:
                raise BiogasTransportError(f"Serial read failed: {exc}", port=self._port) from exc
            if not data:
                return ""
            text = self._decoder.decode(data)
            # A chunk ending mid-character decodes to nothing yet.
            if text:
                return text

    async def write(self, command: str) -> None:
        """Write one command; concurrent writers are serialized."""
        async with self._write_lock:
            writer = self._writer
            if writer is None or writer.is_closing():
                raise BiogasTransportError("Serial port is not open", port=self._port)
            try:
                writer.write(command.encode("ascii"))
                await writer.drain()
            except (serial.SerialException, OSError, UnicodeEncodeError) as exc:
                raise BiogasTransportError(f"Serial write failed: {exc}", port=self._port) from exc

    async def close(self) -> None:
        """Release the port. Safe to call more than once."""
        writer = self._writer
        self._writer = None
        if writer is None:
            return
        _logger.debug("Closing serial port %s", self._port)
        writer.close()
        try:
            await writer.wait_closed()
        except (serial.SerialException, OSError):
            _logger.debug("Error while closing %s", self._port, exc_info=True)
        reader = self._reader
        if reader is not None and not reader.at_eof():
            reader.feed_eof()
