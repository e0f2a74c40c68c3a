"""Custom exception hierarchy for pybiogas."""

from __future__ import annotations


class BiogasError(Exception):
    """Base exception for all pybiogas errors."""


class BiogasConfigError(BiogasError):
    """Invalid or missing configuration."""


class BiogasTransportError(BiogasError):
    """Serial I/O failure (open, read or write)."""

    def __init__(
        self,
        message: str,
        *,
        port: str | None = None,
    ) -> None:
        self.port = port
        super().__init__(message)


class EndpointUnavailableError(BiogasTransportError, ConnectionError):
    """No serial port is available, or the chosen port could not be opened."""


class PortSelectionCancelledError(BiogasError):
    """The port selector returned without choosing a port.

    This is a normal outcome of an interactive picker; the gateway treats
    it as "stay disconnected" rather than as a failure.
    """
