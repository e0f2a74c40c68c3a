"""pybiogas - Async serial gateway for a biogas tank controller."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pybiogas")
except PackageNotFoundError:
    __version__ = "0+local"
from pybiogas._transport import SerialPortInfo, list_serial_ports
from pybiogas.config import GatewayConfig
from pybiogas.exceptions import (
    BiogasConfigError,
    BiogasError,
    BiogasTransportError,
    EndpointUnavailableError,
    PortSelectionCancelledError,
)
from pybiogas.gateway import BiogasGateway
from pybiogas.models import (
    ConnectionState,
    NpkReading,
    RelayCommand,
    RelayId,
    RelayStates,
    TelemetryPatch,
    TelemetrySnapshot,
)
from pybiogas.state.events import StateChange, StateSection, UpdateSource
from pybiogas.state.store import GatewayState, GatewayStateStore

__all__ = [
    "__version__",
    "BiogasConfigError",
    "BiogasError",
    "BiogasGateway",
    "BiogasTransportError",
    "ConnectionState",
    "EndpointUnavailableError",
    "GatewayConfig",
    "GatewayState",
    "GatewayStateStore",
    "NpkReading",
    "PortSelectionCancelledError",
    "RelayCommand",
    "RelayId",
    "RelayStates",
    "SerialPortInfo",
    "StateChange",
    "StateSection",
    "TelemetryPatch",
    "TelemetrySnapshot",
    "UpdateSource",
    "list_serial_ports",
]
