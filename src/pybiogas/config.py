"""Gateway configuration for pybiogas."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Callable
from typing import Any

from pybiogas._constants import DEFAULT_BAUDRATE, DEFAULT_READ_CHUNK_SIZE, DEFAULT_SIMULATION_INTERVAL
from pybiogas.exceptions import BiogasConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, convert: Callable[[str], Any]) -> Any:
    try:
        return convert(value.strip())
    except ValueError as exc:
        raise BiogasConfigError(f"{env_key} must be numeric, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class GatewayConfig:
    """Gateway configuration.

    Parameters
    ----------
    port : str or None
        Serial device to open (e.g. ``"/dev/ttyUSB0"`` or ``"COM3"``).
        When ``None`` the port is chosen by the gateway's port selector,
        or the first listed port if no selector is given.
    baudrate : int
        Fixed baud rate of the controller sketch.
    encoding : str
        Text encoding of the telemetry stream.
    read_chunk_size : int
        Maximum number of bytes requested per read.
    simulation_enabled : bool
        Run the periodic simulation fallback for the gateway lifetime.
    simulation_interval : float
        Seconds between simulation ticks.
    demo_connect_delay : float
        Seconds the mock NPK sensor takes to "connect" in demo mode.
    npk_read_delay : float
        Seconds a mock NPK reading takes in demo mode.
    """

    port: str | None = None
    baudrate: int = DEFAULT_BAUDRATE
    encoding: str = "utf-8"
    read_chunk_size: int = DEFAULT_READ_CHUNK_SIZE
    simulation_enabled: bool = True
    simulation_interval: float = DEFAULT_SIMULATION_INTERVAL
    demo_connect_delay: float = 1.5
    npk_read_delay: float = 0.8

    def __post_init__(self) -> None:
        if self.baudrate <= 0:
            raise BiogasConfigError(f"baudrate must be positive, got {self.baudrate}")
        if self.read_chunk_size <= 0:
            raise BiogasConfigError(f"read_chunk_size must be positive, got {self.read_chunk_size}")
        if self.simulation_interval <= 0:
            raise BiogasConfigError(f"simulation_interval must be positive, got {self.simulation_interval}")
        if self.demo_connect_delay < 0 or self.npk_read_delay < 0:
            raise BiogasConfigError("demo delays must not be negative")

    @classmethod
    def from_env(cls, **overrides: Any) -> GatewayConfig:
        """Create configuration from environment variables.

        Reads optional ``PYBIOGAS_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        GatewayConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        port = env.get("PYBIOGAS_PORT")
        if port is not None and port.strip():
            config_kwargs["port"] = port.strip()

        encoding = env.get("PYBIOGAS_ENCODING")
        if encoding is not None and encoding.strip():
            config_kwargs["encoding"] = encoding.strip()

        _ENV_NUMERIC_MAP: dict[str, tuple[str, Callable[[str], Any]]] = {
            "PYBIOGAS_BAUDRATE": ("baudrate", int),
            "PYBIOGAS_READ_CHUNK_SIZE": ("read_chunk_size", int),
            "PYBIOGAS_SIMULATION_INTERVAL": ("simulation_interval", float),
            "PYBIOGAS_DEMO_CONNECT_DELAY": ("demo_connect_delay", float),
            "PYBIOGAS_NPK_READ_DELAY": ("npk_read_delay", float),
        }
        for env_key, (field_name, convert) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, convert)

        if "simulation_enabled" not in overrides:
            config_kwargs["simulation_enabled"] = _env_bool(env.get("PYBIOGAS_SIMULATION_ENABLED"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
