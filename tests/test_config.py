from __future__ import annotations

import pytest

from pybiogas.config import GatewayConfig
from pybiogas.exceptions import BiogasConfigError


def test_defaults_match_controller_sketch() -> None:
    config = GatewayConfig()

    assert config.port is None
    assert config.baudrate == 9600
    assert config.simulation_interval == 3.0
    assert config.simulation_enabled is True


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYBIOGAS_PORT", " /dev/ttyACM0 ")
    monkeypatch.setenv("PYBIOGAS_BAUDRATE", "115200")
    monkeypatch.setenv("PYBIOGAS_SIMULATION_INTERVAL", "0.5")
    monkeypatch.setenv("PYBIOGAS_SIMULATION_ENABLED", "off")

    config = GatewayConfig.from_env()

    assert config.port == "/dev/ttyACM0"
    assert config.baudrate == 115200
    assert config.simulation_interval == 0.5
    assert config.simulation_enabled is False


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYBIOGAS_BAUDRATE", "115200")
    monkeypatch.setenv("PYBIOGAS_SIMULATION_ENABLED", "0")

    config = GatewayConfig.from_env(baudrate=57600, simulation_enabled=True)

    assert config.baudrate == 57600
    assert config.simulation_enabled is True


def test_non_numeric_env_is_config_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYBIOGAS_BAUDRATE", "fast")

    with pytest.raises(BiogasConfigError):
        GatewayConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"baudrate": 0},
        {"read_chunk_size": 0},
        {"simulation_interval": 0},
        {"npk_read_delay": -1},
    ],
)
def test_invalid_values_rejected(kwargs: dict[str, float]) -> None:
    with pytest.raises(BiogasConfigError):
        GatewayConfig(**kwargs)
