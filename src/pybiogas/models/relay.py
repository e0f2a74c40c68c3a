"""Relay (motor) control models and the gateway -> controller wire format."""

from __future__ import annotations

import enum

from pybiogas.models._base import BiogasModel


class RelayId(enum.IntEnum):
    ONE = 1
    TWO = 2


class RelayCommand(enum.StrEnum):
    """Commands understood by the controller sketch.

    Each is sent as a single ASCII line terminated by ``"\\n"``.
    """

    R1_ON = "R1ON"
    R1_OFF = "R1OFF"
    R2_ON = "R2ON"
    R2_OFF = "R2OFF"

    @classmethod
    def for_relay(cls, relay_id: int, on: bool) -> RelayCommand:
        """Return the command switching *relay_id* on or off.

        Raises :class:`ValueError` for an unknown relay id.
        """
        relay = RelayId(relay_id)
        return cls(f"R{relay.value}{'ON' if on else 'OFF'}")

    def to_wire(self) -> str:
        return f"{self.value}\n"


class RelayStates(BiogasModel):
    relay1: bool = False
    relay2: bool = False

    def with_relay(self, relay_id: int, on: bool) -> RelayStates:
        field_name = "relay1" if RelayId(relay_id) is RelayId.ONE else "relay2"
        return self.model_copy(update={field_name: on})
