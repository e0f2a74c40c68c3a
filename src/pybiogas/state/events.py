"""State change events.

Every accepted store write is published to subscribers as one of these
events.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UpdateSource(StrEnum):
    LIVE = "live"
    SIMULATED = "simulated"
    DEMO = "demo"
    OPTIMISTIC = "optimistic"
    FAILSAFE = "failsafe"
    LOCAL = "local"


class StateSection(StrEnum):
    CONNECTION = "connection"
    TELEMETRY = "telemetry"
    RELAYS = "relays"
    DEMO = "demo"
    NPK = "npk"


class StateChange(BaseModel):
    """A change applied to the gateway state store."""

    model_config = ConfigDict(frozen=True)

    section: StateSection
    source: UpdateSource
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    data: dict[str, Any] = Field(default_factory=dict, description="Fields that were written")

    @field_validator("observed_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
