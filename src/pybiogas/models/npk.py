"""Soil NPK reading produced by the demo sensor."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from pybiogas.models._base import BiogasModel


class NpkReading(BiogasModel):
    n: int = Field(default=0, ge=0)
    p: int = Field(default=0, ge=0)
    k: int = Field(default=0, ge=0)
    captured_at: datetime | None = None
