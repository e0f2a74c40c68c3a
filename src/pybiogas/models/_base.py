"""Base model shared by all pybiogas snapshots.

Every snapshot handed to readers is a frozen :class:`BiogasModel`, so a
reader always sees a fully-formed value; writers produce new instances via
``model_copy(update=...)`` instead of mutating in place.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict


def utcnow() -> datetime:
    return datetime.now(UTC)


class BiogasModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
