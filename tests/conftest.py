from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import pytest

from pybiogas.exceptions import BiogasTransportError


class FakeTransport:
    """In-memory stand-in for :class:`pybiogas._transport.SerialTransport`."""

    def __init__(self) -> None:
        self.open_error: BaseException | None = None
        self.write_error: BaseException | None = None
        self.write_gate: asyncio.Event | None = None
        self.write_pending = False
        self.writes: list[str] = []
        self.open_calls = 0
        self.close_calls = 0
        self._opened = False
        self._closed = False
        self._chunks: asyncio.Queue[str | BaseException] = asyncio.Queue()

    @property
    def is_open(self) -> bool:
        return self._opened and not self._closed

    async def open(self) -> None:
        self.open_calls += 1
        if self.open_error is not None:
            raise self.open_error
        self._opened = True

    def feed(self, *chunks: str) -> None:
        for chunk in chunks:
            self._chunks.put_nowait(chunk)

    def fail_read(self, message: str = "device reports an error") -> None:
        self._chunks.put_nowait(BiogasTransportError(message))

    async def read_text(self) -> str:
        if self._closed and self._chunks.empty():
            return ""
        item = await self._chunks.get()
        if isinstance(item, BaseException):
            raise item
        return item

    async def write(self, command: str) -> None:
        if self.write_gate is not None:
            self.write_pending = True
            await self.write_gate.wait()
            self.write_pending = False
        if self.write_error is not None:
            raise self.write_error
        self.writes.append(command)

    async def close(self) -> None:
        self.close_calls += 1
        if self._closed:
            return
        self._closed = True
        self._chunks.put_nowait("")


async def _settle(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0)

    await asyncio.wait_for(_poll(), timeout)


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def settle() -> Callable[[Callable[[], bool]], Awaitable[None]]:
    return _settle


@pytest.fixture
def make_transport() -> Callable[[], FakeTransport]:
    return FakeTransport
