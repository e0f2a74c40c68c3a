"""Reassembly of newline-terminated records from arbitrarily-chunked text."""

from __future__ import annotations


class LineAssembler:
    """Split a chunked text stream into complete ``"\\n"``-terminated records.

    Holds at most one partial record between calls. The emitted sequence of
    records depends only on the concatenated input, never on where the
    chunk boundaries fall.
    """

    def __init__(self) -> None:
        self._buffer = ""

    @property
    def pending(self) -> str:
        """The partial trailing record carried over to the next chunk."""
        return self._buffer

    def feed(self, chunk: str) -> list[str]:
        """Append *chunk* and return every record it completes, in order.

        Returned records never include their trailing newline.
        """
        if not chunk:
            return []
        segments = (self._buffer + chunk).split("\n")
        self._buffer = segments.pop()
        return segments

    def reset(self) -> None:
        self._buffer = ""
