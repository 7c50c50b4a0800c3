"""Reassembles newline-terminated lines from arbitrarily split text chunks."""

from typing import List

from config.constants import LogcatConstants


class LineReassembler:
    """Holds at most one unterminated line between chunks."""

    def __init__(self, separator: str = LogcatConstants.LINE_SEPARATOR):
        self._separator = separator
        self._partial = ''

    @property
    def pending(self) -> str:
        """Text received after the last separator."""
        return self._partial

    def feed(self, chunk: str) -> List[str]:
        """Return the lines completed by ``chunk``, in order."""
        if not chunk:
            return []

        pieces = (self._partial + chunk).split(self._separator)
        self._partial = pieces.pop()
        return pieces

    def clear(self) -> None:
        """Discard any buffered partial line."""
        self._partial = ''
