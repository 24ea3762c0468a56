"""
Summary Sinks for the Reduction Driver

A level's summary is an appendable byte sink that, once complete, is read back
as the next level's input. Only the in-memory sink is provided.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-24
"""

import io
from abc import ABC, abstractmethod
from typing import BinaryIO


class SummarySink(ABC):
    """Appendable byte sink owned by one reduction level."""

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Append data, return the number of bytes written."""

    @abstractmethod
    def reader(self) -> BinaryIO:
        """Binary stream over everything written so far, from the start."""

    @abstractmethod
    def getvalue(self) -> bytes:
        """Full contents."""

    @property
    @abstractmethod
    def size(self) -> int:
        """Bytes written so far."""

    def close(self) -> None:
        pass


class MemorySummary(SummarySink):
    """Summary kept in a BytesIO. Unbounded: a level's output must fit in memory."""

    def __init__(self):
        self._buffer = io.BytesIO()

    def write(self, data: bytes) -> int:
        return self._buffer.write(data)

    def reader(self) -> BinaryIO:
        return io.BytesIO(self._buffer.getvalue())

    def getvalue(self) -> bytes:
        return self._buffer.getvalue()

    @property
    def size(self) -> int:
        return self._buffer.tell()

    def close(self) -> None:
        self._buffer.close()
