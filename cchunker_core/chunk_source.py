"""
Chunk Source - content-defined chunks over a byte stream

Wraps an input stream and a chunking engine configured with a size profile.
Chunks come out lazily, in stream order, covering every byte exactly once.

Two engines are available:

- rabin: polynomial-driven rolling hash (streaming, restic-compatible cuts)
- fastcdc: the fastcdc library's gear hash; the polynomial is not used and the
  whole level input is read into memory first

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-24
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Iterator, Optional

from fastcdc import fastcdc

from .errors import ChunkSourceError, ConfigurationError
from .profiles import SizeProfile
from .rabin import Cut, RabinChunker

logger = logging.getLogger(__name__)

# fastcdc refuses smaller bounds
FASTCDC_MIN_SIZE = 64
FASTCDC_AVG_SIZE = 256
FASTCDC_MAX_SIZE = 1024


class ChunkEngine(str, Enum):
    """Boundary detection backend."""
    RABIN = "rabin"
    FASTCDC = "fastcdc"


@dataclass
class Chunk:
    """
    One content-defined chunk.

    data is the caller's scratch buffer; it is only valid until the next call
    to ChunkSource.next() with the same buffer.

    Attributes:
        index: Position of the chunk in the stream (0-based)
        start: Byte offset of the first byte
        length: Number of bytes
        cut: Rolling hash digest at the boundary (None for fastcdc)
        data: Chunk bytes
    """
    index: int
    start: int
    length: int
    cut: Optional[int]
    data: bytearray


class FastCDCChunker:
    """Adapter exposing fastcdc through the same next(data) interface as RabinChunker."""

    def __init__(self, stream: BinaryIO, min_size: int, max_size: int, average_bits: int):
        if min_size < FASTCDC_MIN_SIZE or max_size < FASTCDC_MAX_SIZE:
            raise ConfigurationError(
                f"fastcdc needs min_size >= {FASTCDC_MIN_SIZE} and max_size >= {FASTCDC_MAX_SIZE}"
            )
        self.stream = stream
        self.min_size = min_size
        self.max_size = max_size
        self.avg_size = min(max(1 << average_bits, min_size, FASTCDC_AVG_SIZE), max_size)
        self._payload: Optional[bytes] = None
        self._cuts = None

    def next(self, data: bytearray) -> Optional[Cut]:
        del data[:]
        if self._payload is None:
            self._payload = self.stream.read()
            if self._payload:
                self._cuts = iter(fastcdc(
                    self._payload,
                    min_size=self.min_size,
                    avg_size=self.avg_size,
                    max_size=self.max_size,
                ))
        if self._cuts is None:
            return None

        cdc_chunk = next(self._cuts, None)
        if cdc_chunk is None:
            self._cuts = None
            return None
        data += self._payload[cdc_chunk.offset:cdc_chunk.offset + cdc_chunk.length]
        return Cut(cdc_chunk.offset, cdc_chunk.length, None)


class ChunkSource:
    """
    Lazy, finite, non-restartable sequence of chunks over a stream.

    Example:
        source = ChunkSource(sys.stdin.buffer, DEFAULT_POLYNOMIAL, profile)
        buf = bytearray()
        while (chunk := source.next(buf)) is not None:
            ...
    """

    def __init__(
        self,
        stream: BinaryIO,
        polynomial: int,
        profile: SizeProfile,
        engine: ChunkEngine = ChunkEngine.RABIN,
    ):
        self.profile = profile
        self.engine = ChunkEngine(engine)
        self._index = 0

        if self.engine == ChunkEngine.FASTCDC:
            self._chunker = FastCDCChunker(
                stream, profile.min_size, profile.max_size, profile.average_bits
            )
        else:
            self._chunker = RabinChunker(
                stream, polynomial, profile.min_size, profile.max_size, profile.average_bits
            )

    @property
    def chunks_emitted(self) -> int:
        return self._index

    def next(self, buf: bytearray) -> Optional[Chunk]:
        """
        Fill buf with the next chunk.

        Returns:
            Chunk backed by buf, or None at end of stream

        Raises:
            ChunkSourceError: if reading the stream fails
        """
        try:
            cut = self._chunker.next(buf)
        except OSError as e:
            raise ChunkSourceError(f"error getting next data chunk: {e}") from e
        if cut is None:
            return None

        chunk = Chunk(index=self._index, start=cut.start, length=cut.length, cut=cut.digest, data=buf)
        self._index += 1
        logger.debug(f"Chunk {chunk.index}: start={chunk.start} length={chunk.length}")
        return chunk

    def __iter__(self) -> Iterator[Chunk]:
        """Yield chunks, each with its own buffer."""
        while True:
            chunk = self.next(bytearray())
            if chunk is None:
                return
            yield chunk
