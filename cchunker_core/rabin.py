"""
Rabin Fingerprint Chunking Engine

Rolling-hash content-defined chunker compatible with restic's chunker: a
64-byte window slides over the stream, and a cut is placed where the low
average_bits of the digest are zero (or at max_size). The first
min_size - 64 bytes of every chunk are copied without hashing.

Boundaries depend only on the bytes, the polynomial and the size bounds, so
the same data cuts the same way wherever it appears.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-24
"""

import functools
import logging
from typing import BinaryIO, List, NamedTuple, Optional, Tuple

from .errors import ConfigurationError
from .polynomial import pol_deg, pol_mod
from .profiles import KiB, WINDOW_SIZE

logger = logging.getLogger(__name__)

READ_BUFFER_SIZE = 512 * KiB


class Cut(NamedTuple):
    """Position of an emitted chunk in the stream and the digest at its cut."""
    start: int
    length: int
    digest: int


def _append_byte(digest: int, b: int, pol: int) -> int:
    return pol_mod((digest << 8) | b, pol)


@functools.lru_cache(maxsize=16)
def compute_tables(pol: int) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    """
    Lookup tables for sliding a byte out and reducing modulo pol.

    out[b] = H(b || 0 * (WINDOW_SIZE - 1)), so XOR-ing it into the digest
    removes b from the front of the window.

    mod[b] = (b * x^k mod pol) | (b * x^k) with k = deg(pol): one XOR both
    cancels the 8 bits above the degree and adds their remainder.
    """
    out: List[int] = []
    for b in range(256):
        h = _append_byte(0, b, pol)
        for _ in range(WINDOW_SIZE - 1):
            h = _append_byte(h, 0, pol)
        out.append(h)

    k = pol_deg(pol)
    mod = [pol_mod(b << k, pol) | (b << k) for b in range(256)]
    return tuple(out), tuple(mod)


class RabinChunker:
    """
    Streaming chunker over a binary stream.

    Call next(data) repeatedly; each call fills data with one chunk and
    returns its Cut, or returns None once the stream is exhausted.
    """

    def __init__(
        self,
        stream: BinaryIO,
        polynomial: int,
        min_size: int,
        max_size: int,
        average_bits: int = 20,
    ):
        if pol_deg(polynomial) < 9:
            raise ConfigurationError(f"polynomial {polynomial:#x} has degree below 9")
        if min_size < WINDOW_SIZE or min_size >= max_size:
            raise ConfigurationError(f"invalid chunk bounds [{min_size}, {max_size}]")

        self.stream = stream
        self.polynomial = polynomial
        self.min_size = min_size
        self.max_size = max_size
        self.split_mask = (1 << average_bits) - 1

        self._pol_shift = pol_deg(polynomial) - 8
        self._tab_out, self._tab_mod = compute_tables(polynomial)

        self._buf = b""
        self._bpos = 0
        self._bmax = 0
        self._pos = 0
        self._closed = False
        self._reset()

    def _reset(self):
        self._window = bytearray(WINDOW_SIZE)
        self._wpos = 0
        self._count = 0
        self._digest = self._slide(0, 1)
        self._start = self._pos
        self._pre = self.min_size - WINDOW_SIZE

    def _slide(self, digest: int, b: int) -> int:
        out = self._window[self._wpos]
        self._window[self._wpos] = b
        digest ^= self._tab_out[out]
        self._wpos = (self._wpos + 1) % WINDOW_SIZE
        return ((digest << 8) | b) ^ self._tab_mod[digest >> self._pol_shift]

    def _read_full(self, size: int) -> bytes:
        parts = []
        remaining = size
        while remaining > 0:
            piece = self.stream.read(remaining)
            if not piece:
                break
            parts.append(piece)
            remaining -= len(piece)
        return b"".join(parts)

    def next(self, data: bytearray) -> Optional[Cut]:
        """
        Fill data with the next chunk.

        Raises:
            OSError: when the underlying stream fails
        """
        del data[:]

        while True:
            if self._bpos >= self._bmax:
                buf = self._read_full(READ_BUFFER_SIZE)
                if not buf:
                    if self._closed:
                        return None
                    self._closed = True
                    if self._count > 0:
                        return Cut(self._start, self._count, self._digest)
                    return None
                self._buf = buf
                self._bpos = 0
                self._bmax = len(buf)

            # bytes before min_size - WINDOW_SIZE can never end a chunk
            if self._pre > 0:
                n = self._bmax - self._bpos
                if self._pre > n:
                    self._pre -= n
                    data += self._buf[self._bpos:self._bmax]
                    self._count += n
                    self._pos += n
                    self._bpos = self._bmax
                    continue
                data += self._buf[self._bpos:self._bpos + self._pre]
                self._bpos += self._pre
                self._count += self._pre
                self._pos += self._pre
                self._pre = 0

            add = self._count
            digest = self._digest
            win = self._window
            wpos = self._wpos
            tab_out = self._tab_out
            tab_mod = self._tab_mod
            shift = self._pol_shift
            mask = self.split_mask
            min_size = self.min_size
            max_size = self.max_size
            buf = self._buf

            for i in range(self._bpos, self._bmax):
                b = buf[i]
                out = win[wpos]
                win[wpos] = b
                digest ^= tab_out[out]
                wpos = (wpos + 1) % WINDOW_SIZE
                digest = ((digest << 8) | b) ^ tab_mod[digest >> shift]

                add += 1
                if add < min_size:
                    continue
                if (digest & mask) == 0 or add >= max_size:
                    data += buf[self._bpos:i + 1]
                    self._count = add
                    self._pos += i + 1 - self._bpos
                    self._bpos = i + 1
                    cut = Cut(self._start, self._count, digest)
                    self._reset()
                    return cut

            self._digest = digest
            self._wpos = wpos
            steps = self._bmax - self._bpos
            data += buf[self._bpos:self._bmax]
            self._count += steps
            self._pos += steps
            self._bpos = self._bmax
