"""
Chunk Dispatcher - runs the chunk processing command once per chunk

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-24
"""

import logging
import subprocess
import time
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, List, Optional, Sequence

from .chunk_source import Chunk
from .errors import (
    ConfigurationError,
    OutputError,
    ProcessorFailedError,
    ProcessorOutputError,
    ProcessorSpawnError,
)
from .logging_utils import DispatchLog

logger = logging.getLogger(__name__)


class CaptureMode(str, Enum):
    """What happens to the processor's stdout."""
    PASS_THROUGH = "pass_through"  # forwarded to the output stream unmodified
    SINGLE_LINE = "single_line"    # buffered, must be exactly one line


@dataclass
class DispatchResult:
    """
    Container for one processor invocation.
    """
    mode: CaptureMode
    chunk_index: int
    chunk_length: int
    returncode: int
    duration_ms: float
    stdout: Optional[bytes] = None  # None when stdout went straight to a file descriptor


def check_single_line(output: bytes) -> None:
    """
    Raise ProcessorOutputError unless output is exactly one newline-terminated line.
    """
    newlines = output.count(b"\n")
    if newlines != 1 or not output.endswith(b"\n"):
        preview = output[:80]
        raise ProcessorOutputError(
            f"chunk processor must print exactly one line, got {newlines} line terminator(s): {preview!r}"
        )


def _output_fileno(stream: BinaryIO) -> Optional[int]:
    """File descriptor behind stream, if the processor can write to it directly."""
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None


class ChunkDispatcher:
    """
    ChunkDispatcher
    ---------------

    Spawns the processor command for a single chunk:

    - The chunk bytes are the processor's entire stdin
    - Each call waits for the processor to exit before returning
    - The processor's stderr is inherited, never captured
    - A non-zero exit status raises ProcessorFailedError
    """

    def __init__(
        self,
        command: Sequence[str],
        check_lines: bool = True,
        event_log: Optional[DispatchLog] = None,
    ):
        if not command:
            raise ConfigurationError("no chunk processing command given")
        self.command: List[str] = [str(arg) for arg in command]
        self.check_lines = check_lines
        self.event_log = event_log
        self.dispatch_count = 0

    def _run(self, chunk: Chunk, stdout, mode: CaptureMode) -> DispatchResult:
        t0 = time.perf_counter()
        try:
            cp = subprocess.run(self.command, input=bytes(chunk.data), stdout=stdout, stderr=None)
        except OSError as e:
            raise ProcessorSpawnError(f"cannot start {self.command[0]!r}: {e}") from e
        duration_ms = (time.perf_counter() - t0) * 1000.0
        self.dispatch_count += 1

        result = DispatchResult(
            mode=mode,
            chunk_index=chunk.index,
            chunk_length=chunk.length,
            returncode=cp.returncode,
            duration_ms=duration_ms,
            stdout=cp.stdout,
        )
        if self.event_log is not None:
            self.event_log.log_dispatch(
                self.command,
                chunk.index,
                chunk.length,
                cp.returncode,
                duration_ms=duration_ms,
                output_bytes=len(cp.stdout) if cp.stdout is not None else None,
            )
        logger.debug(
            f"Chunk {chunk.index} ({chunk.length} bytes) -> rc={cp.returncode} in {duration_ms:.1f}ms"
        )

        if cp.returncode != 0:
            raise ProcessorFailedError(self.command, cp.returncode, chunk.index)
        return result

    def pass_through(self, chunk: Chunk, output: BinaryIO) -> DispatchResult:
        """
        Run the processor with its stdout forwarded to output.

        Raises:
            ProcessorSpawnError, ProcessorFailedError, OutputError
        """
        fd = _output_fileno(output)
        if fd is not None:
            try:
                output.flush()
            except OSError as e:
                raise OutputError(str(e)) from e
            return self._run(chunk, fd, CaptureMode.PASS_THROUGH)

        result = self._run(chunk, subprocess.PIPE, CaptureMode.PASS_THROUGH)
        try:
            output.write(result.stdout)
        except (OSError, ValueError) as e:
            raise OutputError(str(e)) from e
        return result

    def capture_line(self, chunk: Chunk) -> bytes:
        """
        Run the processor and return its stdout, which should be a single line.

        Raises:
            ProcessorSpawnError, ProcessorFailedError, ProcessorOutputError
        """
        result = self._run(chunk, subprocess.PIPE, CaptureMode.SINGLE_LINE)
        if self.check_lines:
            check_single_line(result.stdout)
        return result.stdout
