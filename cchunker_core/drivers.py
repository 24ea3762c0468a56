"""
Chunking Drivers - single-level and multi-level reduction

SingleLevelDriver chunks the input once and streams every processor's output.

ReductionDriver chunks the input, collects one line per chunk into a summary
that starts with the iteration number, and feeds that summary back in until a
level yields at most one chunk:

    level 0:  input            -> "0\\n" + line(c1) + ... + line(cn)
    level 1:  level 0 summary  -> "1\\n" + line(c1') + ... + line(cm')
    ...
    stop when a level has 0 or 1 chunks; its summary is the output

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-24
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Callable, List, Optional, Tuple

from .chunk_source import ChunkSource
from .config import RunConfig
from .dispatcher import ChunkDispatcher
from .errors import OutputError
from .logging_utils import DispatchLog
from .summary import MemorySummary, SummarySink

logger = logging.getLogger(__name__)


class DriverState(str, Enum):
    """Driver lifecycle; strictly forward."""
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


@dataclass
class LevelStats:
    """One reduction pass."""
    iteration: int
    chunk_count: int
    summary_size: int

    @property
    def line_count(self) -> int:
        return self.chunk_count + 1


@dataclass
class ReductionResult:
    """Outcome of a reduction run."""
    levels: List[LevelStats] = field(default_factory=list)
    output: bytes = b""

    @property
    def iterations(self) -> int:
        return len(self.levels)

    @property
    def final_iteration(self) -> int:
        return self.levels[-1].iteration if self.levels else 0


def create_dispatcher(config: RunConfig) -> ChunkDispatcher:
    """Dispatcher for a run, with a DispatchLog when a log directory is configured."""
    event_log = DispatchLog(config.log_dir) if config.log_dir else None
    return ChunkDispatcher(config.command, check_lines=config.check_lines, event_log=event_log)


def _write_output(output: BinaryIO, data: bytes) -> None:
    try:
        output.write(data)
        output.flush()
    except (OSError, ValueError) as e:
        raise OutputError(f"error writing output: {e}") from e


def _flush_output(output: BinaryIO) -> None:
    try:
        output.flush()
    except (OSError, ValueError) as e:
        raise OutputError(f"error flushing output: {e}") from e


class SingleLevelDriver:
    """
    One pass: every chunk goes to the processor in pass-through mode.

    Example:
        driver = SingleLevelDriver(run_config)
        count = driver.run(sys.stdin.buffer, sys.stdout.buffer)
    """

    def __init__(self, config: RunConfig, dispatcher: Optional[ChunkDispatcher] = None):
        self.config = config
        self.dispatcher = dispatcher or create_dispatcher(config)
        self.state = DriverState.IDLE
        self.chunk_count = 0

    def run(self, stream: BinaryIO, output: BinaryIO) -> int:
        """
        Chunk stream and dispatch every chunk, in order.

        Returns:
            Number of chunks dispatched

        Raises:
            CChunkerError: on the first read, spawn, processor or write failure
        """
        self.state = DriverState.RUNNING
        self.chunk_count = 0
        source = ChunkSource(stream, self.config.polynomial, self.config.profile, self.config.engine)
        scratch = bytearray()

        try:
            while True:
                chunk = source.next(scratch)
                if chunk is None:
                    break
                self.dispatcher.pass_through(chunk, output)
                self.chunk_count += 1
            _flush_output(output)
        except Exception:
            self.state = DriverState.FAILED
            raise

        self.state = DriverState.DONE
        logger.info(f"Dispatched {self.chunk_count} chunks")
        return self.chunk_count


class ReductionDriver:
    """
    Repeated chunking until the data collapses to a single line.

    Each level's summary is held by a SummarySink from summary_factory
    (in memory by default) and becomes the next level's input.
    """

    def __init__(
        self,
        config: RunConfig,
        dispatcher: Optional[ChunkDispatcher] = None,
        summary_factory: Callable[[], SummarySink] = MemorySummary,
    ):
        self.config = config
        self.dispatcher = dispatcher or create_dispatcher(config)
        self.summary_factory = summary_factory
        self.state = DriverState.IDLE

    def _run_level(self, iteration: int, stream: BinaryIO, scratch: bytearray) -> Tuple[SummarySink, int]:
        summary = self.summary_factory()
        summary.write(f"{iteration}\n".encode("ascii"))

        source = ChunkSource(stream, self.config.polynomial, self.config.profile, self.config.engine)
        while True:
            chunk = source.next(scratch)
            if chunk is None:
                break
            summary.write(self.dispatcher.capture_line(chunk))

        return summary, source.chunks_emitted

    def reduce(self, stream: BinaryIO) -> ReductionResult:
        """
        Run levels until one yields at most one chunk.

        Returns:
            ReductionResult with per-level stats and the final summary bytes

        Raises:
            CChunkerError: on any failure in any level; nothing is returned
        """
        self.state = DriverState.RUNNING
        result = ReductionResult()
        scratch = bytearray()
        iteration = 0
        current = stream

        try:
            while True:
                summary, chunk_count = self._run_level(iteration, current, scratch)
                stats = LevelStats(iteration, chunk_count, summary.size)
                result.levels.append(stats)
                logger.info(f"Level {iteration}: {chunk_count} chunks, summary {summary.size} bytes")
                if self.dispatcher.event_log is not None:
                    self.dispatcher.event_log.log_level(iteration, chunk_count, summary.size)

                if chunk_count <= 1:
                    result.output = summary.getvalue()
                    summary.close()
                    break

                current = summary.reader()
                summary.close()
                iteration += 1
        except Exception:
            self.state = DriverState.FAILED
            raise

        self.state = DriverState.DONE
        return result

    def run(self, stream: BinaryIO, output: BinaryIO) -> ReductionResult:
        """Reduce stream and write the final summary to output."""
        result = self.reduce(stream)
        try:
            _write_output(output, result.output)
        except OutputError:
            self.state = DriverState.FAILED
            raise
        return result
