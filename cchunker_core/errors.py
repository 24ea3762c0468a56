"""
Error Taxonomy and Exit Codes for cchunker

Every failure is fatal: the drivers never retry or skip a chunk. Each error
carries the pipeline stage it came from so the command line tools can name it.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-24
"""

from enum import Enum
from typing import Optional, Sequence


class ExitCode(int, Enum):
    """Process exit codes for the command line tools."""

    SUCCESS = 0
    FAILURE = 1
    USAGE = 2  # argparse's own convention


class CChunkerError(Exception):
    """Base class for all cchunker failures."""

    stage = "chunking"

    def __str__(self) -> str:
        return f"error during {self.stage}: {super().__str__()}"


class ChunkSourceError(CChunkerError):
    """Raised when the input stream cannot be read."""

    stage = "read input"


class ConfigurationError(CChunkerError):
    """Raised for invalid profiles, polynomials or configuration files."""

    stage = "configuration"


class ProfileConflictError(ConfigurationError):
    """Raised when more than one size profile is selected."""
    pass


class ProcessorSpawnError(CChunkerError):
    """Raised when the chunk processing command cannot be started."""

    stage = "spawn processor"


class ProcessorFailedError(CChunkerError):
    """Raised when the chunk processing command exits with a non-zero status."""

    stage = "run processor"

    def __init__(self, command: Sequence[str], returncode: int, chunk_index: Optional[int] = None):
        self.command = list(command)
        self.returncode = returncode
        self.chunk_index = chunk_index
        where = f" on chunk {chunk_index}" if chunk_index is not None else ""
        super().__init__(f"{self.command[0]} exited with status {returncode}{where}")


class ProcessorOutputError(CChunkerError):
    """Raised when a capturing processor does not print exactly one line."""

    stage = "capture output"


class OutputError(CChunkerError):
    """Raised when writing to the output stream fails."""

    stage = "write output"
