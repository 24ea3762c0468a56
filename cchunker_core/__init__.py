"""
cchunker Core - content-defined chunking and recursive chunk reduction

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-24
"""

from .version import __version__, get_version
from .errors import (
    ExitCode,
    CChunkerError,
    ChunkSourceError,
    ConfigurationError,
    ProfileConflictError,
    ProcessorSpawnError,
    ProcessorFailedError,
    ProcessorOutputError,
    OutputError,
)
from .polynomial import (
    DEFAULT_POLYNOMIAL,
    POLYNOMIAL_DEGREE,
    is_irreducible,
    random_polynomial,
    derive_polynomial,
    parse_polynomial,
)
from .profiles import (
    KiB,
    MiB,
    Profile,
    SizeProfile,
    PROFILES,
    get_profile,
    select_profile,
)
from .rabin import RabinChunker, Cut
from .chunk_source import Chunk, ChunkEngine, ChunkSource, FastCDCChunker
from .logging_utils import DispatchLog, LogLevel, setup_logging
from .dispatcher import CaptureMode, ChunkDispatcher, DispatchResult, check_single_line
from .summary import SummarySink, MemorySummary
from .config import (
    CChunkerConfig,
    ChunkingConfig,
    ProcessorConfig,
    LoggingConfig,
    RunConfig,
    find_config_file,
    load_config,
    save_config,
    build_run_config,
)
from .drivers import (
    DriverState,
    LevelStats,
    ReductionResult,
    SingleLevelDriver,
    ReductionDriver,
    create_dispatcher,
)

__all__ = [
    "__version__",
    "get_version",
    # Errors
    "ExitCode",
    "CChunkerError",
    "ChunkSourceError",
    "ConfigurationError",
    "ProfileConflictError",
    "ProcessorSpawnError",
    "ProcessorFailedError",
    "ProcessorOutputError",
    "OutputError",
    # Polynomials
    "DEFAULT_POLYNOMIAL",
    "POLYNOMIAL_DEGREE",
    "is_irreducible",
    "random_polynomial",
    "derive_polynomial",
    "parse_polynomial",
    # Profiles
    "KiB",
    "MiB",
    "Profile",
    "SizeProfile",
    "PROFILES",
    "get_profile",
    "select_profile",
    # Chunking
    "RabinChunker",
    "Cut",
    "Chunk",
    "ChunkEngine",
    "ChunkSource",
    "FastCDCChunker",
    # Logging
    "DispatchLog",
    "LogLevel",
    "setup_logging",
    # Dispatch
    "CaptureMode",
    "ChunkDispatcher",
    "DispatchResult",
    "check_single_line",
    "SummarySink",
    "MemorySummary",
    # Config
    "CChunkerConfig",
    "ChunkingConfig",
    "ProcessorConfig",
    "LoggingConfig",
    "RunConfig",
    "find_config_file",
    "load_config",
    "save_config",
    "build_run_config",
    # Drivers
    "DriverState",
    "LevelStats",
    "ReductionResult",
    "SingleLevelDriver",
    "ReductionDriver",
    "create_dispatcher",
]
