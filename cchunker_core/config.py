"""
cchunker Configuration System
=============================

Loads settings from cchunker.yaml with environment variable overrides and
resolves them into the immutable RunConfig handed to the drivers.

Precedence: CLI > ENV > CONFIG FILE > DEFAULTS (the CLI layer is applied by
cchunker_unix.common).

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-26
"""

import os
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .chunk_source import ChunkEngine
from .errors import ConfigurationError
from .logging_utils import LogLevel
from .polynomial import DEFAULT_POLYNOMIAL, parse_polynomial
from .profiles import Profile, SizeProfile, get_profile

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "cchunker.yaml"


# =============================================================================
# Configuration Data Classes
# =============================================================================

@dataclass
class ChunkingConfig:
    """Chunk boundary settings."""
    profile: str = Profile.STANDARD.value
    polynomial: int = DEFAULT_POLYNOMIAL
    engine: str = ChunkEngine.RABIN.value


@dataclass
class ProcessorConfig:
    """Chunk processor settings."""
    check_lines: bool = True  # enforce the one-line contract in reduction mode


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = LogLevel.WARNING.value
    log_dir: Optional[str] = None  # DispatchLog directory, disabled when None


@dataclass
class CChunkerConfig:
    """Root configuration container."""
    chunking: ChunkingConfig = field(default_factory=ChunkingConfig)
    processor: ProcessorConfig = field(default_factory=ProcessorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


@dataclass(frozen=True)
class RunConfig:
    """
    Everything one run needs, resolved once at the process boundary.

    Attributes:
        command: Processor argv
        profile: Chunk size profile
        polynomial: Rolling hash polynomial
        engine: Boundary detection backend
        check_lines: Enforce one captured line per chunk
        log_dir: Optional DispatchLog directory
    """
    command: Tuple[str, ...]
    profile: SizeProfile
    polynomial: int = DEFAULT_POLYNOMIAL
    engine: ChunkEngine = ChunkEngine.RABIN
    check_lines: bool = True
    log_dir: Optional[Path] = None


# =============================================================================
# Configuration Loader
# =============================================================================

def find_config_file(start_path: Optional[Path] = None) -> Optional[Path]:
    """
    Find cchunker.yaml by searching upward from start_path.

    Search order:
    1. start_path / cchunker.yaml
    2. start_path / .cchunker / cchunker.yaml
    3. Parent directories (recursive)
    4. ~/.config/cchunker/cchunker.yaml

    Args:
        start_path: Starting directory (defaults to cwd)

    Returns:
        Path to config file or None if not found
    """
    if start_path is None:
        start_path = Path.cwd()

    current = Path(start_path).resolve()
    for _ in range(10):  # Max 10 levels up
        for candidate in (current / CONFIG_FILENAME, current / ".cchunker" / CONFIG_FILENAME):
            if candidate.exists():
                return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    user_config = Path.home() / ".config" / "cchunker" / CONFIG_FILENAME
    if user_config.exists():
        return user_config

    return None


def load_config(config_path: Optional[Path] = None) -> CChunkerConfig:
    """
    Load configuration from YAML file with environment variable overrides.

    Environment variables override config file values:
    - CCHUNKER_PROFILE -> chunking.profile
    - CCHUNKER_POLYNOMIAL -> chunking.polynomial
    - CCHUNKER_ENGINE -> chunking.engine
    - CCHUNKER_CHECK_LINES -> processor.check_lines
    - CCHUNKER_LOG_LEVEL -> logging.level
    - CCHUNKER_LOG_DIR -> logging.log_dir

    Args:
        config_path: Path to config file (auto-detected if None)

    Returns:
        CChunkerConfig instance

    Raises:
        ConfigurationError: if the file or a value is invalid
    """
    config = CChunkerConfig()

    if config_path is None:
        config_path = find_config_file()

    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"cannot read {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"{config_path}: expected a mapping at top level")
        config = _parse_config_dict(data)
    elif config_path:
        raise ConfigurationError(f"config file not found: {config_path}")
    else:
        logger.debug("No config file found, using defaults")

    config = _apply_env_overrides(config)
    _validate_config(config)
    return config


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data[name] or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"section {name!r} must be a mapping, got {section!r}")
    return section


def _parse_config_dict(data: Dict[str, Any]) -> CChunkerConfig:
    """Parse configuration dictionary into CChunkerConfig."""
    config = CChunkerConfig()

    if "chunking" in data:
        chunking = _section(data, "chunking")
        config.chunking = ChunkingConfig(
            profile=chunking.get("profile", config.chunking.profile),
            polynomial=parse_polynomial(chunking.get("polynomial", config.chunking.polynomial)),
            engine=chunking.get("engine", config.chunking.engine),
        )

    if "processor" in data:
        processor = _section(data, "processor")
        config.processor = ProcessorConfig(
            check_lines=_as_bool(processor.get("check_lines", config.processor.check_lines)),
        )

    if "logging" in data:
        log = _section(data, "logging")
        config.logging = LoggingConfig(
            level=log.get("level", config.logging.level),
            log_dir=log.get("log_dir", config.logging.log_dir),
        )

    return config


def _apply_env_overrides(config: CChunkerConfig) -> CChunkerConfig:
    """Apply environment variable overrides to config."""
    if os.environ.get("CCHUNKER_PROFILE"):
        config.chunking.profile = os.environ["CCHUNKER_PROFILE"]

    if os.environ.get("CCHUNKER_POLYNOMIAL"):
        config.chunking.polynomial = parse_polynomial(os.environ["CCHUNKER_POLYNOMIAL"])

    if os.environ.get("CCHUNKER_ENGINE"):
        config.chunking.engine = os.environ["CCHUNKER_ENGINE"]

    if os.environ.get("CCHUNKER_CHECK_LINES"):
        config.processor.check_lines = _as_bool(os.environ["CCHUNKER_CHECK_LINES"])

    if os.environ.get("CCHUNKER_LOG_LEVEL"):
        config.logging.level = os.environ["CCHUNKER_LOG_LEVEL"]

    if os.environ.get("CCHUNKER_LOG_DIR"):
        config.logging.log_dir = os.environ["CCHUNKER_LOG_DIR"]

    return config


def _validate_config(config: CChunkerConfig) -> None:
    """Reject values the drivers cannot run with."""
    get_profile(config.chunking.profile)

    try:
        ChunkEngine(str(config.chunking.engine).lower())
    except ValueError:
        valid = ", ".join(e.value for e in ChunkEngine)
        raise ConfigurationError(
            f"unknown chunking engine {config.chunking.engine!r} (expected one of: {valid})"
        ) from None

    try:
        LogLevel(str(config.logging.level).upper())
    except ValueError:
        raise ConfigurationError(f"unknown log level {config.logging.level!r}") from None


def build_run_config(config: CChunkerConfig, command: List[str]) -> RunConfig:
    """Resolve a loaded configuration plus processor argv into a RunConfig."""
    _validate_config(config)
    return RunConfig(
        command=tuple(command),
        profile=get_profile(config.chunking.profile),
        polynomial=config.chunking.polynomial,
        engine=ChunkEngine(str(config.chunking.engine).lower()),
        check_lines=config.processor.check_lines,
        log_dir=Path(config.logging.log_dir).expanduser() if config.logging.log_dir else None,
    )


def save_config(config: CChunkerConfig, path: Path) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: CChunkerConfig instance
        path: Output path
    """
    data = {
        "chunking": {
            "profile": config.chunking.profile,
            "polynomial": f"{config.chunking.polynomial:#x}",
            "engine": config.chunking.engine,
        },
        "processor": {
            "check_lines": config.processor.check_lines,
        },
        "logging": {
            "level": config.logging.level,
            "log_dir": config.logging.log_dir,
        },
    }

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Configuration saved to: {path}")
