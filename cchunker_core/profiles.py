"""
Chunk Size Profiles for cchunker

A profile bounds chunk sizes and sets how many low digest bits must be zero
for a content-defined cut (expected chunk size ~ 2^average_bits).

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-24
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from .errors import ConfigurationError, ProfileConflictError

logger = logging.getLogger(__name__)

KiB = 1024
MiB = 1024 * KiB

# Rolling hash window; the engine skips min_size - WINDOW_SIZE bytes per chunk
WINDOW_SIZE = 64


class Profile(str, Enum):
    """
    Named chunk size profiles.

    - SMALL: min 512 KiB, max 8 MiB, ~1 MiB average
    - STANDARD: min 512 KiB, max 16 MiB, ~4 MiB average (default)
    - LARGE: min 1 MiB, max 32 MiB, ~8 MiB average
    """
    SMALL = "small"
    STANDARD = "standard"
    LARGE = "large"


@dataclass(frozen=True)
class SizeProfile:
    """Chunk size bounds and split mask width, fixed for a whole run."""
    name: str
    min_size: int
    max_size: int
    average_bits: int

    def __post_init__(self):
        if self.min_size < WINDOW_SIZE:
            raise ConfigurationError(
                f"profile {self.name!r}: min_size {self.min_size} is below the {WINDOW_SIZE} byte window"
            )
        if self.min_size >= self.max_size:
            raise ConfigurationError(
                f"profile {self.name!r}: min_size {self.min_size} must be below max_size {self.max_size}"
            )
        if not 1 <= self.average_bits <= 63:
            raise ConfigurationError(
                f"profile {self.name!r}: average_bits {self.average_bits} not in 1..63"
            )
        if not self.min_size <= self.average_size <= self.max_size:
            logger.warning(
                f"Profile {self.name!r}: expected chunk size {self.average_size} "
                f"is outside [{self.min_size}, {self.max_size}]"
            )

    @property
    def average_size(self) -> int:
        return 1 << self.average_bits

    @property
    def split_mask(self) -> int:
        return (1 << self.average_bits) - 1


PROFILES: Dict[Profile, SizeProfile] = {
    # one out of every ~1 million digests splits
    Profile.SMALL: SizeProfile("small", 512 * KiB, 8 * MiB, 20),
    # one out of every ~4 million
    Profile.STANDARD: SizeProfile("standard", 512 * KiB, 16 * MiB, 22),
    # one out of every ~8 million
    Profile.LARGE: SizeProfile("large", 1 * MiB, 32 * MiB, 23),
}


def get_profile(name: str) -> SizeProfile:
    """
    Resolve a profile by name (small, standard, large).

    Raises:
        ConfigurationError: for unknown names
    """
    try:
        return PROFILES[Profile(str(name).lower())]
    except ValueError:
        valid = ", ".join(p.value for p in Profile)
        raise ConfigurationError(f"unknown size profile {name!r} (expected one of: {valid})") from None


def select_profile(small: bool = False, large: bool = False) -> SizeProfile:
    """
    Map the mutually exclusive small/large selectors to a profile.

    Neither set gives the standard profile. Both set is rejected rather than
    silently letting one win.

    Raises:
        ProfileConflictError: if both small and large are requested
    """
    if small and large:
        raise ProfileConflictError("small and large chunk profiles are mutually exclusive")
    if small:
        return PROFILES[Profile.SMALL]
    if large:
        return PROFILES[Profile.LARGE]
    return PROFILES[Profile.STANDARD]


def describe_profiles() -> List[str]:
    """One human readable line per built-in profile, for usage text."""
    lines = []
    for profile in PROFILES.values():
        lines.append(
            f"{profile.name}: min {profile.min_size // KiB} KiB, "
            f"max {profile.max_size // MiB} MiB, average ~{profile.average_size // KiB} KiB"
        )
    return lines
