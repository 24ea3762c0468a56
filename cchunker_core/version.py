"""
cchunker Version Management - Centralized version for all components

Both command line tools and the core library read their version from here.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-12-04
"""

# =============================================================================
# cchunker Version - Single Source of Truth
# =============================================================================

__version__ = "0.3.0"

BUILD_DATE = "2025-12-04"


def get_version() -> str:
    """Get the current cchunker version string."""
    return __version__


def get_short_banner(prog: str = "cchunker") -> str:
    """Get a compact version line for --version."""
    return f"{prog} v{get_version()} ({BUILD_DATE})"
