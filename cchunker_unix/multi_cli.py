#!/usr/bin/env python3
"""
multicchunker - iterated content defined chunking down to a single line

Usage:
    multicchunker [-flags...] CHUNK PROCESSOR

Each processor run must print a single line for its chunk. The lines of one
pass, prefixed by the pass number, are chunked again until a pass produces at
most one chunk; that last pass is written to stdout. Intended to be used as
part of a backup tool.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-24
"""

import logging
import sys
from typing import List, Optional

from cchunker_core import ReductionDriver, RunConfig

from .common import run_tool

logger = logging.getLogger(__name__)

DESCRIPTION = (
    "Iterative content defined chunking on data piped into stdin. "
    "CHUNK PROCESSOR must print exactly one line per chunk; "
    "the iteration reduces the data to a single line."
)


def run_reduction(config: RunConfig) -> None:
    """Reduce stdin and write the final summary to stdout."""
    result = ReductionDriver(config).run(sys.stdin.buffer, sys.stdout.buffer)
    logger.info(
        f"Reduced in {result.iterations} level(s): "
        + ", ".join(str(level.chunk_count) for level in result.levels)
        + " chunks"
    )


def main(argv: Optional[List[str]] = None):
    """CLI entry point."""
    sys.exit(run_tool("multicchunker", DESCRIPTION, run_reduction, argv, reduction=True))


if __name__ == "__main__":
    main()
