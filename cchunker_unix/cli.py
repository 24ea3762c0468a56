#!/usr/bin/env python3
"""
cchunker - content defined chunking of stdin, one processor run per chunk

Usage:
    cchunker [-flags...] CHUNK PROCESSOR

Content chunking has the special property that chunks will be shared across
similar data, which makes these chunks suitable for deduplicating backup
programs. What to do with each chunk is decided by the processor command; its
stdout is passed through to cchunker's stdout.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-24
"""

import sys
from typing import List, Optional

from cchunker_core import RunConfig, SingleLevelDriver

from .common import run_tool

DESCRIPTION = (
    "Content defined chunking on data piped into stdin. "
    "Each chunk is piped into CHUNK PROCESSOR, whose output is passed through."
)


def run_single_level(config: RunConfig) -> None:
    """Chunk stdin once, streaming every processor's stdout to ours."""
    SingleLevelDriver(config).run(sys.stdin.buffer, sys.stdout.buffer)


def main(argv: Optional[List[str]] = None):
    """CLI entry point."""
    sys.exit(run_tool("cchunker", DESCRIPTION, run_single_level, argv))


if __name__ == "__main__":
    main()
