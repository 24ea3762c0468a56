"""
Pytest Configuration and Fixtures

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-25
"""

import hashlib
import os
import random
import sys
import tempfile
from pathlib import Path
from typing import Generator, List

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from cchunker_core import SizeProfile  # noqa: E402

# Prints the first 7 hex digits of the chunk's sha256 plus a newline (8 bytes)
HASH_LINE_SCRIPT = (
    "import sys, hashlib; "
    "sys.stdout.write(hashlib.sha256(sys.stdin.buffer.read()).hexdigest()[:7] + '\\n')"
)

LENGTH_SCRIPT = "import sys; sys.stdout.write(str(len(sys.stdin.buffer.read())) + '\\n')"

TWO_LINES_SCRIPT = "import sys; sys.stdin.buffer.read(); sys.stdout.write('a\\nb\\n')"

EXIT_2_SCRIPT = "import sys; sys.stdin.buffer.read(); sys.exit(2)"

# Counts its invocations in argv[1]; the second and later ones exit with status 2
FAIL_ON_SECOND_SCRIPT = """\
import sys
from pathlib import Path

counter = Path(sys.argv[1])
n = int(counter.read_text()) + 1 if counter.exists() else 1
counter.write_text(str(n))
sys.stdin.buffer.read()
if n >= 2:
    sys.exit(2)
sys.stdout.write("line%d\\n" % n)
"""


def hash_line(data: bytes) -> bytes:
    """What HASH_LINE_SCRIPT prints for data."""
    return hashlib.sha256(data).hexdigest()[:7].encode("ascii") + b"\n"


def random_bytes(size: int, seed: int = 0) -> bytes:
    return random.Random(seed).randbytes(size)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep CCHUNKER_* variables from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("CCHUNKER_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def exact_profile() -> SizeProfile:
    """
    Cuts land at max_size: a 30-bit split mask practically never matches, so
    n * 256 bytes give exactly n chunks.
    """
    return SizeProfile("exact", min_size=64, max_size=256, average_bits=30)


@pytest.fixture
def tiny_profile() -> SizeProfile:
    """Content-defined cuts every ~200 bytes, keeps pure-Python hashing fast."""
    return SizeProfile("tiny", min_size=64, max_size=1024, average_bits=7)


@pytest.fixture
def hash_command() -> List[str]:
    return [sys.executable, "-c", HASH_LINE_SCRIPT]


@pytest.fixture
def length_command() -> List[str]:
    return [sys.executable, "-c", LENGTH_SCRIPT]


@pytest.fixture
def fail_on_second_command(temp_dir: Path) -> List[str]:
    script = temp_dir / "fail_on_second.py"
    script.write_text(FAIL_ON_SECOND_SCRIPT)
    return [sys.executable, str(script), str(temp_dir / "counter")]


@pytest.fixture
def empty_config(temp_dir: Path) -> Path:
    """An empty cchunker.yaml so tests never pick up a user config."""
    path = temp_dir / "cchunker.yaml"
    path.write_text("")
    return path
