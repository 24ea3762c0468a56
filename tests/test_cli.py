"""
Tests for the cchunker and multicchunker command line tools

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-26
"""

import os
import subprocess
import sys

import pytest

from cchunker_core import ExitCode, ProfileConflictError, __version__, is_irreducible
from cchunker_core.polynomial import pol_deg
from cchunker_unix import build_parser, resolve_config
from cchunker_unix import cli, multi_cli

from conftest import EXIT_2_SCRIPT, HASH_LINE_SCRIPT, LENGTH_SCRIPT, PROJECT_ROOT, hash_line, random_bytes


def run_module(module: str, args, stdin: bytes) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-m", module, *args],
        input=stdin,
        capture_output=True,
        cwd=str(PROJECT_ROOT),
        env=dict(os.environ),
        timeout=120,
    )


class TestPolynomialActions:
    """Tests for --new-polynomial and --check-polynomial."""

    def test_new_polynomial(self, capsys, empty_config):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--config", str(empty_config), "--new-polynomial"])
        assert excinfo.value.code == ExitCode.SUCCESS

        out = capsys.readouterr().out
        assert out.endswith("\n")
        pol = int(out)
        assert pol_deg(pol) == 53
        assert is_irreducible(pol)

    def test_check_default_polynomial(self, capsys, empty_config):
        with pytest.raises(SystemExit) as excinfo:
            multi_cli.main(["--config", str(empty_config), "--check-polynomial"])
        assert excinfo.value.code == 0

    def test_check_reducible_polynomial(self, capsys, empty_config):
        with pytest.raises(SystemExit) as excinfo:
            cli.main([
                "--config", str(empty_config),
                "--polynomial", "0x3DA3358B4DC172",
                "--check-polynomial",
            ])
        assert excinfo.value.code == 1
        assert "not irreducible" in capsys.readouterr().err

    def test_invalid_polynomial_text(self, empty_config):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--config", str(empty_config), "--polynomial", "zzz", "--check-polynomial"])
        assert excinfo.value.code == 1


class TestUsage:
    """Tests for argument handling."""

    def test_missing_command(self, capsys, empty_config):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--config", str(empty_config)])
        assert excinfo.value.code == 1
        assert "CHUNK PROCESSOR" in capsys.readouterr().err

    def test_conflicting_profiles(self, capsys, empty_config):
        with pytest.raises(SystemExit) as excinfo:
            multi_cli.main(["--config", str(empty_config), "--small-chunks", "--large-chunks", "cat"])
        assert excinfo.value.code == 2

    @pytest.mark.parametrize("flag,expected", [
        (None, "standard"),
        ("--small-chunks", "small"),
        ("--large-chunks", "large"),
    ])
    def test_profile_flags(self, empty_config, flag, expected):
        argv = ["--config", str(empty_config)] + ([flag] if flag else []) + ["cat"]
        args = build_parser("cchunker", "test").parse_args(argv)
        assert resolve_config(args).chunking.profile == expected

    def test_profile_flag_overrides_file(self, temp_dir):
        path = temp_dir / "cchunker.yaml"
        path.write_text("chunking:\n  profile: large\n")
        args = build_parser("cchunker", "test").parse_args(["--config", str(path), "--small-chunks", "cat"])
        assert resolve_config(args).chunking.profile == "small"

    def test_both_profiles_rejected_when_resolving(self, empty_config):
        args = build_parser("cchunker", "test").parse_args(["--config", str(empty_config), "cat"])
        args.small_chunks = True
        args.large_chunks = True
        with pytest.raises(ProfileConflictError):
            resolve_config(args)

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            multi_cli.main(["--version"])
        assert excinfo.value.code == 0
        assert capsys.readouterr().out.startswith(f"multicchunker v{__version__}")

    def test_missing_config_file(self, temp_dir):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--config", str(temp_dir / "absent.yaml"), "cat"])
        assert excinfo.value.code == 1


class TestEndToEnd:
    """Run the tools as separate processes over stdin/stdout."""

    def test_cchunker_passes_output_through(self, empty_config):
        data = random_bytes(100_000, seed=40)
        result = run_module(
            "cchunker_unix.cli",
            ["--config", str(empty_config), sys.executable, "-c", LENGTH_SCRIPT],
            data,
        )
        assert result.returncode == 0, result.stderr
        assert result.stdout == b"100000\n"

    def test_multicchunker_empty_input(self, empty_config):
        result = run_module(
            "cchunker_unix.multi_cli",
            ["--config", str(empty_config), sys.executable, "-c", HASH_LINE_SCRIPT],
            b"",
        )
        assert result.returncode == 0, result.stderr
        assert result.stdout == b"0\n"

    def test_multicchunker_single_chunk(self, empty_config):
        data = random_bytes(100_000, seed=41)
        result = run_module(
            "cchunker_unix.multi_cli",
            ["--config", str(empty_config), "--", sys.executable, "-c", HASH_LINE_SCRIPT],
            data,
        )
        assert result.returncode == 0, result.stderr
        assert result.stdout == b"0\n" + hash_line(data)

    def test_failing_processor(self, empty_config):
        result = run_module(
            "cchunker_unix.cli",
            ["--config", str(empty_config), sys.executable, "-c", EXIT_2_SCRIPT],
            b"some input",
        )
        assert result.returncode == 1
        assert b"error during run processor" in result.stderr

    def test_multicchunker_no_line_check(self, empty_config):
        result = run_module(
            "cchunker_unix.multi_cli",
            [
                "--config", str(empty_config), "--no-line-check",
                sys.executable, "-c", "import sys; sys.stdin.buffer.read(); print('x'); print('y')",
            ],
            b"abc",
        )
        assert result.returncode == 0, result.stderr
        assert result.stdout == b"0\nx\ny\n"

    def test_malformed_config_section(self, temp_dir):
        path = temp_dir / "cchunker.yaml"
        path.write_text("chunking: small\n")
        result = run_module("cchunker_unix.cli", ["--config", str(path), "cat"], b"abc")
        assert result.returncode == 1
        assert b"error during configuration" in result.stderr
        assert b"Traceback" not in result.stderr
