"""
Shared command line plumbing for cchunker and multicchunker

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-24
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional

from cchunker_core import (
    CChunkerConfig,
    CChunkerError,
    ChunkEngine,
    ExitCode,
    RunConfig,
    build_run_config,
    is_irreducible,
    load_config,
    parse_polynomial,
    random_polynomial,
    select_profile,
    setup_logging,
)
from cchunker_core.profiles import describe_profiles
from cchunker_core.version import get_short_banner

logger = logging.getLogger(__name__)


def build_parser(prog: str, description: str, reduction: bool = False) -> argparse.ArgumentParser:
    """Build the argument parser shared by both tools."""
    profiles = "\n".join(f"  {line}" for line in describe_profiles())
    parser = argparse.ArgumentParser(
        prog=prog,
        description=description,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
CHUNK PROCESSOR is a command + arguments that reads one chunk on stdin.
On any IO or subprocess error, {prog} exits with a non zero exit code.

Size profiles:
{profiles}

Examples:
  {prog} sha256sum < backup.tar
  {prog} --large-chunks -- sh -c 'sha256sum | cut -c1-64'
""",
    )

    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        metavar="CHUNK PROCESSOR",
        help="Command and arguments run once per chunk",
    )
    parser.add_argument(
        "--polynomial",
        type=str,
        default=None,
        help="Polynomial for content defined chunking, should be generated via --new-polynomial "
             "(default: 0x3DA3358B4DC173)",
    )
    parser.add_argument(
        "--new-polynomial",
        action="store_true",
        help="Generate a new chunking polynomial, print it on stdout and exit",
    )
    parser.add_argument(
        "--check-polynomial",
        action="store_true",
        help="Check if the polynomial is suitable for content chunking and exit",
    )

    sizes = parser.add_mutually_exclusive_group()
    sizes.add_argument(
        "--small-chunks",
        action="store_true",
        help="Min size 512 KiB, max size 8 MiB, average ~1 MiB",
    )
    sizes.add_argument(
        "--large-chunks",
        action="store_true",
        help="Min size 1 MiB, max size 32 MiB, average ~8 MiB",
    )

    parser.add_argument(
        "--engine",
        choices=[e.value for e in ChunkEngine],
        default=None,
        help="Chunk boundary engine (default: rabin)",
    )
    if reduction:
        parser.add_argument(
            "--no-line-check",
            action="store_true",
            help="Do not verify that the processor prints exactly one line per chunk",
        )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search for cchunker.yaml)",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="Write a dispatch log (dispatch.log, events.jsonl) to this directory",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", "-q", action="store_true", help="Only log errors"
    )
    parser.add_argument(
        "--version", action="version", version=get_short_banner(prog)
    )

    return parser


def resolve_config(args: argparse.Namespace) -> CChunkerConfig:
    """
    Resolve configuration with precedence: CLI > ENV > CONFIG > DEFAULTS

    Raises:
        ConfigurationError: for invalid files or values
    """
    config = load_config(args.config)

    if args.polynomial is not None:
        config.chunking.polynomial = parse_polynomial(args.polynomial)
    if args.small_chunks or args.large_chunks:
        config.chunking.profile = select_profile(args.small_chunks, args.large_chunks).name
    if args.engine:
        config.chunking.engine = args.engine
    if getattr(args, "no_line_check", False):
        config.processor.check_lines = False
    if args.log_dir:
        config.logging.log_dir = args.log_dir
    if args.verbose:
        config.logging.level = "DEBUG"
    elif args.quiet:
        config.logging.level = "ERROR"

    return config


def polynomial_action(args: argparse.Namespace, polynomial: int) -> Optional[int]:
    """
    Handle --new-polynomial and --check-polynomial.

    Returns:
        Exit code if an action ran, None otherwise
    """
    if args.new_polynomial:
        p = random_polynomial()
        sys.stdout.write(f"{p}\n")
        sys.stdout.flush()
        return ExitCode.SUCCESS

    if args.check_polynomial:
        if not is_irreducible(polynomial):
            print("polynomial is not irreducible, it is not suitable for content chunking", file=sys.stderr)
            return ExitCode.FAILURE
        logger.info(f"Polynomial {polynomial:#x} is irreducible")
        return ExitCode.SUCCESS

    return None


def run_tool(
    prog: str,
    description: str,
    run: Callable[[RunConfig], None],
    argv: Optional[List[str]] = None,
    reduction: bool = False,
) -> int:
    """
    Parse argv, resolve configuration and hand a RunConfig to run.

    Returns:
        Process exit code
    """
    parser = build_parser(prog, description, reduction=reduction)
    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else "ERROR" if args.quiet else "WARNING")

    try:
        config = resolve_config(args)
        setup_logging(config.logging.level)

        action = polynomial_action(args, config.chunking.polynomial)
        if action is not None:
            return int(action)

        command = list(args.command)
        if command and command[0] == "--":
            command = command[1:]
        if not command:
            parser.print_help(sys.stderr)
            return int(ExitCode.FAILURE)

        run(build_run_config(config, command))
        return int(ExitCode.SUCCESS)

    except CChunkerError as e:
        logger.error(str(e), exc_info=args.verbose)
        return int(ExitCode.FAILURE)
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130
