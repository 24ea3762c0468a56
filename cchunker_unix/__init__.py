"""
cchunker Unix tools - command line front ends for the chunking drivers

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-24
"""

from .common import build_parser, resolve_config, polynomial_action, run_tool

__all__ = ["build_parser", "resolve_config", "polynomial_action", "run_tool"]
