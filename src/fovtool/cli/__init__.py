"""Command-line interface for fovtool.

This package contains the core execution logic, so scripts/ stays a thin wrapper.
"""

from fovtool.cli.run_fovtool import main, run_fovtool

__all__ = ['main', 'run_fovtool']
