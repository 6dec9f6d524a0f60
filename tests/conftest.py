"""Root-level pytest fixtures for the fovtool test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture. Tests build configs through these fixtures instead of raw
dicts, and create inputs as synthetic ``.fake`` datasets.
"""

import logging
import shutil
import tempfile
from functools import partial
from pathlib import Path

import pytest

from fovtool.cli import run_fovtool
from fovtool.cli.run_fovtool import reset_logging
from fovtool.naming import StandardNaming
from fovtool.schemas import CLIConfig, ParamConfig, resolve_config
from tests.helpers.fake_dataset import make_fake as _make_fake


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults.

    Use this as the base for all test configs. Override specific values
    with make_config.
    """
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Examples
    --------
    >>> def test_workers(internal_config):
    ...     assert internal_config.workers == 1
    """
    return resolve_config(param_config, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts CLIConfig-compatible kwargs.

    Examples
    --------
    >>> def test_parallel(make_config):
    ...     config = make_config(workers=4, inputs=["a.fake"], output="out")
    ...     assert config.workers == 4
    """
    def _make(**cli_overrides):
        """Create InternalConfig with CLI overrides."""
        if cli_overrides:
            return resolve_config(param_config, CLIConfig(**cli_overrides))
        return resolve_config(param_config, None)

    return _make


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def input_dir(temp_dir):
    """Directory holding the synthetic inputs of a test."""
    d = temp_dir / "inputs"
    d.mkdir()
    return d


@pytest.fixture
def out_dir(temp_dir):
    """Output directory path. Not created: the tool refuses existing outputs."""
    return temp_dir / "out"


# =============================================================================
# Dataset and Tool Fixtures
# =============================================================================

@pytest.fixture
def make_fake(input_dir):
    """Factory for ``.fake`` datasets in input_dir.

    Examples
    --------
    >>> def test_plate(make_fake):
    ...     path = make_fake({"plates": 1, "fields": 2})
    """
    return partial(_make_fake, input_dir)


@pytest.fixture
def naming():
    return StandardNaming()


@pytest.fixture
def run_tool():
    """Run the command-line tool and return its exit code.

    Handlers the tool installs on the root logger are removed afterwards,
    so they do not outlive the captured streams of the test.

    Examples
    --------
    >>> def test_needs_action(run_tool, make_fake):
    ...     assert run_tool(make_fake()) == 10
    """
    root_level = logging.getLogger().level

    def _run(*args):
        return run_fovtool([str(arg) for arg in args])

    yield _run
    reset_logging()
    logging.getLogger().setLevel(root_level)
