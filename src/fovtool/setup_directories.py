"""
Output location setup.

A fileset is written flat into a fresh directory: tiles, companions, per-FOV
JSON and the aggregate documents all sit side by side. The directory must not
exist beforehand, so a run never mixes its files with an older one.
"""

import logging
from pathlib import Path

from fovtool.contracts import OutputExists, PatternSuffix

logger = logging.getLogger(__name__)

PATTERN_SUFFIX = ".pattern"


def check_output_directory(path) -> Path:
    """
    Validate an output directory without creating it.

    Parameters
    ----------
    path : str or Path
        Requested output directory.

    Returns
    -------
    Path
        Absolute, user-expanded path.

    Raises
    ------
    OutputExists
        If anything already exists at ``path``.
    """
    out_dir = Path(path).expanduser().resolve()
    if out_dir.exists():
        raise OutputExists(path)
    return out_dir


def setup_output_directory(path) -> Path:
    """
    Create the output directory of a conversion run.

    Parameters
    ----------
    path : str or Path
        Output directory. Parent directories are created as needed.

    Returns
    -------
    Path
        The created directory.

    Raises
    ------
    OutputExists
        If anything already exists at ``path``.
    """
    out_dir = check_output_directory(path)
    out_dir.mkdir(parents=True)
    logger.info("Created output directory %s", out_dir)
    return out_dir


def check_pattern_file(path) -> Path:
    """Validate the target of ``--guess -o``: ``.pattern`` suffix, not existing."""
    if not str(path).endswith(PATTERN_SUFFIX):
        raise PatternSuffix(path)
    target = Path(path).expanduser()
    if target.exists():
        raise OutputExists(path)
    return target
