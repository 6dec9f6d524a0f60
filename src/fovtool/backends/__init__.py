"""Imaging backends.

``open_source()`` is the single entrypoint: it picks a backend from the
``--format`` value (or from the input path when no format is forced) and
returns an opened ImageSource.

Formats
-------
fake : synthetic ``.fake`` datasets (see ``fovtool.backends.fake``)
bioio : any file bioio can read, reader auto-detected
<module> : a bioio reader plugin module such as ``bioio_ome_tiff``
"""

import importlib
import logging
from typing import Optional

from fovtool.backends.base import ImageSource, Length, PlanePosition, SeriesDims
from fovtool.backends.fake import FakeImageSource, is_fake_path
from fovtool.contracts import UnknownFormat

__all__ = [
    'ImageSource',
    'Length',
    'PlanePosition',
    'SeriesDims',
    'FakeImageSource',
    'open_source',
    'check_format',
]

logger = logging.getLogger(__name__)


def _bioio_reader(name: str) -> type:
    """Reader class of a bioio plugin module."""
    try:
        module = importlib.import_module(name)
        return module.Reader
    except (ImportError, AttributeError):
        raise UnknownFormat(name) from None


def check_format(name: Optional[str]) -> None:
    """Fail early with UnknownFormat if ``name`` cannot be resolved."""
    if name is None or name in ("fake", "bioio"):
        return
    _bioio_reader(name)


def open_source(path, format: Optional[str] = None) -> ImageSource:
    """Open ``path`` with the requested or detected backend.

    Parameters
    ----------
    path : str or Path
        Input file.
    format : str, optional
        Backend to force. Detected from the path when None.

    Returns
    -------
    ImageSource
        Opened source; the caller owns it and must close it.

    Raises
    ------
    UnknownFormat
        If ``format`` names no backend or installed bioio plugin, or no
        installed bioio reader can open ``path``.
    """
    if format is None:
        format = "fake" if is_fake_path(path) else "bioio"

    if format == "fake":
        return FakeImageSource(path)

    # bioio is imported lazily so synthetic datasets need no reader plugins
    from fovtool.backends.bioio_backend import BioImageSource

    if format == "bioio":
        return BioImageSource(path)
    return BioImageSource(path, reader=_bioio_reader(format))
