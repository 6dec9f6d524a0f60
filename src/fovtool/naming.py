"""Strategies for naming the files of an output fileset.

A naming scheme is a pure mapping from a FOV index (and optionally a z, t, c
triple) to file names. FOV indices are zero padded to three digits so that
lexicographic order matches numeric order; z, t and c are not padded.
"""

from abc import ABC, abstractmethod
from typing import Dict, Type

from fovtool.contracts import UsageFailure

__all__ = ['NamingScheme', 'StandardNaming', 'NAMING_SCHEMES', 'get_naming']


class NamingScheme(ABC):
    """Interface for file naming strategies."""

    @abstractmethod
    def tile_filename(self, fov: int, z: int, t: int, c: int) -> str:
        """Name of the single-plane tile for (z, t, c) of a FOV."""

    @abstractmethod
    def tile_pattern(self, fov: int) -> str:
        """Tile name with ``%z``, ``%t`` and ``%c`` placeholders."""

    @abstractmethod
    def companion_filename(self, fov: int) -> str:
        """Name of the companion metadata file of a FOV."""

    @abstractmethod
    def json_filename(self, fov: int) -> str:
        """Name of the per-FOV JSON manifest."""

    @abstractmethod
    def manifest_filename(self) -> str:
        """Name of the dataset manifest."""

    def fov_key(self, fov: int) -> str:
        """Human-readable key of a FOV in the dataset manifest."""
        return f"fov_{fov:03d}"

    @staticmethod
    def expand_pattern(pattern: str, z: int, t: int, c: int) -> str:
        """Substitute the placeholders of a tile pattern."""
        return pattern.replace("%z", str(z)).replace("%t", str(t)).replace("%c", str(c))


class StandardNaming(NamingScheme):
    """The default naming scheme.

    Examples
    --------
    >>> naming = StandardNaming()
    >>> naming.tile_filename(1, 4, 3, 2)
    'primary_image-fov_001_Z4_T3_C2.ome.tiff'
    >>> naming.json_filename(0)
    'primary_image-fov_000.json'
    """

    name = "standard"

    def __init__(self, root: str = "primary_image-fov"):
        self.root = root

    def tile_filename(self, fov, z, t, c):
        return f"{self.root}_{fov:03d}_Z{z}_T{t}_C{c}.ome.tiff"

    def tile_pattern(self, fov):
        return f"{self.root}_{fov:03d}_Z%z_T%t_C%c.ome.tiff"

    def companion_filename(self, fov):
        return f"{self.root}_{fov:03d}.companion.ome"

    def json_filename(self, fov):
        return f"{self.root}_{fov:03d}.json"

    def manifest_filename(self):
        return f"{self.root}.json"


NAMING_SCHEMES: Dict[str, Type[NamingScheme]] = {
    StandardNaming.name: StandardNaming,
}


def get_naming(name: str) -> NamingScheme:
    """Instantiate a naming scheme by id.

    Raises
    ------
    UsageFailure
        If no scheme is registered under ``name``.
    """
    try:
        return NAMING_SCHEMES[name]()
    except KeyError:
        known = ", ".join(sorted(NAMING_SCHEMES))
        raise UsageFailure(f"unknown naming scheme: {name} (choose from: {known})") from None
