"""Tile manifest builder.

Builds the per-FOV manifest: one TileDescriptor per (z, t, c) combination of
the FOV's series, enumerated z outermost, then t, then c innermost. The same
order is used to name tile files, so a tile's file name and its indices are
derivable from each other.

The builder only reads backend metadata and tiles already on disk. It can be
re-run for a FOV at any time after conversion.
"""

import itertools
import logging
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

from fovtool.backends import ImageSource
from fovtool.contracts import assert_fov_manifest
from fovtool.naming import NamingScheme
from fovtool.pipeline.io import sha256_file, write_json
from fovtool.schemas.documents import (
    COORDINATE_AXES,
    MISSING_HASH,
    FOVManifest,
    TileDescriptor,
)

__all__ = ['iter_tiles', 'tile_coordinates', 'build_fov_manifest', 'write_fov_manifest']

logger = logging.getLogger(__name__)

# Placeholder for an unknown position. Downstream readers require numeric
# bounds, so a zero pair is written instead of null.
MISSING_COORDINATE = (0.0, 0.0)


def iter_tiles(size_z: int, size_t: int, size_c: int) -> Iterator[Tuple[int, int, int]]:
    """Yield (z, t, c) with z outermost and c innermost."""
    return itertools.product(range(size_z), range(size_t), range(size_c))


def tile_coordinates(source: ImageSource, z: int, c: int, t: int) -> Dict[str, Tuple[float, float]]:
    """Physical coordinates of one plane of the active series, in micrometers.

    Each axis is a (min, max) pair. A tile is a single plane, so both bounds
    are the plane position. Axes without a position convertible to
    micrometers get MISSING_COORDINATE.
    """
    plane = source.plane_index(z, c, t)
    position = source.plane_position(source.series, plane)

    coordinates = {}
    for axis in COORDINATE_AXES:
        length = position.axis(axis)
        value: Optional[float] = length.to_micrometers() if length is not None else None
        coordinates[axis] = (value, value) if value is not None else MISSING_COORDINATE
    return coordinates


def build_fov_manifest(
    source: ImageSource,
    fov: int,
    naming: NamingScheme,
    out_dir,
) -> FOVManifest:
    """Build the manifest of one FOV from its source's active series.

    Parameters
    ----------
    source : ImageSource
        Opened source with the FOV's series selected.
    fov : int
        Output FOV index.
    naming : NamingScheme
        Scheme used for tile and companion names.
    out_dir : str or Path
        Output directory. Tiles found there are hashed; missing tiles (as
        with ``--no-tiles``) get the MISSING_HASH sentinel.

    Returns
    -------
    FOVManifest
    """
    out_dir = Path(out_dir)
    size_x, size_y = source.size_x, source.size_y
    size_z, size_t, size_c = source.size_z, source.size_t, source.size_c
    tile_shape = (size_x, size_y)

    tiles = []
    for z, t, c in iter_tiles(size_z, size_t, size_c):
        filename = naming.tile_filename(fov, z, t, c)
        tile_path = out_dir / filename
        sha256 = sha256_file(tile_path) if tile_path.exists() else MISSING_HASH
        tiles.append(TileDescriptor(
            coordinates=tile_coordinates(source, z, c, t),
            file=filename,
            indices={"c": c, "r": t, "z": z},
            sha256=sha256,
            tile_shape=tile_shape,
        ))

    manifest = FOVManifest(
        default_tile_shape=tile_shape,
        extras={"OME": naming.companion_filename(fov)},
        shape={"c": size_c, "r": size_t, "z": size_z},
        tiles=tiles,
    )
    assert_fov_manifest(manifest, size_z, size_t, size_c)
    logger.debug("Built manifest for FOV %d: %d tiles", fov, len(tiles))
    return manifest


def write_fov_manifest(manifest: FOVManifest, fov: int, naming: NamingScheme,
                       out_dir, indent: int = 2) -> Path:
    """Write a FOV manifest under its per-FOV JSON name."""
    path = Path(out_dir) / naming.json_filename(fov)
    write_json(path, manifest.model_dump(mode="json"), indent=indent)
    return path
