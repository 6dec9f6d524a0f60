"""Series to tile-set conversion.

Writes one single-plane OME-TIFF per (z, t, c) of a series plus a companion
OME-XML file describing all of them. Each tile only carries a BinaryOnly
reference to the companion; the companion holds the full metadata, including
plane positions in micrometers.

Writing is done by a TileWriter. Instrumentation wraps the writer instead of
subclassing it: InstrumentedTileWriter calls a hook after every tile write,
and stats_hook() feeds a per-task ConversionStats accumulator that the
orchestrator reduces after all tasks are collected.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import numpy as np
import tifffile
from ome_types.model import OME, Image, Pixels, Plane, TiffData

from fovtool.backends import ImageSource
from fovtool.naming import NamingScheme
from fovtool.pipeline.tiles import iter_tiles

__all__ = [
    'ConversionStats',
    'TileWriter',
    'InstrumentedTileWriter',
    'stats_hook',
    'convert_series',
]

logger = logging.getLogger(__name__)

# Namespace for deterministic UUIDs, so identical inputs give byte-identical
# tiles (and therefore identical hashes) on every run.
FOVTOOL_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "fovtool")

# numpy dtype name -> OME pixel type
OME_PIXEL_TYPES = {
    "float32": "float",
    "float64": "double",
}


@dataclass
class ConversionStats:
    """Write counters of one task. Not shared between threads."""
    calls: int = 0
    bytes: int = 0
    elapsed: float = 0.0  # seconds

    def record(self, nbytes: int, elapsed: float) -> None:
        self.calls += 1
        self.bytes += nbytes
        self.elapsed += elapsed

    def merge(self, other: "ConversionStats") -> "ConversionStats":
        return ConversionStats(
            calls=self.calls + other.calls,
            bytes=self.bytes + other.bytes,
            elapsed=self.elapsed + other.elapsed,
        )

    @property
    def throughput(self) -> float:
        """Average write speed in MB/s."""
        if self.elapsed <= 0:
            return 0.0
        return self.bytes / self.elapsed / 1e6


class TileWriter:
    """Writes single-plane TIFF tiles with tifffile."""

    def __init__(self, compression: Optional[str] = None):
        self.compression = compression

    def write(self, path: Path, plane: np.ndarray, description: str) -> int:
        tifffile.imwrite(
            path,
            plane,
            photometric="minisblack",
            description=description,
            metadata=None,
            ome=False,
            compression=self.compression,
        )
        return plane.nbytes


WriteHook = Callable[[Path, int, float], None]


class InstrumentedTileWriter:
    """Wraps a writer and calls ``hook(path, nbytes, seconds)`` after each write.

    The hook also runs when the write fails, so timing covers every attempt.
    """

    def __init__(self, writer: TileWriter, hook: WriteHook):
        self.writer = writer
        self.hook = hook

    def write(self, path: Path, plane: np.ndarray, description: str) -> int:
        start = time.perf_counter()
        try:
            return self.writer.write(path, plane, description)
        finally:
            self.hook(Path(path), plane.nbytes, time.perf_counter() - start)


def stats_hook(stats: ConversionStats) -> WriteHook:
    """Hook recording into ``stats`` and logging one progress line per write."""
    def _hook(path: Path, nbytes: int, elapsed: float) -> None:
        stats.record(nbytes, elapsed)
        logger.debug(
            "> write([%04d]) to %s: %8d bytes in %4d ms (Avg. %5.3f MB/s)",
            stats.calls, path.name, nbytes, int(elapsed * 1000), stats.throughput,
        )
    return _hook


def _urn(name: str) -> str:
    return f"urn:uuid:{uuid.uuid5(FOVTOOL_NAMESPACE, name)}"


def _binary_only_xml(tile_uuid: str, companion: str, companion_uuid: str) -> str:
    ome = OME(
        uuid=tile_uuid,
        binary_only={"metadata_file": companion, "uuid": companion_uuid},
    )
    return ome.to_xml()


def _plane(source: ImageSource, z: int, c: int, t: int) -> Plane:
    position = source.plane_position(source.series, source.plane_index(z, c, t))
    fields = {"the_z": z, "the_c": c, "the_t": t}
    for axis, length in (("x", position.x), ("y", position.y), ("z", position.z)):
        value = length.to_micrometers() if length is not None else None
        if value is not None:
            fields[f"position_{axis}"] = value
            fields[f"position_{axis}_unit"] = "µm"
    return Plane(**fields)


def build_companion(
    source: ImageSource,
    tiles: List[Tuple[int, int, int, str, str]],
    companion_uuid: str,
) -> OME:
    """OME metadata for the active series of ``source``.

    Parameters
    ----------
    source : ImageSource
        Source with the converted series selected.
    tiles : list of (z, t, c, file name, uuid)
        Tiles written for the series.
    companion_uuid : str
        UUID of the companion document itself.
    """
    dims = source.dims
    tiff_data = [
        TiffData(
            first_z=z, first_t=t, first_c=c, ifd=0, plane_count=1,
            uuid={"value": tile_uuid, "file_name": filename},
        )
        for z, t, c, filename, tile_uuid in tiles
    ]
    planes = [_plane(source, z, c, t) for z, t, c, _, _ in tiles]
    pixels = Pixels(
        id="Pixels:0",
        dimension_order=dims.dimension_order,
        type=OME_PIXEL_TYPES.get(dims.pixel_type, dims.pixel_type),
        size_x=dims.size_x,
        size_y=dims.size_y,
        size_z=dims.size_z,
        size_c=dims.size_c,
        size_t=dims.size_t,
        tiff_data_blocks=tiff_data,
        planes=planes,
    )
    image = Image(id="Image:0", name=f"{source.path.name} #{source.series}", pixels=pixels)
    return OME(uuid=companion_uuid, images=[image])


def convert_series(
    source: ImageSource,
    series: int,
    out_dir,
    tile_pattern: str,
    companion: str,
    writer,
) -> bool:
    """Convert one series into tiles plus a companion file.

    Parameters
    ----------
    source : ImageSource
        Opened source. The series is selected by this call.
    series : int
        Series to convert.
    out_dir : str or Path
        Existing output directory.
    tile_pattern : str
        Tile file name pattern with ``%z``, ``%t`` and ``%c`` placeholders.
    companion : str
        Companion file name.
    writer : TileWriter or InstrumentedTileWriter
        Writes the tiles.

    Returns
    -------
    bool
        True on success. Write failures are logged and reported as False.
    """
    source.set_series(series)
    out_dir = Path(out_dir)
    companion_uuid = _urn(companion)

    written = []
    try:
        for z, t, c in iter_tiles(source.size_z, source.size_t, source.size_c):
            filename = NamingScheme.expand_pattern(tile_pattern, z, t, c)
            tile_uuid = _urn(f"{companion}/{filename}")
            plane = source.read_plane(z, c, t)
            writer.write(out_dir / filename, plane,
                         _binary_only_xml(tile_uuid, companion, companion_uuid))
            written.append((z, t, c, filename, tile_uuid))

        ome = build_companion(source, written, companion_uuid)
        (out_dir / companion).write_text(ome.to_xml(), encoding="utf-8")
    except (OSError, ValueError):
        logger.exception("Conversion failed: %s series %d", source.path.name, series)
        return False

    logger.info("Converted %s series %d: %d tiles", source.path.name, series, len(written))
    return True
