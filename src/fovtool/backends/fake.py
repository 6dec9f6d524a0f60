"""Synthetic datasets described by their file name.

A fake dataset is an empty file whose name carries the dataset shape::

    image&sizeZ=5&sizeT=4&sizeC=3.fake
    image&plates=1&fields=2.fake

Per-series options (plane positions) live in an optional ``.fake.ini``
sidecar next to it, one section per series::

    [series_0]
    PositionX_0=444
    PositionY_0=555
    PositionXUnit_0=mm

Either the ``.fake`` file or its ``.fake.ini`` sidecar may be given as the
input. Pixel content is deterministic so converted tiles hash identically
between runs.
"""

import configparser
import logging
from pathlib import Path
from typing import Dict

import numpy as np

from fovtool.backends.base import ImageSource, Length, PlanePosition, SeriesDims
from fovtool.contracts import UsageFailure

__all__ = ['FakeImageSource', 'is_fake_path', 'fake_path_for']

logger = logging.getLogger(__name__)

FAKE_SUFFIX = ".fake"
INI_SUFFIX = ".ini"

DEFAULTS = {
    "sizeX": 512,
    "sizeY": 512,
    "sizeZ": 1,
    "sizeC": 1,
    "sizeT": 1,
    "series": 1,
    "plates": 0,
    "plateRows": 1,
    "plateCols": 1,
    "fields": 1,
    "plateAcqs": 1,
}
DEFAULT_PIXEL_TYPE = "uint8"
DEFAULT_DIMENSION_ORDER = "XYZCT"
DEFAULT_POSITION_UNIT = "µm"


def is_fake_path(path) -> bool:
    name = Path(path).name
    return name.endswith(FAKE_SUFFIX) or name.endswith(FAKE_SUFFIX + INI_SUFFIX)


def fake_path_for(path) -> Path:
    """The ``.fake`` file belonging to ``path`` (which may be the sidecar)."""
    path = Path(path)
    if path.name.endswith(FAKE_SUFFIX + INI_SUFFIX):
        return path.with_name(path.name[:-len(INI_SUFFIX)])
    return path


def parse_fake_name(name: str) -> Dict[str, str]:
    """Split ``image&key=value&....fake`` into its options.

    Tokens without ``=`` (the leading image name, random suffixes added by
    temporary file creation) are ignored.
    """
    if name.endswith(FAKE_SUFFIX + INI_SUFFIX):
        name = name[:-len(INI_SUFFIX)]
    if name.endswith(FAKE_SUFFIX):
        name = name[:-len(FAKE_SUFFIX)]

    options = {}
    for token in name.split("&"):
        if "=" not in token:
            continue
        key, value = token.split("=", 1)
        options[key.strip()] = value.strip()
    return options


class FakeImageSource(ImageSource):
    """ImageSource for synthetic ``.fake`` datasets."""

    format_name = "fake"

    def __init__(self, path):
        super().__init__(path)
        fake = fake_path_for(path)
        options = parse_fake_name(fake.name)

        self._sizes = {}
        for key, default in DEFAULTS.items():
            try:
                self._sizes[key] = int(options.get(key, default))
            except ValueError:
                raise UsageFailure(f"invalid fake option {key}={options[key]!r} in {fake.name}") from None
        self._pixel_type = options.get("pixelType", DEFAULT_PIXEL_TYPE)
        self._dimension_order = options.get("dimOrder", DEFAULT_DIMENSION_ORDER).upper()
        self._series_options = self._read_ini(fake.with_name(fake.name + INI_SUFFIX))

        logger.debug("Opened fake dataset %s: %s", fake.name, self._sizes)

    @staticmethod
    def _read_ini(ini_path: Path) -> Dict[int, Dict[str, str]]:
        if not ini_path.exists():
            return {}
        parser = configparser.ConfigParser()
        parser.optionxform = str  # keys are case sensitive
        parser.read(ini_path, encoding="utf-8")
        per_series = {}
        for section in parser.sections():
            if not section.startswith("series_"):
                continue
            per_series[int(section[len("series_"):])] = dict(parser[section])
        return per_series

    @property
    def plate_count(self) -> int:
        return self._sizes["plates"]

    def well_count(self, plate: int) -> int:
        if not 0 <= plate < self.plate_count:
            return 0
        return self._sizes["plateRows"] * self._sizes["plateCols"]

    @property
    def series_count(self) -> int:
        if self.plate_count > 0:
            return (self.plate_count * self._sizes["plateAcqs"]
                    * self.well_count(0) * self._sizes["fields"])
        return self._sizes["series"]

    def series_dims(self, series: int) -> SeriesDims:
        return SeriesDims(
            size_x=self._sizes["sizeX"],
            size_y=self._sizes["sizeY"],
            size_z=self._sizes["sizeZ"],
            size_c=self._sizes["sizeC"],
            size_t=self._sizes["sizeT"],
            dimension_order=self._dimension_order,
            pixel_type=self._pixel_type,
        )

    def plane_position(self, series: int, plane: int) -> PlanePosition:
        options = self._series_options.get(series, {})
        lengths = {}
        for axis in ("X", "Y", "Z"):
            value = options.get(f"Position{axis}_{plane}")
            if value is None:
                lengths[axis] = None
                continue
            unit = options.get(f"Position{axis}Unit_{plane}", DEFAULT_POSITION_UNIT)
            lengths[axis] = Length(float(value), unit)
        return PlanePosition(x=lengths["X"], y=lengths["Y"], z=lengths["Z"])

    def read_plane(self, z: int, c: int, t: int) -> np.ndarray:
        plane = self.plane_index(z, c, t)
        dtype = np.dtype(self._pixel_type)
        # horizontal gradient, shifted per plane and series
        ramp = np.arange(self.size_x, dtype=np.int64) + plane * 17 + self.series * 31
        if dtype.kind in "ui" and dtype.itemsize < 8:
            ramp %= np.iinfo(dtype).max + 1
        row = ramp.astype(dtype)
        return np.broadcast_to(row, (self.size_y, self.size_x)).copy()
