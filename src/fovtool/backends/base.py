"""Imaging backend interface.

An ImageSource is one opened input. It reports the screening structure
(plates, wells), the series it contains, the pixel dimensions of the active
series, and per-plane physical positions. Sources are not thread-safe: each
worker opens its own.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

import numpy as np

from fovtool.contracts import UsageFailure

__all__ = ['Length', 'PlanePosition', 'SeriesDims', 'ImageSource']


# Factors to micrometers. Units missing here ("reference frame", "pixel")
# have no physical scale.
UNIT_TO_MICROMETERS: Dict[str, float] = {
    "km": 1e9,
    "m": 1e6,
    "dm": 1e5,
    "cm": 1e4,
    "mm": 1e3,
    "µm": 1.0,
    "um": 1.0,
    "micron": 1.0,
    "micrometer": 1.0,
    "nm": 1e-3,
    "pm": 1e-6,
    "Å": 1e-4,
    "angstrom": 1e-4,
}


@dataclass(frozen=True)
class Length:
    """A length with its unit as reported by the backend."""
    value: float
    unit: str = "µm"

    def to_micrometers(self) -> Optional[float]:
        """Return the value in micrometers, or None if the unit is not convertible."""
        factor = UNIT_TO_MICROMETERS.get(self.unit.strip())
        if factor is None:
            factor = UNIT_TO_MICROMETERS.get(self.unit.strip().lower())
        if factor is None:
            return None
        return float(self.value) * factor


@dataclass(frozen=True)
class PlanePosition:
    """Stage position of one plane. Any axis may be unknown."""
    x: Optional[Length] = None
    y: Optional[Length] = None
    z: Optional[Length] = None

    def axis(self, name: str) -> Optional[Length]:
        """Look up an axis by coordinate name (``xc``, ``yc`` or ``zc``)."""
        try:
            return {"xc": self.x, "yc": self.y, "zc": self.z}[name]
        except KeyError:
            raise ValueError(f"unknown coordinate axis: {name}") from None


@dataclass(frozen=True)
class SeriesDims:
    """Pixel dimensions of one series."""
    size_x: int
    size_y: int
    size_z: int = 1
    size_c: int = 1
    size_t: int = 1
    dimension_order: str = "XYZCT"
    pixel_type: str = "uint8"

    @property
    def plane_count(self) -> int:
        return self.size_z * self.size_c * self.size_t


class ImageSource(ABC):
    """One input dataset opened against an imaging backend.

    Subclasses implement the metadata queries; this base class provides
    series selection and plane index arithmetic. Use as a context manager
    so the backend handle is released::

        with open_source(path) as source:
            source.set_series(1)
            print(source.size_z)
    """

    format_name: str = "unknown"

    def __init__(self, path):
        self.path = Path(path)
        self._series = 0

    # -- structure -----------------------------------------------------------

    @property
    @abstractmethod
    def plate_count(self) -> int:
        """Number of plates; 0 for datasets without screening structure."""

    @abstractmethod
    def well_count(self, plate: int) -> int:
        """Number of wells in ``plate``."""

    @property
    @abstractmethod
    def series_count(self) -> int:
        """Number of series (images) in the dataset."""

    @abstractmethod
    def series_dims(self, series: int) -> SeriesDims:
        """Pixel dimensions of ``series``."""

    @abstractmethod
    def plane_position(self, series: int, plane: int) -> PlanePosition:
        """Physical position of plane ``plane`` of ``series``."""

    @abstractmethod
    def read_plane(self, z: int, c: int, t: int) -> np.ndarray:
        """Pixel data of one plane of the active series, shaped (Y, X)."""

    def close(self) -> None:
        """Release the backend handle."""

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    # -- active series -------------------------------------------------------

    @property
    def series(self) -> int:
        return self._series

    def set_series(self, series: int) -> None:
        if not 0 <= series < self.series_count:
            raise UsageFailure(
                f"series {series} out of range for {self.path} (count={self.series_count})"
            )
        self._series = series

    @property
    def dims(self) -> SeriesDims:
        return self.series_dims(self._series)

    @property
    def size_x(self) -> int:
        return self.dims.size_x

    @property
    def size_y(self) -> int:
        return self.dims.size_y

    @property
    def size_z(self) -> int:
        return self.dims.size_z

    @property
    def size_c(self) -> int:
        return self.dims.size_c

    @property
    def size_t(self) -> int:
        return self.dims.size_t

    @property
    def pixel_type(self) -> str:
        return self.dims.pixel_type

    # -- plane arithmetic ----------------------------------------------------

    def plane_index(self, z: int, c: int, t: int) -> int:
        """Rasterized plane index of (z, c, t) for the active series.

        The dimension order lists axes innermost first, so for ``XYZCT``
        the index is ``z + size_z * (c + size_c * t)``.
        """
        dims = self.dims
        sizes = {"Z": dims.size_z, "C": dims.size_c, "T": dims.size_t}
        position = {"Z": z, "C": c, "T": t}
        for axis, value in position.items():
            if not 0 <= value < sizes[axis]:
                raise ValueError(f"{axis}={value} out of range (size={sizes[axis]})")

        index, stride = 0, 1
        for axis in dims.dimension_order[2:]:
            index += position[axis] * stride
            stride *= sizes[axis]
        return index

    def plane_zct(self, plane: int, series: Optional[int] = None) -> Tuple[int, int, int]:
        """Inverse of plane_index(): (z, c, t) of a rasterized plane index.

        Uses the active series unless ``series`` is given.
        """
        dims = self.dims if series is None else self.series_dims(series)
        if not 0 <= plane < dims.plane_count:
            raise ValueError(f"plane {plane} out of range (count={dims.plane_count})")
        sizes = {"Z": dims.size_z, "C": dims.size_c, "T": dims.size_t}
        position = {}
        for axis in dims.dimension_order[2:]:
            position[axis] = plane % sizes[axis]
            plane //= sizes[axis]
        return position["Z"], position["C"], position["T"]
