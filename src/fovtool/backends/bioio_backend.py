"""Real microscopy files through bioio.

Scenes are exposed as series. Screening structure (plates, wells) and plane
positions come from the reader's OME metadata; readers that cannot produce
OME metadata report no plates and no positions.
"""

import logging
from typing import Optional

import numpy as np
from bioio import BioImage
from bioio_base.exceptions import UnsupportedFileFormatError

from fovtool.backends.base import ImageSource, Length, PlanePosition, SeriesDims
from fovtool.contracts import UnknownFormat

__all__ = ['BioImageSource']

logger = logging.getLogger(__name__)


class BioImageSource(ImageSource):
    """ImageSource backed by ``bioio.BioImage``.

    Parameters
    ----------
    path : str or Path
        Main input file. Related files are grouped by the reader.
    reader : type, optional
        bioio reader class to force. Auto-detected by bioio when None.
    """

    format_name = "bioio"

    def __init__(self, path, reader: Optional[type] = None):
        super().__init__(path)
        try:
            if reader is not None:
                self._image = BioImage(str(path), reader=reader)
            else:
                self._image = BioImage(str(path))
        except UnsupportedFileFormatError:
            raise UnknownFormat(f"{self.path.name} (no installed bioio reader supports it)") from None
        self._ome = self._load_ome()

    def _load_ome(self):
        try:
            return self._image.ome_metadata
        except NotImplementedError:
            logger.debug("Reader for %s has no OME metadata; no plates or positions", self.path.name)
            return None

    @property
    def plate_count(self) -> int:
        if self._ome is None:
            return 0
        return len(self._ome.plates)

    def well_count(self, plate: int) -> int:
        if self._ome is None or not 0 <= plate < len(self._ome.plates):
            return 0
        return len(self._ome.plates[plate].wells)

    @property
    def series_count(self) -> int:
        return len(self._image.scenes)

    def set_series(self, series: int) -> None:
        super().set_series(series)
        self._image.set_scene(series)

    def _dimension_order(self, series: int) -> str:
        if self._ome is not None and series < len(self._ome.images):
            order = self._ome.images[series].pixels.dimension_order
            return getattr(order, "value", str(order))
        return "XYZCT"

    def series_dims(self, series: int) -> SeriesDims:
        if series != self._series:
            self._image.set_scene(series)
        try:
            dims = self._image.dims
            return SeriesDims(
                size_x=dims.X,
                size_y=dims.Y,
                size_z=dims.Z,
                size_c=dims.C,
                size_t=dims.T,
                dimension_order=self._dimension_order(series),
                pixel_type=str(self._image.dtype),
            )
        finally:
            if series != self._series:
                self._image.set_scene(self._series)

    def plane_position(self, series: int, plane: int) -> PlanePosition:
        if self._ome is None or series >= len(self._ome.images):
            return PlanePosition()
        z, c, t = self.plane_zct(plane, series)
        for candidate in self._ome.images[series].pixels.planes:
            if (candidate.the_z, candidate.the_c, candidate.the_t) == (z, c, t):
                return PlanePosition(
                    x=self._length(candidate.position_x, candidate.position_x_unit),
                    y=self._length(candidate.position_y, candidate.position_y_unit),
                    z=self._length(candidate.position_z, candidate.position_z_unit),
                )
        return PlanePosition()

    @staticmethod
    def _length(value, unit) -> Optional[Length]:
        if value is None:
            return None
        return Length(float(value), getattr(unit, "value", str(unit)))

    def read_plane(self, z: int, c: int, t: int) -> np.ndarray:
        return np.asarray(self._image.get_image_data("YX", Z=z, C=c, T=t))

    def close(self) -> None:
        self._image = None
        self._ome = None
