"""Dataset metadata summary for ``--info``.

One row per series of every input, as a pandas DataFrame.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from fovtool.backends import ImageSource, open_source

__all__ = ['series_table', 'dataset_info', 'format_info']

logger = logging.getLogger(__name__)

INFO_COLUMNS = [
    "file", "series", "plates", "wells",
    "size_x", "size_y", "size_z", "size_c", "size_t",
    "pixel_type", "dimension_order",
    "position_x", "position_y", "position_z",
]


def series_table(source: ImageSource) -> pd.DataFrame:
    """Metadata of every series of an opened source.

    Positions are those of the first plane, in micrometers; NaN when the
    backend reports none or the unit has no physical scale.
    """
    plates = source.plate_count
    wells = source.well_count(0) if plates > 0 else 0

    rows = []
    for series in range(source.series_count):
        dims = source.series_dims(series)
        position = source.plane_position(series, 0)
        row = {
            "file": source.path.name,
            "series": series,
            "plates": plates,
            "wells": wells,
            "size_x": dims.size_x,
            "size_y": dims.size_y,
            "size_z": dims.size_z,
            "size_c": dims.size_c,
            "size_t": dims.size_t,
            "pixel_type": dims.pixel_type,
            "dimension_order": dims.dimension_order,
        }
        for axis, length in (("x", position.x), ("y", position.y), ("z", position.z)):
            value = length.to_micrometers() if length is not None else None
            row[f"position_{axis}"] = value if value is not None else np.nan
        rows.append(row)

    return pd.DataFrame(rows, columns=INFO_COLUMNS)


def dataset_info(paths: Sequence, format: Optional[str] = None) -> pd.DataFrame:
    """Concatenated series tables of all inputs."""
    tables = []
    for path in paths:
        with open_source(path, format) as source:
            tables.append(series_table(source))
        logger.debug("Read metadata of %s", Path(path).name)
    if not tables:
        return pd.DataFrame(columns=INFO_COLUMNS)
    return pd.concat(tables, ignore_index=True)


def format_info(table: pd.DataFrame) -> str:
    """Render the table for the terminal."""
    return table.to_string(index=False, na_rep="-")
