"""FOV resolution.

Turns the shape an imaging backend reports (plates, wells, series) plus the
user's selectors into the list of (source, series) -> output FOV bindings.

Rules, in precedence order, for each source:

1. Screening datasets (``plate_count > 0``) must be the only input of the
   run, hold exactly one plate and exactly one well. Every series becomes a
   FOV, numbered ``series + fov_offset``.
2. Other datasets yield exactly one FOV, numbered
   ``position_in_run + fov_offset``. A dataset with several series needs an
   explicit series selection.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from fovtool.backends import ImageSource
from fovtool.contracts import (
    MultipleSeries,
    SingleScreeningOnly,
    TooManyPlates,
    TooManyWells,
    UsageFailure,
    assert_unique_fovs,
)

__all__ = ['FOVAssignment', 'resolve_source', 'resolve_sources']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FOVAssignment:
    """One unit of conversion work: a series of an input mapped to an output FOV.

    Holds the input path rather than an open source so that every worker can
    open its own backend handle.
    """
    path: Path
    series: int
    fov: int
    format: Optional[str] = None


def resolve_source(
    source: ImageSource,
    position: int,
    input_count: int,
    explicit_series: Optional[int] = None,
    fov_offset: int = 0,
    format: Optional[str] = None,
) -> List[FOVAssignment]:
    """Resolve one opened source into its FOV assignments.

    Parameters
    ----------
    source : ImageSource
        Input opened against the backend. Not modified.
    position : int
        0-based position of the source among the run's inputs.
    input_count : int
        Number of inputs in the run.
    explicit_series : int, optional
        Series chosen with ``-s``. Ignored for screening datasets.
    fov_offset : int
        Base output FOV index.
    format : str, optional
        Backend format, carried into the assignments.

    Returns
    -------
    list of FOVAssignment
        One per series for screening datasets, otherwise exactly one.

    Raises
    ------
    SingleScreeningOnly, TooManyPlates, TooManyWells, MultipleSeries
        When the source cannot be mapped to FOVs unambiguously.
    """
    plate_count = source.plate_count
    series_count = source.series_count

    if plate_count > 0:
        # A screening dataset shares one coordinate system across its fields,
        # so every series becomes a FOV, as long as there is a single well.
        if input_count > 1:
            raise SingleScreeningOnly()
        if plate_count > 1:
            raise TooManyPlates(plate_count)
        well_count = source.well_count(0)
        if well_count != 1:
            raise TooManyWells(well_count)

        logger.info("%s: screening dataset, %d fields in one well",
                    source.path.name, series_count)
        return [
            FOVAssignment(source.path, series, series + fov_offset, format)
            for series in range(series_count)
        ]

    if series_count > 1 and explicit_series is None:
        raise MultipleSeries(source.path, series_count)

    series = explicit_series if explicit_series is not None else 0
    if not 0 <= series < series_count:
        raise UsageFailure(
            f"series {series} out of range for {source.path} (count={series_count})"
        )

    logger.info("%s: series %d -> FOV %d", source.path.name, series, position + fov_offset)
    return [FOVAssignment(source.path, series, position + fov_offset, format)]


def resolve_sources(
    sources: Sequence[ImageSource],
    explicit_series: Optional[int] = None,
    fov_offset: int = 0,
    format: Optional[str] = None,
) -> List[FOVAssignment]:
    """Resolve every source of a run, in input order.

    This is the synchronous public API, for callers that open all sources
    up front and want the complete worklist before converting anything. The
    first resolution error aborts the whole resolution. The orchestrator
    does not use it: it calls ``resolve_source()`` inside each discovery
    task so one bad input does not stop the others.
    """
    assignments = []
    for position, source in enumerate(sources):
        assignments.extend(resolve_source(
            source, position, len(sources), explicit_series, fov_offset, format
        ))
    assert_unique_fovs(a.fov for a in assignments)
    return assignments
