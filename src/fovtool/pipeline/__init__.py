"""Pipeline modules.

- resolver: input -> FOV assignments
- tiles: per-FOV tile manifests
- converter: tile and companion writing
- experiment: aggregate fileset documents
- orchestrator: concurrent conversion controller
"""

from fovtool.pipeline.converter import ConversionStats, InstrumentedTileWriter, TileWriter, convert_series
from fovtool.pipeline.experiment import ExperimentWriter
from fovtool.pipeline.orchestrator import ConversionOrchestrator, RunResult
from fovtool.pipeline.resolver import FOVAssignment, resolve_source, resolve_sources
from fovtool.pipeline.tiles import build_fov_manifest, write_fov_manifest

__all__ = [
    "ConversionOrchestrator",
    "RunResult",
    "ConversionStats",
    "InstrumentedTileWriter",
    "TileWriter",
    "convert_series",
    "ExperimentWriter",
    "FOVAssignment",
    "resolve_source",
    "resolve_sources",
    "build_fov_manifest",
    "write_fov_manifest",
]
