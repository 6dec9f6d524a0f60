"""Models for the JSON documents of an output fileset.

Field order follows the order in which keys appear in the written files.
"""

from typing import Dict, List, Optional, Tuple

from pydantic import Field

from fovtool.schemas.base import DocumentModel


FOV_MANIFEST_VERSION = "1.0.0"
DATASET_MANIFEST_VERSION = "0.0.0"
EXPERIMENT_VERSION = "5.0.0"

# r = round (time point), x/y = pixel axes, xc/yc/zc = physical coordinates
DIMENSIONS = ["r", "x", "y", "c", "z", "xc", "yc", "zc"]
COORDINATE_AXES = ("xc", "yc", "zc")

MISSING_HASH = "does-not-exist"
PLACEHOLDER_TARGET = "PLEASE_REPLACE_ME"


class TileDescriptor(DocumentModel):
    """One single-plane tile of a FOV."""
    coordinates: Dict[str, Tuple[float, float]]
    file: str
    indices: Dict[str, int]
    sha256: str
    tile_format: str = "TIFF"
    tile_shape: Tuple[int, int]


class FOVManifest(DocumentModel):
    """Per-FOV description: dimensions, shape and every tile."""
    default_tile_format: str = "TIFF"
    default_tile_shape: Tuple[int, int]
    dimensions: List[str] = Field(default_factory=lambda: list(DIMENSIONS))
    extras: Dict[str, str]
    shape: Dict[str, int]
    tiles: List[TileDescriptor]
    version: str = FOV_MANIFEST_VERSION


class DatasetManifest(DocumentModel):
    """Maps FOV keys to per-FOV JSON file names."""
    contents: Dict[str, str]
    extras: Optional[dict] = None
    version: str = DATASET_MANIFEST_VERSION


class ExperimentDescriptor(DocumentModel):
    """Top-level entry point of a fileset."""
    version: str = EXPERIMENT_VERSION
    extras: dict = Field(default_factory=dict)
    images: Dict[str, str]
    codebook: str = "codebook.json"


class CodebookEntry(DocumentModel):
    """Maps a code word (round, channel, value triples) to a target."""
    codeword: List[Dict[str, int]]
    target: str


def placeholder_codebook() -> List[CodebookEntry]:
    """Single-entry codebook to be replaced by the user."""
    return [CodebookEntry(codeword=[{"r": 0, "c": 0, "v": 1}], target=PLACEHOLDER_TARGET)]
