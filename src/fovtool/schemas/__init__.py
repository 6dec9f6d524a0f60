"""Pydantic schemas for fovtool.

Configuration is resolved in layers (ParamConfig < CLIConfig) into a single
immutable InternalConfig. The JSON documents of an output fileset are
modelled in ``documents``.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
CLIConfig : class
    Command-line overrides
"""

from fovtool.schemas.resolve import resolve_config
from fovtool.schemas.internal import InternalConfig
from fovtool.schemas.param import ParamConfig
from fovtool.schemas.cli import CLIConfig
from fovtool.schemas.documents import (
    CodebookEntry,
    DatasetManifest,
    ExperimentDescriptor,
    FOVManifest,
    TileDescriptor,
)

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'CLIConfig',
    'CodebookEntry',
    'DatasetManifest',
    'ExperimentDescriptor',
    'FOVManifest',
    'TileDescriptor',
]
