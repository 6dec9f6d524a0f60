"""`fovtool` - convert microscopy datasets into FOV-indexed filesets.

Subpackages:
- backends: Imaging backends (fake datasets, bioio)
- pipeline: FOV resolution, tile manifests, conversion, orchestration
- schemas: Configuration and output document models
- contracts: Failure taxonomy and stage contracts
- cli: Command-line entry point
"""

__version__ = "0.1.0"
