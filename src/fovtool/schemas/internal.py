"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and immutable.
"""

from typing import Literal, Optional

from pydantic import ConfigDict, Field

from fovtool.schemas.base import FovBaseModel


class InternalLoggingConfig(FovBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    file: Optional[str]


class InternalOutputConfig(FovBaseModel):
    """Runtime output configuration."""
    json_indent: int
    tile_compression: Optional[Literal["zlib", "lzw", "zstd"]]


class InternalConfig(FovBaseModel):
    """Authoritative runtime configuration.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.workers = config.workers  # NOT .get()

    Notes
    -----
    ``fov_offset`` and ``inputs`` are deliberately unconstrained here: their
    checks map to dedicated exit codes and are done by the validation stage
    of the CLI, not by pydantic.
    """

    inputs: list[str]
    output: Optional[str]
    fov_offset: int
    series: Optional[int] = Field(ge=0)
    workers: int = Field(ge=1)
    naming: str
    write_tiles: bool
    format: Optional[str]
    codebook: Optional[str]
    action: Literal["convert", "info", "guess"]
    logging: InternalLoggingConfig
    output_options: InternalOutputConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
