"""ParamConfig: Expert defaults for fovtool.

Complete default configuration. Every tunable parameter has a default here;
runtime code never defines fallback values of its own.

Runtime code NEVER reads from ParamConfig directly - it only receives
InternalConfig.
"""

import os
from typing import Literal, Optional

from pydantic import Field, field_validator

from fovtool.schemas.base import FovBaseModel


LOGLEVEL_ENV = "FOVTOOL_LOGLEVEL"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _default_log_level() -> str:
    level = os.environ.get(LOGLEVEL_ENV, "WARNING").strip().upper()
    # "warn" is accepted as a shorthand
    return "WARNING" if level == "WARN" else level


class LoggingConfig(FovBaseModel):
    """Logging configuration."""
    level: LogLevel = Field(default_factory=_default_log_level)
    file: Optional[str] = None

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        """Accept lowercase level names."""
        if isinstance(v, str):
            v = v.strip().upper()
            return "WARNING" if v == "WARN" else v
        return v


class OutputConfig(FovBaseModel):
    """Output file configuration."""
    json_indent: int = Field(2, ge=0)
    tile_compression: Optional[Literal["zlib", "lzw", "zstd"]] = None


class ParamConfig(FovBaseModel):
    """Complete expert configuration with all defaults.

    Usage
    -----
    Not used directly by runtime code. It is the base layer in config
    resolution:

        internal_cfg = resolve_config(param_cfg, cli_cfg)
    """

    inputs: list[str] = Field(default_factory=list)
    output: Optional[str] = None
    fov_offset: int = 0
    series: Optional[int] = None
    workers: int = Field(1, ge=1, description="Worker pool size")
    naming: str = "standard"
    write_tiles: bool = True
    format: Optional[str] = None
    codebook: Optional[str] = None
    action: Literal["convert", "info", "guess"] = "convert"
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    output_options: OutputConfig = Field(default_factory=OutputConfig)

    @field_validator("naming", mode="before")
    @classmethod
    def normalize_naming(cls, v):
        """Naming scheme ids are lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v
