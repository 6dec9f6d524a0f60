"""CLIConfig: Command-line overrides.

Holds the values parsed by argparse. Every field is optional; only the
fields actually given on the command line override ParamConfig.
"""

from typing import Literal, Optional

from pydantic import field_validator, model_validator

from fovtool.schemas.base import FovBaseModel


class CLIConfig(FovBaseModel):
    """Command-line configuration overrides.

    Highest priority in config resolution.

    Notes
    -----
    ``action`` is derived from the flags (schema responsibility, not
    runtime): ``--info`` wins over ``--guess``, which wins over a plain
    conversion. It stays None when no action was requested at all, so the
    caller can report that as a usage error.

    Usage
    -----
        cli_cfg = CLIConfig(inputs=["plate.fake"], output="out", workers=4)
        internal = resolve_config(param_cfg, cli_cfg)
    """

    inputs: Optional[list[str]] = None
    output: Optional[str] = None
    fov_offset: Optional[int] = None
    series: Optional[int] = None
    workers: Optional[int] = None
    naming: Optional[str] = None
    no_tiles: bool = False
    format: Optional[str] = None
    codebook: Optional[str] = None
    info: bool = False
    guess: bool = False
    action: Optional[Literal["convert", "info", "guess"]] = None
    log_level: Optional[str] = None
    log_file: Optional[str] = None

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lowercase level names and ``warn``."""
        if isinstance(v, str):
            v = v.strip().upper()
            return "WARNING" if v == "WARN" else v
        return v

    @model_validator(mode="after")
    def infer_action_from_flags(self):
        """Pick the action from --info / --guess / -o."""
        if self.action is None:
            if self.info:
                self.action = "info"
            elif self.guess:
                self.action = "guess"
            elif self.output is not None:
                self.action = "convert"
        return self

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        for key in ("inputs", "output", "fov_offset", "series", "workers",
                    "naming", "format", "codebook", "action"):
            value = getattr(self, key)
            if value is not None:
                overrides[key] = value

        if self.no_tiles:
            overrides["write_tiles"] = False

        logging_overrides = {}
        if self.log_level is not None:
            logging_overrides["level"] = self.log_level
        if self.log_file is not None:
            logging_overrides["file"] = self.log_file
        if logging_overrides:
            overrides["logging"] = logging_overrides

        return overrides
