"""Layered configuration resolution.

``resolve_config()`` is the only way runtime configuration is produced. It
overlays the command-line values on the expert defaults and validates the
result into the frozen InternalConfig.

Layers, later ones win:

1. ParamConfig (expert defaults, complete)
2. CLIConfig (only the flags actually given)
"""

from typing import Optional, Type, TypeVar, Union

from pydantic import BaseModel

from fovtool.schemas.cli import CLIConfig
from fovtool.schemas.internal import InternalConfig
from fovtool.schemas.param import ParamConfig

ModelT = TypeVar("ModelT", bound=BaseModel)


def deep_merge(base: dict, *overrides: dict) -> dict:
    """Overlay ``overrides`` on ``base`` without mutating either.

    Mappings present on both sides are merged key by key; any other value
    from a later mapping replaces the earlier one.

    Examples
    --------
    >>> deep_merge({"logging": {"level": "INFO", "file": None}}, {"logging": {"level": "DEBUG"}})
    {'logging': {'level': 'DEBUG', 'file': None}}
    """
    merged = dict(base)
    for layer in overrides:
        for key, value in layer.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                value = deep_merge(current, value)
            merged[key] = value
    return merged


def _as_model(model_cls: Type[ModelT], value) -> ModelT:
    """Validate ``value`` into ``model_cls`` unless it already is one."""
    if isinstance(value, model_cls):
        return value
    return model_cls.model_validate(value or {})


def resolve_config(
    param_cfg: Union[dict, ParamConfig],
    cli_cfg: Optional[Union[dict, CLIConfig]] = None,
) -> InternalConfig:
    """Build the runtime configuration of one run.

    Parameters
    ----------
    param_cfg : dict or ParamConfig
        Expert defaults.
    cli_cfg : dict or CLIConfig, optional
        Command-line overrides. None means no overrides.

    Returns
    -------
    InternalConfig
        Validated and frozen.

    Raises
    ------
    pydantic.ValidationError
        If a layer or the merged result is invalid.

    Examples
    --------
    >>> config = resolve_config(ParamConfig(), CLIConfig(workers=4, output="out"))
    >>> (config.workers, config.naming, config.action)
    (4, 'standard', 'convert')
    """
    param = _as_model(ParamConfig, param_cfg)
    cli = _as_model(CLIConfig, cli_cfg)

    merged = deep_merge(param.model_dump(), cli.to_internal_overrides())
    return InternalConfig.model_validate(merged)
