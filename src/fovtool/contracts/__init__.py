"""Failure taxonomy and pipeline contracts.

Usage errors carry stable exit codes and describe bad input. Contracts fail
immediately when a pipeline stage does not produce its promised invariants.

Key principle:
- Pydantic validates config correctness
- Usage errors classify input the tool cannot handle
- Contracts validate pipeline correctness
"""

from fovtool.contracts.failure import (
    BANNER_WIDTH,
    ContractViolation,
    ExitCode,
    InputMissing,
    MultipleSeries,
    NeedAction,
    NegativeFOV,
    OutputExists,
    PatternSuffix,
    SingleScreeningOnly,
    TooManyPlates,
    TooManyWells,
    UnknownFormat,
    UsageError,
    UsageFailure,
    format_usage_error,
)
from fovtool.contracts.base import require
from fovtool.contracts.manifest import assert_fov_manifest, assert_unique_fovs

__all__ = [
    "BANNER_WIDTH",
    "ContractViolation",
    "ExitCode",
    "InputMissing",
    "MultipleSeries",
    "NeedAction",
    "NegativeFOV",
    "OutputExists",
    "PatternSuffix",
    "SingleScreeningOnly",
    "TooManyPlates",
    "TooManyWells",
    "UnknownFormat",
    "UsageError",
    "UsageFailure",
    "format_usage_error",
    "require",
    "assert_fov_manifest",
    "assert_unique_fovs",
]
