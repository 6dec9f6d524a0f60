"""Centralized failure taxonomy for fovtool.

Two tiers of failure exist:

- Usage errors: a closed set of named conditions, each with a fixed process
  exit code. They are raised during validation or FOV resolution and abort the
  affected unit of work (or the whole run, when raised before conversion).
- Contract violations: a pipeline stage did not produce what it promised.
  This is a bug, not bad input.

Conversion failures (a tile could not be written) are not exceptions at this
level; they are reported as a return code of 1 for the affected FOV.
"""

from enum import IntEnum


BANNER_WIDTH = 60


class ExitCode(IntEnum):
    """Process exit codes. Stable; scripts depend on them."""
    SUCCESS = 0
    INPUT_MISSING = 1
    USAGE = 2
    OUTPUT_EXISTS = 3
    MULTIPLE_SERIES = 4
    NEGATIVE_FOV = 5
    TOO_MANY_PLATES = 6
    TOO_MANY_WELLS = 7
    SINGLE_SCREENING_ONLY = 8
    PATTERN_SUFFIX = 9
    NEED_ACTION = 10
    UNKNOWN_FORMAT = 11


class UsageError(Exception):
    """Base class for all usage errors.

    Every subclass carries a fixed ``code`` and builds its own message from
    the fields it captures. Callers catch ``UsageError`` and use ``code`` as
    the process exit code.
    """
    code: ExitCode = ExitCode.USAGE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputMissing(UsageError):
    code = ExitCode.INPUT_MISSING

    def __init__(self, path):
        self.path = path
        super().__init__(f"input does not exist ({path})")


class UsageFailure(UsageError):
    """Generic usage failure, also used to wrap unexpected errors."""
    code = ExitCode.USAGE


class OutputExists(UsageError):
    code = ExitCode.OUTPUT_EXISTS

    def __init__(self, path):
        self.path = path
        super().__init__(f"output location already exists! ({path})")


class MultipleSeries(UsageError):
    code = ExitCode.MULTIPLE_SERIES

    def __init__(self, path, count: int):
        self.path = path
        self.count = count
        super().__init__(
            f"{path} contains multiple images (count={count}). Please choose one."
        )


class NegativeFOV(UsageError):
    code = ExitCode.NEGATIVE_FOV

    def __init__(self, fov: int):
        self.fov = fov
        super().__init__(f"FOV must be a greater than or equal to 0 ({fov})")


class TooManyPlates(UsageError):
    code = ExitCode.TOO_MANY_PLATES

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"Too many plates found (count={count})")


class TooManyWells(UsageError):
    code = ExitCode.TOO_MANY_WELLS

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"Too many wells found (count={count})")


class SingleScreeningOnly(UsageError):
    code = ExitCode.SINGLE_SCREENING_ONLY

    def __init__(self):
        super().__init__("only a single screening fileset is supported")


class PatternSuffix(UsageError):
    code = ExitCode.PATTERN_SUFFIX

    def __init__(self, path):
        self.path = path
        super().__init__(f"pattern files must end in '.pattern' ({path})")


class NeedAction(UsageError):
    code = ExitCode.NEED_ACTION

    def __init__(self):
        super().__init__("one of --output, --info, --guess required")


class UnknownFormat(UsageError):
    code = ExitCode.UNKNOWN_FORMAT

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown format: {name}")


def format_usage_error(error: UsageError) -> str:
    """Render a usage error the same way for every code.

    Parameters
    ----------
    error : UsageError
        Error to render.

    Returns
    -------
    str
        Multi-line block: banner, ``Error <code>: <message>``, banner.
    """
    banner = "=" * BANNER_WIDTH
    return f"{banner}\nError {int(error.code)}: {error.message}\n{banner}"


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    This indicates a bug in pipeline logic, not bad user input. It means a
    stage did not produce the invariants it promised (for example a FOV
    manifest whose tile count does not match the reported dimensions).

    Key distinction:
    - UsageError: user/input error with a stable exit code
    - ContractViolation: pipeline bug (programmer error)
    """
    pass
