"""Contract enforcement.

Every contract check in fovtool goes through require().
"""

from fovtool.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Raise ContractViolation with ``message`` unless ``condition`` holds.

    Contracts guard the output of a stage, not user input; a failure means
    the stage is broken. There is no recovery path.

    Examples
    --------
    >>> require(len(manifest.tiles) == size_z * size_t * size_c, "tile count mismatch")
    """
    if not condition:
        raise ContractViolation(message)
