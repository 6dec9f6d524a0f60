"""Base Pydantic models with strict defaults for fovtool.

Configuration schemas inherit from FovBaseModel; the JSON documents written
to the output fileset inherit from DocumentModel.
"""

from pydantic import BaseModel, ConfigDict


class FovBaseModel(BaseModel):
    """Base model for all fovtool configuration schemas.

    Enforces strict validation:
    - No extra fields allowed
    - Validates assignments after initialization
    - Strips whitespace from strings
    """

    model_config = ConfigDict(
        extra='forbid',           # Reject unknown fields
        validate_assignment=True, # Validate on field mutation
        use_enum_values=True,     # Convert enums to values
        str_strip_whitespace=True,# Strip whitespace from strings
    )


class DocumentModel(BaseModel):
    """Base model for output documents. Immutable once built."""

    model_config = ConfigDict(
        extra='forbid',
        frozen=True,
    )
