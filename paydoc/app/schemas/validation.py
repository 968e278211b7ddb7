"""
Field-validation schemas.

Defines the raw form input accepted from a presentation layer, the
normalized values produced when every field passes, and the field-scoped
error taxonomy used when they do not.

Validation errors are recoverable and collected. They are never raised.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations (FROZEN CONTRACTS)
# ---------------------------------------------------------------------------


class FieldErrorKind(str, Enum):
    """
    Reason a single field was rejected.
    """

    INVALID_FORMAT = "invalid_format"
    TOO_LONG = "too_long"
    INVALID_DATE = "invalid_date"
    NOT_IN_FUTURE = "not_in_future"
    MISSING_REQUIRED = "missing_required"


class FieldError(BaseModel):
    field: str
    kind: FieldErrorKind
    message: str

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Input / output transport objects
# ---------------------------------------------------------------------------


class RawPayFields(BaseModel):
    """
    Raw strings exactly as a form collected them.

    ``exp`` is a local wall-clock date/time (e.g. ``2026-10-20T09:30``).
    ``pin`` is the user secret; it is hashed during build and never
    stored.
    """

    amount: str = ""
    asset: str = ""
    network: str = ""
    exp: str = ""
    note: str = ""
    pin: str = Field("", repr=False)

    model_config = ConfigDict(frozen=True, extra="forbid")


class NormalizedFields(BaseModel):
    """
    Field values that passed validation and are ready for assembly.

    ``exp`` is absent (``None``) when no expiry was supplied.
    """

    amount: str
    asset: str
    network: str
    exp: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)


class ValidationReport(BaseModel):
    """
    Outcome of validating a complete set of raw fields.

    Exactly one of ``fields`` / ``errors`` is meaningful: ``fields`` is
    populated only when ``errors`` is empty.
    """

    fields: Optional[NormalizedFields] = None
    errors: Dict[str, FieldError] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def ok(self) -> bool:
        return not self.errors and self.fields is not None

    def error_map(self) -> Dict[str, dict]:
        """Field-keyed error body suitable for a presentation layer."""
        return {
            name: {"kind": err.kind.value, "message": err.message}
            for name, err in self.errors.items()
        }
