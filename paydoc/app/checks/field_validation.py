"""
Pay document field validation.

Each check classifies a single raw value independently. ``validate_all``
runs every check and collects all failures at once so that a caller can
present every problem in a single pass.

Checks return ``None`` when the value is acceptable, or the
``FieldErrorKind`` describing why it is not. Nothing here raises for bad
user input.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, tzinfo
from typing import Dict, Optional

from paydoc.app.checks.expiry import local_to_utc
from paydoc.app.schemas.pay_document import (
    AMOUNT_PATTERN,
    ASSET_PATTERN,
    NETWORK_PATTERN,
    NOTE_MAX_LENGTH,
)
from paydoc.app.schemas.validation import (
    FieldError,
    FieldErrorKind,
    NormalizedFields,
    RawPayFields,
    ValidationReport,
)
from paydoc.app.utils.text import is_utf8_encodable

logger = logging.getLogger(__name__)

_AMOUNT_RE = re.compile(AMOUNT_PATTERN)
_ASSET_RE = re.compile(ASSET_PATTERN)
_NETWORK_RE = re.compile(NETWORK_PATTERN)

REQUIRED_FIELDS = ("amount", "asset", "network")

_MESSAGES: Dict[tuple, str] = {
    ("amount", FieldErrorKind.INVALID_FORMAT): "Digits and a single decimal point only, e.g. 12.50.",
    ("asset", FieldErrorKind.INVALID_FORMAT): "2-10 uppercase letters or digits.",
    ("network", FieldErrorKind.INVALID_FORMAT): "2-64 characters (A-Z, a-z, 0-9, -).",
    ("note", FieldErrorKind.TOO_LONG): f"At most {NOTE_MAX_LENGTH} characters.",
    ("note", FieldErrorKind.INVALID_FORMAT): "Contains characters that cannot be encoded.",
    ("pin", FieldErrorKind.INVALID_FORMAT): "Contains characters that cannot be encoded.",
    ("exp", FieldErrorKind.INVALID_DATE): "Invalid date.",
    ("exp", FieldErrorKind.NOT_IN_FUTURE): "Expiry must be in the future.",
}


def _message(field: str, kind: FieldErrorKind) -> str:
    if kind is FieldErrorKind.MISSING_REQUIRED:
        return f"{field} is required."
    return _MESSAGES[(field, kind)]


# ------------------------------------------------------------------
# Single-field checks
# ------------------------------------------------------------------


def validate_amount(raw: str) -> Optional[FieldErrorKind]:
    if _AMOUNT_RE.fullmatch(raw) is None:
        return FieldErrorKind.INVALID_FORMAT
    return None


def validate_asset(raw: str) -> Optional[FieldErrorKind]:
    # Case-sensitive: lowercase is rejected, never upper-cased.
    if _ASSET_RE.fullmatch(raw) is None:
        return FieldErrorKind.INVALID_FORMAT
    return None


def validate_network(raw: str) -> Optional[FieldErrorKind]:
    if _NETWORK_RE.fullmatch(raw) is None:
        return FieldErrorKind.INVALID_FORMAT
    return None


def validate_note(raw: str) -> Optional[FieldErrorKind]:
    """
    Length is checked on the raw value, before trimming.
    """
    if len(raw) > NOTE_MAX_LENGTH:
        return FieldErrorKind.TOO_LONG
    if not is_utf8_encodable(raw):
        return FieldErrorKind.INVALID_FORMAT
    return None


def validate_pin(raw: str) -> Optional[FieldErrorKind]:
    """
    The PIN is free-form; it only has to be hashable as UTF-8.
    """
    if not is_utf8_encodable(raw):
        return FieldErrorKind.INVALID_FORMAT
    return None


def validate_expiry(
    local: str,
    now_utc: datetime,
    tz: Optional[tzinfo] = None,
) -> Optional[FieldErrorKind]:
    """
    Expiry is optional: an empty value is accepted.

    A non-empty value must parse and, once converted to UTC, be strictly
    later than ``now_utc``.
    """
    if not local:
        return None

    exp_utc = local_to_utc(local, tz)
    if exp_utc is None:
        return FieldErrorKind.INVALID_DATE
    if exp_utc <= now_utc:
        return FieldErrorKind.NOT_IN_FUTURE
    return None


# ------------------------------------------------------------------
# Whole-form check
# ------------------------------------------------------------------


def validate_all(
    fields: RawPayFields,
    now_utc: datetime,
    tz: Optional[tzinfo] = None,
) -> ValidationReport:
    """
    Validate every field of a raw form and collect all failures.

    An empty required field is reported as MISSING_REQUIRED rather than
    as a format failure.
    """
    kinds: Dict[str, Optional[FieldErrorKind]] = {
        "amount": validate_amount(fields.amount),
        "asset": validate_asset(fields.asset),
        "network": validate_network(fields.network),
        "note": validate_note(fields.note),
        "exp": validate_expiry(fields.exp, now_utc, tz),
        "pin": validate_pin(fields.pin),
    }

    for name in REQUIRED_FIELDS:
        if getattr(fields, name) == "":
            kinds[name] = FieldErrorKind.MISSING_REQUIRED

    errors = {
        name: FieldError(field=name, kind=kind, message=_message(name, kind))
        for name, kind in kinds.items()
        if kind is not None
    }

    if errors:
        logger.debug("pay form rejected fields=%s", sorted(errors))
        return ValidationReport(errors=errors)

    return ValidationReport(
        fields=NormalizedFields(
            amount=fields.amount,
            asset=fields.asset,
            network=fields.network,
            exp=local_to_utc(fields.exp, tz) if fields.exp else None,
        )
    )
