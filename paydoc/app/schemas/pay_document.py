"""
Canonical `.pay` document schema.

Defines the authoritative structure of a pay document: a fixed header and
a transactional payload. The schema is version-pinned through ``header.v``;
any breaking change to payload semantics MUST bump that value.

This schema is:
- immutable once built
- unsigned (``alg`` is always ``"none"`` in this revision)
- strict on decode (unknown keys and explicit nulls are rejected)

Optional payload fields (``exp``, ``note``, ``pinHash``) are either fully
present or fully absent. They are never serialized as ``null``.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from paydoc.app.utils.text import trim


# ---------------------------------------------------------------------------
# Wire constants (FROZEN CONTRACTS)
# ---------------------------------------------------------------------------

PAY_FORMAT_VERSION = 1
PAY_TYPE_TAG = "pay+json"
PAY_ALGORITHM = "none"

PAY_MEDIA_TYPE = "application/pay+json"
PAY_FILE_EXTENSION = ".pay"

AMOUNT_PATTERN = r"^[0-9]+(\.[0-9]+)?$"
ASSET_PATTERN = r"^[A-Z0-9]{2,10}$"
NETWORK_PATTERN = r"^[A-Za-z0-9-]{2,64}$"
JTI_PATTERN = r"^[0-9a-f]{32}$"
PIN_HASH_PATTERN = r"^[0-9a-f]{64}$"

# ISO-8601 extended format only; the basic form (20261019T1200) is rejected.
TIMESTAMP_SHAPE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}"

NOTE_MAX_LENGTH = 2048

OPTIONAL_PAYLOAD_KEYS = ("exp", "note", "pinHash")


def parse_iso_utc(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp that must carry a UTC designator.

    Accepts both ``Z`` and ``+00:00``. Raises ValueError for basic-format,
    naive or non-UTC timestamps.
    """
    if re.match(TIMESTAMP_SHAPE_PATTERN, value) is None:
        raise ValueError(f"timestamp is not ISO-8601 extended format: {value!r}")

    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    parsed = datetime.fromisoformat(normalized)
    if parsed.tzinfo is None or parsed.utcoffset() != timedelta(0):
        raise ValueError(f"timestamp is not UTC: {value!r}")
    return parsed


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------


class PayHeader(BaseModel):
    """
    Fixed document header.

    ``alg`` exists so that future signed variants can be introduced
    without breaking decoders that only understand ``"none"``.
    """

    v: Literal[1] = PAY_FORMAT_VERSION
    typ: Literal["pay+json"] = PAY_TYPE_TAG
    alg: Literal["none"] = PAY_ALGORITHM

    # strict: "v": true or "v": 1.0 is not format version 1
    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)


# ---------------------------------------------------------------------------
# Payload
# ---------------------------------------------------------------------------


class PayPayload(BaseModel):
    """
    Transactional content of a pay document.

    Field declaration order is the wire order.
    """

    jti: str = Field(
        ...,
        pattern=JTI_PATTERN,
        description="128-bit random identifier, lowercase hex",
    )

    amount: str = Field(
        ...,
        pattern=AMOUNT_PATTERN,
        description="Unsigned decimal string, e.g. '12.50'",
    )

    asset: str = Field(
        ...,
        pattern=ASSET_PATTERN,
        description="Uppercase alphanumeric ticker",
    )

    network: str = Field(
        ...,
        pattern=NETWORK_PATTERN,
        description="Settlement network or chain name",
    )

    created_at: str = Field(
        ...,
        alias="createdAt",
        description="UTC creation timestamp (ISO-8601)",
    )

    exp: Optional[str] = Field(
        None,
        description="UTC expiry timestamp (ISO-8601)",
    )

    note: Optional[str] = Field(
        None,
        min_length=1,
        max_length=NOTE_MAX_LENGTH,
        description="Trimmed free text",
    )

    pin_hash: Optional[str] = Field(
        None,
        alias="pinHash",
        pattern=PIN_HASH_PATTERN,
        description="SHA-256 of the trimmed PIN, lowercase hex",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @model_validator(mode="before")
    @classmethod
    def reject_null_optionals(cls, data: Any) -> Any:
        if isinstance(data, dict):
            for key in OPTIONAL_PAYLOAD_KEYS:
                if key in data and data[key] is None:
                    raise ValueError(f"'{key}' must be omitted, not null")
        return data

    @field_validator("created_at", "exp")
    @classmethod
    def validate_utc_timestamp(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            parse_iso_utc(v)
        return v

    @field_validator("note")
    @classmethod
    def note_is_trimmed(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v != trim(v):
            raise ValueError("note must be stored trimmed")
        return v

    @model_validator(mode="after")
    def expiry_after_creation(self) -> "PayPayload":
        if self.exp is not None:
            if parse_iso_utc(self.exp) <= parse_iso_utc(self.created_at):
                raise ValueError("exp must be strictly later than createdAt")
        return self

    def created_at_datetime(self) -> datetime:
        return parse_iso_utc(self.created_at)

    def exp_datetime(self) -> Optional[datetime]:
        return parse_iso_utc(self.exp) if self.exp is not None else None


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


class PayDocument(BaseModel):
    """
    Canonical pay document.

    A value object: there are no update operations. Correcting any field
    requires building a new document with a fresh ``jti`` and
    ``createdAt``.
    """

    header: PayHeader = Field(default_factory=PayHeader)
    payload: PayPayload

    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_wire_dict(self) -> dict:
        """
        Wire representation with aliases applied and absent optionals
        dropped.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
