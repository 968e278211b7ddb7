"""
Pay document builder.

Turns validated, normalized field values into an immutable PayDocument:

    capture creation time → validate → generate jti → hash PIN (await)
    → assemble → encode

A document has two states only: unbuilt (fields being collected) and
built (immutable, ready to encode). There is no modify transition;
correcting any field means starting over with a fresh identifier and
creation time.

Failures of the random source or digest are fatal for the attempt and
surface as PayDocumentBuildError. No partially built document is ever
returned.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from paydoc.app.checks.expiry import format_iso_utc
from paydoc.app.checks.field_validation import validate_all
from paydoc.app.schemas.pay_document import (
    PayDocument,
    PayPayload,
    parse_iso_utc,
)
from paydoc.app.schemas.validation import (
    NormalizedFields,
    RawPayFields,
    ValidationReport,
)
from paydoc.app.services.codec import encode, suggested_filename
from paydoc.app.services.crypto import CryptoProvider, SystemCryptoProvider
from paydoc.app.utils.hashing import to_hex
from paydoc.app.utils.text import trim

logger = logging.getLogger(__name__)

JTI_BYTES = 16
SHA256_BYTES = 32


class PayDocumentBuildError(RuntimeError):
    """
    Fatal, non-recoverable failure of a single build attempt.

    The caller may retry the whole build.
    """


class BuildOutcome(BaseModel):
    """
    Result of a complete form session.

    On success ``document``, ``encoded`` and ``filename`` are populated.
    On validation failure only ``report`` carries information and the
    build step was never invoked.
    """

    report: ValidationReport
    document: Optional[PayDocument] = None
    encoded: Optional[bytes] = None
    filename: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def ok(self) -> bool:
        return self.document is not None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PayDocumentBuilder:
    """
    Assembles pay documents from validated input.

    The builder holds no per-document state; each build is independent
    and the builder keeps no reference to what it produced.
    """

    def __init__(
        self,
        *,
        crypto: Optional[CryptoProvider] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._crypto = crypto or SystemCryptoProvider()
        self._clock = clock or _utc_now

    # ------------------------------------------------------------------
    # Auxiliary fields
    # ------------------------------------------------------------------

    def new_identifier(self) -> str:
        try:
            raw = self._crypto.random_bytes(JTI_BYTES)
        except Exception as exc:
            raise PayDocumentBuildError("random source unavailable") from exc

        if len(raw) != JTI_BYTES:
            raise PayDocumentBuildError(
                f"random source returned {len(raw)} bytes, expected {JTI_BYTES}"
            )
        return to_hex(raw)

    def capture_creation_time(self) -> str:
        return format_iso_utc(self._clock())

    async def hash_secret(self, secret: str) -> str:
        """
        SHA-256 over the UTF-8 bytes of the trimmed secret.

        Deterministic and one-way. The secret itself is not retained.
        """
        data = trim(secret).encode("utf-8")
        try:
            digest = await self._crypto.sha256(data)
        except Exception as exc:
            raise PayDocumentBuildError("digest unavailable") from exc

        if len(digest) != SHA256_BYTES:
            raise PayDocumentBuildError(
                f"digest returned {len(digest)} bytes, expected {SHA256_BYTES}"
            )
        return to_hex(digest)

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    async def build(
        self,
        fields: NormalizedFields,
        raw_note: str = "",
        raw_secret: str = "",
        *,
        created_at: Optional[str] = None,
    ) -> PayDocument:
        """
        Assemble a complete PayDocument.

        ``jti`` and ``createdAt`` are fixed before the digest is awaited.
        Optional fields are added only when they carry a value.
        """
        jti = self.new_identifier()
        if created_at is None:
            created_at = self.capture_creation_time()

        payload: Dict[str, Any] = {
            "jti": jti,
            "amount": fields.amount,
            "asset": fields.asset,
            "network": fields.network,
            "createdAt": created_at,
        }

        if fields.exp is not None:
            payload["exp"] = format_iso_utc(fields.exp)

        note = trim(raw_note)
        if note:
            payload["note"] = note

        if trim(raw_secret):
            payload["pinHash"] = await self.hash_secret(raw_secret)

        try:
            doc = PayDocument(payload=PayPayload.model_validate(payload))
        except ValidationError as exc:
            raise PayDocumentBuildError(
                f"assembled payload violates the document schema: {exc}"
            ) from exc

        logger.info(
            "pay document built jti=%s asset=%s network=%s optional=%s",
            jti[:8],
            fields.asset,
            fields.network,
            sorted(k for k in ("exp", "note", "pinHash") if k in payload),
        )
        return doc

    async def create(
        self,
        raw: RawPayFields,
        tz: Optional[tzinfo] = None,
    ) -> BuildOutcome:
        """
        Run a full form session: capture creation time once, validate
        against it, and build only when every field passed.
        """
        created_at = self.capture_creation_time()
        report = validate_all(raw, parse_iso_utc(created_at), tz)

        if not report.ok:
            return BuildOutcome(report=report)

        doc = await self.build(
            report.fields,
            raw.note,
            raw.pin,
            created_at=created_at,
        )
        return BuildOutcome(
            report=report,
            document=doc,
            encoded=encode(doc),
            filename=suggested_filename(doc),
        )
