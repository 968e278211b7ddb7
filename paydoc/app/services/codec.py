"""
Canonical `.pay` encoding and decoding.

The encoding is UTF-8 JSON with compact separators, keys in wire order
and absent optional fields omitted. Decoding is strict: the result of
``decode`` re-encodes to exactly the bytes ``encode`` produced.

Round-trip contract:
    encode(decode(encode(doc))) == encode(doc)
"""

from __future__ import annotations

import json
import logging
from typing import Union

from pydantic import ValidationError

from paydoc.app.schemas.pay_document import PAY_FILE_EXTENSION, PayDocument

logger = logging.getLogger(__name__)


class PayDocumentDecodeError(ValueError):
    """Raised when bytes are not a valid pay document."""


def encode(doc: PayDocument) -> bytes:
    return json.dumps(
        doc.to_wire_dict(),
        ensure_ascii=False,
        separators=(",", ":"),
    ).encode("utf-8")


def decode(data: Union[bytes, bytearray, str]) -> PayDocument:
    """
    Parse and validate an encoded pay document.

    Raises PayDocumentDecodeError for malformed JSON, unknown keys,
    explicit nulls, header mismatches and any field-rule violation.
    """
    try:
        raw = json.loads(data)
    except ValueError as exc:
        raise PayDocumentDecodeError(f"not valid UTF-8 JSON: {exc}") from exc

    try:
        return PayDocument.model_validate(raw)
    except ValidationError as exc:
        logger.debug("pay document rejected errors=%d", exc.error_count())
        raise PayDocumentDecodeError(str(exc)) from exc


def suggested_filename(doc: PayDocument) -> str:
    """
    Advisory filename ``{asset}-{amount}-{jti[:8]}.pay``.

    Not part of the document content and never parsed back.
    """
    payload = doc.payload
    return f"{payload.asset}-{payload.amount}-{payload.jti[:8]}{PAY_FILE_EXTENSION}"
