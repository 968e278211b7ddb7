"""
Tests for canonical `.pay` encoding and strict decoding.

The round-trip contract is byte-level: a decoded document re-encodes to
exactly the bytes it was decoded from, and absent optional fields stay
absent.
"""

import copy
import hashlib
import json

import pytest

from paydoc.app.schemas.pay_document import (
    PAY_MEDIA_TYPE,
    PayDocument,
    PayPayload,
)
from paydoc.app.services.codec import (
    PayDocumentDecodeError,
    decode,
    encode,
    suggested_filename,
)


JTI = "00112233445566778899aabbccddeeff"
PIN_HASH = hashlib.sha256(b"1234").hexdigest()


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------

def _minimal_wire() -> dict:
    return {
        "header": {"v": 1, "typ": "pay+json", "alg": "none"},
        "payload": {
            "jti": JTI,
            "amount": "12.50",
            "asset": "USDC",
            "network": "ETH-mainnet",
            "createdAt": "2026-10-19T12:00:00.000Z",
        },
    }


def _full_wire() -> dict:
    wire = _minimal_wire()
    wire["payload"].update(
        {
            "exp": "2026-10-20T12:00:00.000Z",
            "note": "Samsung Monitor – 27\" €",
            "pinHash": PIN_HASH,
        }
    )
    return wire


def _doc(wire: dict) -> PayDocument:
    return PayDocument.model_validate(wire)


def _bytes(wire: dict) -> bytes:
    return json.dumps(wire).encode("utf-8")


# ---------------------------------------------------------------------------
# encode
# ---------------------------------------------------------------------------

def test_encode_minimal_document_is_compact_wire_order():
    assert encode(_doc(_minimal_wire())) == (
        b'{"header":{"v":1,"typ":"pay+json","alg":"none"},'
        b'"payload":{"jti":"00112233445566778899aabbccddeeff",'
        b'"amount":"12.50","asset":"USDC","network":"ETH-mainnet",'
        b'"createdAt":"2026-10-19T12:00:00.000Z"}}'
    )


def test_encode_places_optionals_after_created_at():
    encoded = encode(_doc(_full_wire())).decode("utf-8")
    payload_keys = list(json.loads(encoded)["payload"])

    assert payload_keys == [
        "jti",
        "amount",
        "asset",
        "network",
        "createdAt",
        "exp",
        "note",
        "pinHash",
    ]


def test_encode_never_emits_null():
    assert b"null" not in encode(_doc(_minimal_wire()))


def test_encode_keeps_non_ascii_as_utf8():
    encoded = encode(_doc(_full_wire()))

    assert "€".encode("utf-8") in encoded
    assert b"\\u20ac" not in encoded


def test_payload_built_in_code_encodes_like_decoded_one():
    payload = PayPayload(
        jti=JTI,
        amount="12.50",
        asset="USDC",
        network="ETH-mainnet",
        createdAt="2026-10-19T12:00:00.000Z",
    )

    assert encode(PayDocument(payload=payload)) == encode(_doc(_minimal_wire()))


# ---------------------------------------------------------------------------
# Round trip
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("wire", [_minimal_wire(), _full_wire()])
def test_round_trip_is_byte_identical(wire):
    doc = _doc(wire)
    encoded = encode(doc)
    decoded = decode(encoded)

    assert decoded == doc
    assert encode(decoded) == encoded


def test_round_trip_keeps_absent_optionals_absent():
    decoded = decode(encode(_doc(_minimal_wire())))

    assert decoded.payload.exp is None
    assert decoded.payload.note is None
    assert decoded.payload.pin_hash is None
    assert set(decoded.to_wire_dict()["payload"]) == {
        "jti",
        "amount",
        "asset",
        "network",
        "createdAt",
    }


def test_decode_canonicalizes_foreign_formatting():
    wire = _full_wire()
    reordered = {
        "payload": dict(reversed(list(wire["payload"].items()))),
        "header": {"alg": "none", "v": 1, "typ": "pay+json"},
    }
    foreign = json.dumps(reordered, indent=4, ensure_ascii=True).encode("utf-8")

    assert encode(decode(foreign)) == encode(_doc(wire))


def test_decode_accepts_note_ending_in_separator_control():
    wire = copy.deepcopy(_full_wire())
    wire["payload"]["note"] = "rent\x1c"

    assert decode(_bytes(wire)).payload.note == "rent\x1c"


def test_decode_header_version_stays_an_integer():
    assert b'"v":1,' in encode(decode(_bytes(_minimal_wire())))


def test_decode_accepts_str_input():
    assert decode(encode(_doc(_minimal_wire())).decode("utf-8")) == _doc(_minimal_wire())


# ---------------------------------------------------------------------------
# Strict decode
# ---------------------------------------------------------------------------

def _mutated(path: tuple, value) -> dict:
    wire = copy.deepcopy(_full_wire())
    target = wire
    for key in path[:-1]:
        target = target[key]
    target[path[-1]] = value
    return wire


def _without(key: str) -> dict:
    wire = copy.deepcopy(_minimal_wire())
    del wire["payload"][key]
    return wire


@pytest.mark.parametrize(
    "wire",
    [
        _mutated(("payload", "exp"), None),
        _mutated(("payload", "note"), None),
        _mutated(("payload", "pinHash"), None),
        _mutated(("payload", "signature"), "abc"),
        _mutated(("extra",), {}),
        _mutated(("header", "v"), 2),
        _mutated(("header", "v"), True),
        _mutated(("header", "v"), 1.0),
        _mutated(("header", "v"), "1"),
        _mutated(("header", "alg"), "HS256"),
        _mutated(("header", "typ"), "jwt"),
        _mutated(("payload", "amount"), "-1"),
        _mutated(("payload", "amount"), 12.5),
        _mutated(("payload", "asset"), "usdc"),
        _mutated(("payload", "network"), "ETH mainnet"),
        _mutated(("payload", "jti"), JTI.upper()),
        _mutated(("payload", "jti"), JTI[:-2]),
        _mutated(("payload", "pinHash"), PIN_HASH[:-1]),
        _mutated(("payload", "note"), ""),
        _mutated(("payload", "note"), "  padded  "),
        _mutated(("payload", "note"), "a" * 2049),
        _mutated(("payload", "createdAt"), "2026-10-19T14:00:00+02:00"),
        _mutated(("payload", "createdAt"), "2026-10-19T12:00:00"),
        _mutated(("payload", "createdAt"), "yesterday"),
        _mutated(("payload", "createdAt"), "20261019T120000.000Z"),
        _mutated(("payload", "exp"), "20261020T120000+00:00"),
        _mutated(("payload", "note"), "\ufeffrent"),
        _mutated(("payload", "exp"), "2026-10-19T12:00:00.000Z"),
        _mutated(("payload", "exp"), "2026-10-18T12:00:00.000Z"),
        _without("jti"),
        _without("createdAt"),
    ],
)
def test_decode_rejects_invalid_documents(wire):
    with pytest.raises(PayDocumentDecodeError):
        decode(_bytes(wire))


@pytest.mark.parametrize(
    "data",
    [b"", b"{", b"\xff\xff\xff", b"[]", b'"pay"', b"null"],
)
def test_decode_rejects_non_documents(data):
    with pytest.raises(PayDocumentDecodeError):
        decode(data)


def test_decode_error_is_a_value_error():
    with pytest.raises(ValueError):
        decode(b"{}")


# ---------------------------------------------------------------------------
# Filename
# ---------------------------------------------------------------------------

def test_suggested_filename_uses_asset_amount_and_jti_prefix():
    assert suggested_filename(_doc(_minimal_wire())) == "USDC-12.50-00112233.pay"


def test_media_type_constant():
    assert PAY_MEDIA_TYPE == "application/pay+json"
