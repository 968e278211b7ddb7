"""
Text normalization shared by validation, build and decode.

Pay documents are interoperable with producers whose trim follows the
ECMAScript definition of whitespace. Python's ``str.strip()`` differs: it
keeps U+FEFF and removes U+001C..U+001F and U+0085. Every trim applied to
pay document text goes through ``trim`` instead.
"""

# ECMAScript WhiteSpace and LineTerminator code points
ECMASCRIPT_WHITESPACE = (
    "\u0009\u000a\u000b\u000c\u000d\u0020\u00a0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def trim(value: str) -> str:
    """Strip leading and trailing ECMAScript whitespace."""
    return value.strip(ECMASCRIPT_WHITESPACE)


def is_utf8_encodable(value: str) -> bool:
    """
    False when ``value`` holds code points with no UTF-8 form
    (unpaired surrogates).
    """
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True
