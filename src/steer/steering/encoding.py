"""UTF-8 validation and byte-safe truncation for steering text."""

from __future__ import annotations

import codecs


def decode(raw: bytes, *, complete: bool = True) -> str | None:
    """Strictly decode *raw* as UTF-8, or return ``None`` if it is not valid.

    When *complete* is false, *raw* is a prefix cut from a longer file and
    an unfinished multi-byte sequence at its very end is dropped rather
    than rejected.  Any other invalid byte still rejects the file.

    No normalization is applied: a leading BOM or CRLF line endings are
    kept as-is.
    """
    decoder = codecs.getincrementaldecoder("utf-8")("strict")
    try:
        return decoder.decode(raw, final=complete)
    except UnicodeDecodeError:
        return None


def safe_prefix(text: str, limit: int) -> str:
    """Return the longest prefix of *text* that fits in *limit* UTF-8 bytes.

    The cut never falls inside a multi-byte character: when the byte
    boundary lands mid-sequence it backs off to the previous character.
    """
    if limit <= 0:
        return ""
    encoded = text.encode("utf-8")
    if len(encoded) <= limit:
        return text
    cut = limit
    # Continuation bytes look like 0b10xxxxxx
    while cut > 0 and (encoded[cut] & 0xC0) == 0x80:
        cut -= 1
    return encoded[:cut].decode("utf-8")
