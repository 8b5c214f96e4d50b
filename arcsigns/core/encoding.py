"""Normalization of historical file content to the canonical encoding.

Content read back from the backend is in whatever encoding the file was
committed with. Callers work in UTF-8, so lines are BOM-stripped and decoded
from the declared encoding here.
"""

import codecs
import logging

logger = logging.getLogger(__name__)

CANONICAL_ENCODING = "utf-8"

BOM_TABLE: dict[str, bytes] = {
    "utf-8": bytes([0xEF, 0xBB, 0xBF]),
    "utf-16le": bytes([0xFF, 0xFE]),
    "utf-16": bytes([0xFE, 0xFF]),
    "utf-16be": bytes([0xFE, 0xFF]),
    "utf-32le": bytes([0xFF, 0xFE, 0x00, 0x00]),
    "utf-32": bytes([0xFF, 0xFE, 0x00, 0x00]),
    "utf-32be": bytes([0x00, 0x00, 0xFE, 0xFF]),
    "utf-7": bytes([0x2B, 0x2F, 0x76]),
    "utf-1": bytes([0xF7, 0x54, 0x4C]),
}


def strip_bom(data: bytes, encoding: str) -> bytes:
    """Remove a leading byte-order mark for ``encoding`` if present."""
    bom = BOM_TABLE.get(encoding.lower())
    if bom and data.startswith(bom):
        return data[len(bom) :]
    return data


def transcoding_supported(encoding: str) -> bool:
    """Whether line-by-line transcoding is possible for ``encoding``.

    Fixed-width 16 and 32 bit encodings are split on newline bytes before
    transcoding, which breaks their code units, so they are left alone.
    """
    encoding = encoding.lower()
    return not (encoding.startswith("utf-16") or encoding.startswith("utf-32"))


def _decode_canonical(lines: list[bytes]) -> list[str]:
    return [line.decode(CANONICAL_ENCODING, errors="replace") for line in lines]


def normalize_lines(lines: list[bytes], encoding: str | None) -> list[str]:
    """Convert raw content lines to text in the canonical encoding.

    Args:
        lines: Raw lines as produced by the backend, newline already removed.
        encoding: Declared encoding of the file. None means canonical.

    Returns:
        Decoded lines. For the canonical encoding, and for encodings that
        cannot be transcoded, lines are decoded as UTF-8 unchanged.
    """
    if not encoding or encoding.lower() == CANONICAL_ENCODING:
        return _decode_canonical(lines)
    if not transcoding_supported(encoding):
        return _decode_canonical(lines)

    try:
        codecs.lookup(encoding)
    except LookupError:
        logger.warning(f"Unknown encoding '{encoding}', reading content as {CANONICAL_ENCODING}")
        return _decode_canonical(lines)

    if not lines:
        return []

    first = strip_bom(lines[0], encoding)
    return [line.decode(encoding, errors="replace") for line in [first, *lines[1:]]]
