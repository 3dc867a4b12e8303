"""Encoding of terminal payloads as raw or zlib-compressed base64."""

from __future__ import annotations

import base64
import binascii
import zlib

COMPRESSION_THRESHOLD = 32
CHUNK_SIZE = 8192

RAW_BASE64 = "raw+base64"
ZLIB_BASE64 = "zlib+base64"


class DecodeError(ValueError):
    """Raised when a payload cannot be decoded or exceeds its size bound."""


def compress_encode(data: bytes) -> tuple[str, str]:
    """Encode ``data``, compressing it with zlib when it is at least 32 bytes."""
    if len(data) < COMPRESSION_THRESHOLD:
        return base64.b64encode(data).decode("ascii"), RAW_BASE64
    compressed = zlib.compress(data, 6)
    return base64.b64encode(compressed).decode("ascii"), ZLIB_BASE64


def _b64decode(encoded: str) -> bytes:
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"invalid base64: {exc}") from exc


def _inflate_bounded(compressed: bytes, max_bytes: int) -> bytes:
    decompressor = zlib.decompressobj()
    output = bytearray()
    pending = compressed
    try:
        while not decompressor.eof:
            chunk = decompressor.decompress(pending, CHUNK_SIZE)
            pending = decompressor.unconsumed_tail
            if not chunk and not pending:
                if decompressor.eof:
                    break
                raise DecodeError("truncated zlib stream")
            if len(output) + len(chunk) > max_bytes:
                raise DecodeError(f"decompressed size exceeds max_bytes {max_bytes}")
            output += chunk
    except zlib.error as exc:
        raise DecodeError(f"corrupt zlib stream: {exc}") from exc
    return bytes(output)


def decode_decompress_bounded(encoded: str, encoding: str, max_bytes: int) -> bytes:
    """Decode a payload, refusing any result larger than ``max_bytes``."""
    if encoding == RAW_BASE64:
        decoded = _b64decode(encoded)
        if len(decoded) > max_bytes:
            raise DecodeError(
                f"decoded size {len(decoded)} exceeds max_bytes {max_bytes}"
            )
        return decoded
    if encoding == ZLIB_BASE64:
        return _inflate_bounded(_b64decode(encoded), max_bytes)
    raise DecodeError(f"unknown encoding: {encoding}")