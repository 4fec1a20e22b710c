from __future__ import annotations

import base64
import json
import struct
import zlib


SIGNATURE = b"\x89PNG\r\n\x1a\n"


def raw_chunk(chunk_type: bytes, data: bytes, crc: int | None = None) -> bytes:
    if crc is None:
        crc = zlib.crc32(chunk_type + data) & 0xFFFFFFFF
    return struct.pack(">I", len(data)) + chunk_type + data + struct.pack(">I", crc)


def ihdr_chunk(width: int = 1, height: int = 1) -> bytes:
    return raw_chunk(b"IHDR", struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0))


def idat_chunk(width: int = 1, height: int = 1) -> bytes:
    rows = b"".join(b"\x00" + b"\xff\x00\x00" * width for _ in range(height))
    return raw_chunk(b"IDAT", zlib.compress(rows))


def iend_chunk() -> bytes:
    return raw_chunk(b"IEND", b"")


def text_chunk(keyword: str, text: bytes) -> bytes:
    return raw_chunk(b"tEXt", keyword.encode("latin-1") + b"\x00" + text)


def card_text(card) -> bytes:
    return base64.b64encode(json.dumps(card).encode("utf-8"))


def make_png(*chunks: bytes) -> bytes:
    return SIGNATURE + b"".join(chunks)


def split_chunks(png: bytes) -> list[tuple[bytes, bytes, bytes]]:
    """(type, data, raw) for every chunk, parsed independently of cardpng."""
    assert png[:8] == SIGNATURE
    out = []
    pos = 8
    while pos < len(png):
        (n,) = struct.unpack(">I", png[pos:pos + 4])
        ctype = png[pos + 4:pos + 8]
        out.append((ctype, png[pos + 8:pos + 8 + n], png[pos:pos + 12 + n]))
        pos += 12 + n
    return out


def text_chunks(png: bytes) -> list[tuple[str, bytes]]:
    out = []
    for ctype, data, _ in split_chunks(png):
        if ctype == b"tEXt":
            kw, _, text = data.partition(b"\x00")
            out.append((kw.decode("latin-1"), text))
    return out
