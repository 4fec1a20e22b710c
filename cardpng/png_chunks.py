# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
PNG chunk codec and stream scanner

This module reads and writes the framing of a PNG file:
- Signature: 89 50 4E 47 0D 0A 1A 0A
- Chunks: length (4 bytes, big-endian) + type (4 bytes) + data + CRC (4 bytes)
- The IEND chunk is always the last chunk

Decoded chunks keep their original byte span so that callers can copy
them verbatim without re-serializing.

Copyright 2025 DNAi inc.
"""

import struct
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union

from cardpng.crc import chunk_crc
from cardpng.exceptions import InvalidSignatureError, TruncatedChunkError

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'

# PNG chunk types
CHUNK_TEXT = b'tEXt'  # Uncompressed Latin-1 text chunk
CHUNK_IEND = b'IEND'

# length(4) + type(4) + CRC(4)
CHUNK_OVERHEAD = 12

MAX_KEYWORD_LENGTH = 79


@dataclass(frozen=True)
class Chunk:
    """A chunk decoded from a PNG buffer, with its raw byte span."""
    chunk_type: bytes
    data: bytes
    crc: int
    offset: int
    raw: bytes

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def end(self) -> int:
        """Offset of the first byte after this chunk."""
        return self.offset + len(self.raw)

    @property
    def type_name(self) -> str:
        return self.chunk_type.decode('latin-1')

    @property
    def crc_valid(self) -> bool:
        return chunk_crc(self.chunk_type, self.data) == self.crc

    @property
    def keyword(self) -> Optional[str]:
        """Keyword of a tEXt chunk, None for any other chunk type."""
        if self.chunk_type != CHUNK_TEXT:
            return None
        return text_keyword(self.data)


def is_png_data(data: bytes) -> bool:
    return len(data) >= len(PNG_SIGNATURE) and data[:len(PNG_SIGNATURE)] == PNG_SIGNATURE


def check_signature(data: bytes) -> None:
    """
    Raise InvalidSignatureError unless data starts with the PNG signature.
    """
    if not is_png_data(data):
        raise InvalidSignatureError("Invalid PNG signature", offset=0)


def decode_chunk_at(buffer: bytes, offset: int) -> Tuple[Chunk, int]:
    """
    Decode the chunk starting at offset.
    
    Args:
        buffer: Complete PNG file data
        offset: Offset of the chunk's length field
        
    Returns:
        Tuple of (chunk, offset of the next chunk)
        
    Raises:
        TruncatedChunkError: If the chunk runs past the end of the buffer
    """
    total = len(buffer)
    if offset + CHUNK_OVERHEAD > total:
        raise TruncatedChunkError(
            f"Truncated chunk header: {total - offset} bytes left, need at least {CHUNK_OVERHEAD}",
            offset=offset
        )
    
    chunk_length = struct.unpack('>I', buffer[offset:offset + 4])[0]
    chunk_type = bytes(buffer[offset + 4:offset + 8])
    data_start = offset + 8
    data_end = data_start + chunk_length
    chunk_end = data_end + 4
    
    if chunk_end > total:
        raise TruncatedChunkError(
            f"Truncated {chunk_type.decode('latin-1')!r} chunk: declares {chunk_length} data bytes, "
            f"only {max(total - data_start - 4, 0)} available",
            offset=offset
        )
    
    crc = struct.unpack('>I', buffer[data_end:chunk_end])[0]
    chunk = Chunk(
        chunk_type=chunk_type,
        data=bytes(buffer[data_start:data_end]),
        crc=crc,
        offset=offset,
        raw=bytes(buffer[offset:chunk_end]),
    )
    return chunk, chunk_end


def encode_chunk(chunk_type: bytes, chunk_data: bytes) -> bytes:
    """
    Write a PNG chunk with CRC.
    
    Args:
        chunk_type: Chunk type (4 ASCII letters)
        chunk_data: Chunk data
        
    Returns:
        Complete chunk bytes (length + type + data + CRC)
    """
    if len(chunk_type) != 4 or not all(
        (0x41 <= b <= 0x5a) or (0x61 <= b <= 0x7a) for b in chunk_type
    ):
        raise ValueError(f"Invalid PNG chunk type: {chunk_type!r}")
    
    chunk = bytearray()
    chunk.extend(struct.pack('>I', len(chunk_data)))
    chunk.extend(chunk_type)
    chunk.extend(chunk_data)
    chunk.extend(struct.pack('>I', chunk_crc(chunk_type, chunk_data)))
    return bytes(chunk)


def build_text_chunk(keyword: str, text: Union[str, bytes]) -> bytes:
    """
    Build a complete tEXt chunk.
    
    tEXt chunk format:
    - Keyword (1-79 Latin-1 characters, null-terminated)
    - Text: Latin-1, not null-terminated
    
    Args:
        keyword: Chunk keyword, e.g. "ccv3"
        text: Text content
        
    Returns:
        Complete chunk bytes
        
    Raises:
        ValueError: If the keyword or text cannot be stored in a tEXt chunk
    """
    if not keyword or len(keyword) > MAX_KEYWORD_LENGTH:
        raise ValueError(f"tEXt keyword must be 1-{MAX_KEYWORD_LENGTH} characters: {keyword!r}")
    try:
        keyword_bytes = keyword.encode('latin-1')
    except UnicodeEncodeError:
        raise ValueError(f"tEXt keyword must be Latin-1: {keyword!r}")
    if any(not (0x20 <= b <= 0x7e or 0xa1 <= b <= 0xff) for b in keyword_bytes):
        raise ValueError(f"tEXt keyword contains non-printable characters: {keyword!r}")
    
    if isinstance(text, str):
        try:
            text = text.encode('latin-1')
        except UnicodeEncodeError:
            raise ValueError("tEXt text must be Latin-1")
    
    return encode_chunk(CHUNK_TEXT, keyword_bytes + b'\x00' + text)


def text_keyword(chunk_data: bytes) -> Optional[str]:
    """
    Extract the keyword of tEXt chunk data.
    
    Returns:
        Keyword (bytes before the first NUL, Latin-1 decoded), or None if
        there is no NUL separator or the keyword is empty
    """
    null_pos = chunk_data.find(b'\x00')
    if null_pos <= 0:
        return None
    return chunk_data[:null_pos].decode('latin-1')


def text_value(chunk_data: bytes) -> bytes:
    """Text of tEXt chunk data (everything after the first NUL)."""
    null_pos = chunk_data.find(b'\x00')
    if null_pos < 0:
        return b''
    return chunk_data[null_pos + 1:]


def iter_chunks(png_data: bytes) -> Iterator[Chunk]:
    """
    Walk the chunks of a PNG buffer.
    
    Yields chunks in file order, stopping after IEND. Anything after IEND
    is not examined. If the buffer ends exactly on a chunk boundary before
    IEND, iteration simply stops; the caller decides whether that is an error.
    
    Raises:
        InvalidSignatureError: If the buffer is not a PNG file
        TruncatedChunkError: If a chunk runs past the end of the buffer
    """
    check_signature(png_data)
    
    offset = len(PNG_SIGNATURE)
    total = len(png_data)
    while offset < total:
        chunk, offset = decode_chunk_at(png_data, offset)
        yield chunk
        if chunk.chunk_type == CHUNK_IEND:
            return


def list_chunks(png_data: bytes) -> List[Chunk]:
    """Decode all chunks up to and including IEND."""
    return list(iter_chunks(png_data))
