# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
PNG chunk checksum

PNG protects every chunk with a CRC-32 (ISO 3309 / ITU-T V.42,
reflected polynomial 0xEDB88320) computed over the chunk type and
chunk data, but not the length field.

Copyright 2025 DNAi inc.
"""

import zlib


def checksum(data: bytes) -> int:
    """
    Calculate the unsigned CRC-32 of a byte sequence.
    
    Args:
        data: Bytes to checksum
        
    Returns:
        CRC-32 value in the range 0..0xFFFFFFFF
    """
    return zlib.crc32(data) & 0xffffffff


def chunk_crc(chunk_type: bytes, chunk_data: bytes) -> int:
    """CRC of a PNG chunk: covers type + data."""
    return zlib.crc32(chunk_data, zlib.crc32(chunk_type)) & 0xffffffff
