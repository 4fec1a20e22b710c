# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
cardpng - Character card metadata for PNG files

Embeds, replaces and reads character cards (Character Card V2/V3 JSON)
stored in PNG tEXt chunks. The image data is never decoded or
re-encoded: chunks other than the card chunks are copied byte-for-byte.

Copyright 2025 DNAi inc.
"""

__version__ = "0.1.0"
__author__ = "DNAi inc."

from cardpng.config import CompatibilityMode, EmbedConfig
from cardpng.core import CardPNG, load_card_file
from cardpng.crc import checksum, chunk_crc
from cardpng.exceptions import (
    CardDecodeError,
    CardPNGError,
    ContainerError,
    InvalidSignatureError,
    MetadataReadError,
    MetadataWriteError,
    MissingTerminalChunkError,
    TruncatedChunkError,
)
from cardpng.png_chunks import (
    PNG_SIGNATURE,
    Chunk,
    build_text_chunk,
    decode_chunk_at,
    encode_chunk,
    iter_chunks,
    list_chunks,
)
from cardpng.png_parser import (
    ParsedCardData,
    PNGCardParser,
    decode_card_payload,
    detect_spec_version,
    read_card_metadata,
)
from cardpng.png_writer import PNGCardWriter, encode_card_payload, rewrite_metadata_chunk, save_png_data

__all__ = [
    "CardPNG",
    "load_card_file",
    "CompatibilityMode",
    "EmbedConfig",
    "checksum",
    "chunk_crc",
    "CardPNGError",
    "MetadataReadError",
    "MetadataWriteError",
    "ContainerError",
    "InvalidSignatureError",
    "MissingTerminalChunkError",
    "TruncatedChunkError",
    "CardDecodeError",
    "PNG_SIGNATURE",
    "Chunk",
    "build_text_chunk",
    "decode_chunk_at",
    "encode_chunk",
    "iter_chunks",
    "list_chunks",
    "ParsedCardData",
    "PNGCardParser",
    "decode_card_payload",
    "detect_spec_version",
    "read_card_metadata",
    "PNGCardWriter",
    "encode_card_payload",
    "rewrite_metadata_chunk",
    "save_png_data",
]
