# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
PNG card metadata writer

This module embeds a character card in a PNG file without touching the
image data. The card is serialized to compact JSON, base64-encoded and
stored in tEXt chunks placed immediately before IEND. Existing card
chunks are removed; every other chunk is copied byte-for-byte,
including its original CRC.

Copyright 2025 DNAi inc.
"""

import base64
import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from cardpng.config import EmbedConfig
from cardpng.exceptions import MetadataWriteError, MissingTerminalChunkError
from cardpng.png_chunks import (
    CHUNK_IEND,
    CHUNK_TEXT,
    PNG_SIGNATURE,
    build_text_chunk,
    check_signature,
    iter_chunks,
)

logger = logging.getLogger(__name__)


def encode_card_payload(card: Any, ensure_ascii: bool = False) -> bytes:
    """
    Serialize a card to the text stored in its tEXt chunk.
    
    Args:
        card: JSON-serializable card object
        ensure_ascii: Escape non-ASCII characters in the JSON text
        
    Returns:
        Base64 of the compact UTF-8 JSON text (always printable ASCII)
    """
    json_text = json.dumps(card, separators=(',', ':'), ensure_ascii=ensure_ascii)
    return base64.b64encode(json_text.encode('utf-8'))


def save_png_data(png_data: bytes, output_path: Union[str, Path]) -> None:
    """
    Write PNG file data to disk.
    
    Raises:
        MetadataWriteError: If the output file cannot be written
    """
    try:
        with open(output_path, 'wb') as f:
            f.write(png_data)
    except OSError as e:
        raise MetadataWriteError(f"Failed to write PNG file {output_path}: {str(e)}")


class PNGCardWriter:
    """
    Writes character card metadata to PNG files.
    
    Example:
        >>> writer = PNGCardWriter()
        >>> new_png = writer.rewrite(png_bytes, {"spec": "chara_card_v3", "name": "Ada"})
    """
    
    def __init__(self, config: Optional[EmbedConfig] = None):
        """
        Initialize PNG card writer.
        
        Args:
            config: Embedding configuration (default: EmbedConfig())
        """
        self.config = config or EmbedConfig()
    
    def rewrite(self, png_data: bytes, card: Any) -> bytes:
        """
        Return a copy of png_data with the card embedded.
        
        Args:
            png_data: Original PNG file data
            card: JSON-serializable card object
            
        Returns:
            New PNG file data
            
        Raises:
            InvalidSignatureError: If png_data is not a PNG file
            TruncatedChunkError: If a chunk runs past the end of png_data
            MissingTerminalChunkError: If png_data has no IEND chunk
        """
        check_signature(png_data)
        
        keywords = self.config.keywords_for(card)
        strip = self.config.strip_keywords | {k.lower() for k in keywords}
        payload = encode_card_payload(card, ensure_ascii=self.config.ensure_ascii)
        
        output = bytearray(PNG_SIGNATURE)
        copied = 0
        dropped = 0
        
        for chunk in iter_chunks(png_data):
            if chunk.chunk_type == CHUNK_TEXT:
                keyword = chunk.keyword
                if keyword is not None and keyword.lower() in strip:
                    logger.debug("Dropping tEXt chunk %r at offset %d", keyword, chunk.offset)
                    dropped += 1
                    continue
            
            if chunk.chunk_type == CHUNK_IEND:
                for keyword in keywords:
                    output.extend(build_text_chunk(keyword, payload))
                output.extend(chunk.raw)
                logger.debug(
                    "Rewrote PNG: %d chunks copied, %d dropped, %d inserted (%s), %d -> %d bytes",
                    copied, dropped, len(keywords), ', '.join(keywords),
                    len(png_data), len(output)
                )
                return bytes(output)
            
            output.extend(chunk.raw)
            copied += 1
        
        raise MissingTerminalChunkError("Invalid PNG: missing IEND chunk", offset=len(png_data))
    
    def write_png(
        self,
        original_data: bytes,
        card: Any,
        output_path: Union[str, Path]
    ) -> bytes:
        """
        Write a PNG file with the card embedded.
        
        Args:
            original_data: Original PNG file data
            card: JSON-serializable card object
            output_path: Output file path
            
        Returns:
            The PNG file data that was written
            
        Raises:
            MetadataWriteError: If the output file cannot be written
            ContainerError: If original_data is not a well-formed PNG stream
        """
        new_png_data = self.rewrite(original_data, card)
        save_png_data(new_png_data, output_path)
        return new_png_data


def rewrite_metadata_chunk(png_data: bytes, card: Any, config: Optional[EmbedConfig] = None) -> bytes:
    """
    Embed a card in PNG data, replacing any card already there.
    
    See PNGCardWriter.rewrite().
    """
    return PNGCardWriter(config).rewrite(png_data, card)
