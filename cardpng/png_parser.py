# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
PNG card metadata parser

This module reads character cards embedded in PNG tEXt chunks.
A "ccv3" chunk (Character Card V3) takes priority; a "chara" chunk
(Character Card V2 and earlier) is used as a fallback. Keywords are
matched case-insensitively.

Copyright 2025 DNAi inc.
"""

import base64
import binascii
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from cardpng.config import LEGACY_KEYWORD, PRIMARY_KEYWORD
from cardpng.exceptions import CardDecodeError, TruncatedChunkError
from cardpng.png_chunks import CHUNK_TEXT, iter_chunks, text_keyword, text_value

logger = logging.getLogger(__name__)

# Fields every V1 card carries; V1 cards have no "spec" field
V1_REQUIRED_FIELDS = (
    'name', 'description', 'personality', 'scenario', 'first_mes', 'mes_example',
)


@dataclass
class ParsedCardData:
    """A card read from a PNG file."""
    data: Any
    spec_version: str  # "1.0", "2.0", "3.0" or "UNKNOWN"
    chunk_type: str  # keyword of the chunk the card came from


def detect_spec_version(card: Any) -> str:
    """
    Detect the Character Card spec version of a decoded card.
    
    Args:
        card: Decoded card object
        
    Returns:
        "3.0", "2.0", "1.0" or "UNKNOWN"
    """
    if not isinstance(card, Mapping):
        return 'UNKNOWN'
    spec = card.get('spec')
    if spec == 'chara_card_v3':
        return '3.0'
    if spec == 'chara_card_v2':
        return '2.0'
    if not spec and all(field in card for field in V1_REQUIRED_FIELDS):
        return '1.0'
    return 'UNKNOWN'


def decode_card_payload(text: bytes) -> Any:
    """
    Decode the text of a card chunk (base64 of UTF-8 JSON).
    
    Raises:
        CardDecodeError: If the text is not base64-encoded UTF-8 JSON
    """
    # Lenient: URL-safe alphabet, stray characters and missing padding are accepted
    text = re.sub(rb'[^A-Za-z0-9+/]', b'', text.replace(b'-', b'+').replace(b'_', b'/'))
    text += b'=' * (-len(text) % 4)
    try:
        json_bytes = base64.b64decode(text)
        return json.loads(json_bytes.decode('utf-8'))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise CardDecodeError(f"Invalid card payload: {str(e)}")


class PNGCardParser:
    """
    Parser for character cards embedded in PNG files.
    """
    
    def __init__(self, file_path: Optional[str] = None, file_data: Optional[bytes] = None):
        """
        Initialize PNG card parser.
        
        Args:
            file_path: Path to PNG file
            file_data: PNG file data bytes
        """
        if file_path is not None:
            self.file_path = Path(file_path)
            self.file_data = None
        elif file_data is not None:
            self.file_data = file_data
            self.file_path = None
        else:
            raise ValueError("Either file_path or file_data must be provided")
    
    def parse(self) -> Optional[ParsedCardData]:
        """
        Parse the embedded card.
        
        Returns:
            Parsed card, or None if the file has no card chunk
            
        Raises:
            InvalidSignatureError: If the data is not a PNG file
            TruncatedChunkError: If a chunk runs past the end of the data
                                 before any card chunk was read
            CardDecodeError: If the only card chunk found cannot be decoded
        """
        if self.file_data is None:
            with open(self.file_path, 'rb') as f:
                file_data = f.read()
        else:
            file_data = self.file_data
        
        chara_text: Optional[bytes] = None
        
        try:
            for chunk in iter_chunks(file_data):
                if chunk.chunk_type != CHUNK_TEXT:
                    continue

                keyword = text_keyword(chunk.data)
                if keyword is None:
                    continue
                keyword = keyword.lower()
                text = text_value(chunk.data)
                if not text:
                    continue

                if keyword == PRIMARY_KEYWORD:
                    try:
                        card = decode_card_payload(text)
                    except CardDecodeError as e:
                        # Keep looking: a chara chunk may still be usable
                        logger.warning("Failed to decode ccv3 chunk at offset %d: %s", chunk.offset, e.message)
                        continue
                    return ParsedCardData(card, detect_spec_version(card), PRIMARY_KEYWORD)

                if keyword == LEGACY_KEYWORD:
                    chara_text = text
        except TruncatedChunkError as e:
            # A damaged tail does not hide a chara card already read
            if chara_text is None:
                raise
            logger.warning("Stopped reading at truncated chunk: %s", e.message)
        
        if chara_text is None:
            return None
        
        card = decode_card_payload(chara_text)
        return ParsedCardData(card, detect_spec_version(card), LEGACY_KEYWORD)


def read_card_metadata(png_data: bytes) -> Optional[ParsedCardData]:
    """
    Read the card embedded in PNG data.
    
    See PNGCardParser.parse().
    """
    return PNGCardParser(file_data=png_data).parse()
