# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Core CardPNG class

This module provides the file-level API for reading and writing
character cards embedded in PNG files. The chunk rewriting itself
works on in-memory buffers (see png_writer); this class owns the
file I/O around it.

Copyright 2025 DNAi inc.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Union

import chardet

from cardpng.config import EmbedConfig
from cardpng.exceptions import MetadataReadError, MetadataWriteError
from cardpng.png_chunks import Chunk, check_signature, list_chunks
from cardpng.png_parser import ParsedCardData, PNGCardParser
from cardpng.png_writer import PNGCardWriter, save_png_data

logger = logging.getLogger(__name__)

_UNSET = object()


def load_card_file(file_path: Union[str, Path]) -> Any:
    """
    Load a card JSON file of unknown text encoding.
    
    UTF-8 (with or without BOM) is tried first; anything else is
    decoded with the encoding chardet detects.
    
    Args:
        file_path: Path to the JSON file
        
    Returns:
        Decoded card object
        
    Raises:
        MetadataReadError: If the file cannot be decoded or is not valid JSON
    """
    path = Path(file_path)
    with open(path, 'rb') as f:
        file_data = f.read()
    
    try:
        text = file_data.decode('utf-8-sig')
    except UnicodeDecodeError:
        detected = chardet.detect(file_data)
        encoding = detected.get('encoding')
        confidence = detected.get('confidence') or 0.0
        if not encoding or confidence <= 0.5:
            raise MetadataReadError(f"Cannot detect text encoding of {path}")
        logger.debug("Detected %s encoding (confidence %.2f) for %s", encoding, confidence, path)
        try:
            text = file_data.decode(encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise MetadataReadError(f"Cannot decode {path} as {encoding}: {str(e)}")
        text = text.lstrip('\ufeff')
    
    try:
        return json.loads(text)
    except ValueError as e:
        raise MetadataReadError(f"Invalid card JSON in {path}: {str(e)}")


class CardPNG:
    """
    Read and write the character card embedded in a PNG file.
    
    Example:
        >>> with CardPNG('card.png') as png:
        ...     card = png.get_card()
        ...     card['data']['name'] = 'Ada'
        ...     png.set_card(card)
        ...     png.save('edited.png')
    """
    
    def __init__(
        self,
        file_path: Union[str, Path],
        read_only: bool = False,
        config: Optional[EmbedConfig] = None
    ):
        """
        Initialize CardPNG with a PNG file.
        
        Args:
            file_path: Path to the PNG file
            read_only: If True, set_card() and save() are refused
            config: Embedding configuration used by save()
            
        Raises:
            FileNotFoundError: If the file does not exist
            InvalidSignatureError: If the file is not a PNG file
        """
        self.file_path = Path(file_path)
        
        if not self.file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        
        self.read_only = read_only
        self.config = config or EmbedConfig()
        
        with open(self.file_path, 'rb') as f:
            self.file_data = f.read()
        check_signature(self.file_data)
        
        self._parsed: Any = _UNSET
        self._pending_card: Any = _UNSET
    
    def get_parsed(self) -> Optional[ParsedCardData]:
        """Card as stored in the file, with its spec version and chunk keyword."""
        if self._parsed is _UNSET:
            self._parsed = PNGCardParser(file_data=self.file_data).parse()
        return self._parsed
    
    def get_card(self) -> Any:
        """
        Get the card, including a pending set_card() value.
        
        Returns:
            Card object, or None if the file has no card
        """
        if self._pending_card is not _UNSET:
            return self._pending_card
        parsed = self.get_parsed()
        return parsed.data if parsed is not None else None
    
    def set_card(self, card: Any) -> None:
        """
        Set the card to embed. The change is applied when save() is called.
        
        Raises:
            MetadataWriteError: If in read-only mode
        """
        if self.read_only:
            raise MetadataWriteError(
                f"Cannot set card: File '{self.file_path}' is opened in read-only mode. "
                "Open the file without read_only=True to enable writing."
            )
        self._pending_card = card
    
    def chunks(self) -> List[Chunk]:
        return list_chunks(self.file_data)
    
    def save(self, output_path: Optional[Union[str, Path]] = None) -> Path:
        """
        Write the PNG with the pending card embedded.
        
        Without a pending card the file data is written unchanged.
        
        Args:
            output_path: Output file path (default: overwrite the original)
            
        Returns:
            Path that was written
            
        Raises:
            MetadataWriteError: If in read-only mode or the file cannot be written
            ContainerError: If the PNG chunk stream is malformed
        """
        if self.read_only:
            raise MetadataWriteError(
                f"Cannot save: File '{self.file_path}' is opened in read-only mode. "
                "Open the file without read_only=True to enable writing."
            )
        
        output_path = Path(output_path) if output_path is not None else self.file_path
        
        if self._pending_card is _UNSET:
            new_data = self.file_data
            save_png_data(new_data, output_path)
        else:
            writer = PNGCardWriter(self.config)
            new_data = writer.write_png(self.file_data, self._pending_card, output_path)
        
        logger.info("Saved %s (%d bytes)", output_path, len(new_data))
        
        if output_path == self.file_path:
            self.file_data = new_data
            self._parsed = _UNSET
            self._pending_card = _UNSET
        return output_path
    
    def __enter__(self):
        """Context manager entry."""
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        # User must explicitly call save()
        pass
