# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Exception classes for cardpng

This module defines custom exceptions for the cardpng library.
Container errors carry the byte offset at which the PNG stream
stopped making sense, for diagnostics.

Copyright 2025 DNAi inc.
"""

from typing import Optional


class CardPNGError(Exception):
    """
    Base exception for all cardpng errors.
    
    All cardpng exceptions inherit from this class, allowing
    catch-all error handling for any cardpng-related errors.
    """
    def __init__(self, message: str = ""):
        """
        Initialize the exception with an optional error message.
        
        Args:
            message: Descriptive error message explaining what went wrong
        """
        self.message = message
        super().__init__(message)


class MetadataReadError(CardPNGError):
    """
    Raised when card metadata cannot be read from a file.
    """
    pass


class MetadataWriteError(CardPNGError):
    """
    Raised when card metadata cannot be written to a file.
    
    This exception is raised when:
    - File is opened in read-only mode
    - Output file cannot be written
    """
    pass


class ContainerError(CardPNGError):
    """
    Raised when the PNG chunk stream is structurally invalid.
    
    Attributes:
        offset: Byte offset in the input buffer where the problem was found
    """
    def __init__(self, message: str = "", offset: Optional[int] = None):
        self.offset = offset
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)


class InvalidSignatureError(ContainerError):
    """Raised when the first 8 bytes are not the PNG signature."""
    pass


class MissingTerminalChunkError(ContainerError):
    """Raised when the chunk stream ends without an IEND chunk."""
    pass


class TruncatedChunkError(MissingTerminalChunkError):
    """
    Raised when a chunk's header, data or CRC runs past the end of the buffer.
    
    A truncated stream never reaches IEND, so this is also a
    MissingTerminalChunkError.
    """
    pass


class CardDecodeError(MetadataReadError):
    """
    Raised when an embedded card payload is not valid base64/UTF-8/JSON.
    """
    pass
