# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Card embedding configuration

Character cards are stored in tEXt chunks keyed "ccv3" (Character Card V3).
Many tools only understand V2 cards, which they look for under "chara",
so V2 cards are written under both keywords by default.

Copyright 2025 DNAi inc.
"""

import os
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Set, Tuple

PRIMARY_KEYWORD = "ccv3"
LEGACY_KEYWORD = "chara"
LEGACY_SPEC = "chara_card_v2"

COMPAT_MODE_ENV = "CARDPNG_COMPAT_MODE"


class CompatibilityMode(Enum):
    """When to also embed the card under the legacy keyword."""
    AUTO = "auto"  # Only for cards whose spec is chara_card_v2
    ALWAYS = "always"
    NEVER = "never"


class EmbedConfig:
    """
    Configuration for card embedding.
    
    Decides which tEXt keywords a card is written under and which
    existing tEXt chunks are removed before writing.
    """
    
    def __init__(
        self,
        mode: CompatibilityMode = CompatibilityMode.AUTO,
        strip_keywords: Optional[Iterable[str]] = None,
        ensure_ascii: bool = False
    ):
        """
        Initialize embedding configuration.
        
        Args:
            mode: Legacy keyword policy (AUTO, ALWAYS or NEVER)
            strip_keywords: tEXt keywords to remove before inserting the card,
                            matched case-insensitively (default: ccv3 and chara)
            ensure_ascii: Escape non-ASCII characters in the JSON text
        """
        self.mode = mode
        self.primary_keyword = PRIMARY_KEYWORD
        self.legacy_keyword = LEGACY_KEYWORD
        self.legacy_spec = LEGACY_SPEC
        self.ensure_ascii = ensure_ascii
        if strip_keywords is None:
            strip_keywords = (PRIMARY_KEYWORD, LEGACY_KEYWORD)
        self.strip_keywords: Set[str] = {k.lower() for k in strip_keywords}
    
    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EmbedConfig":
        """
        Build a configuration from environment variables.
        
        Reads CARDPNG_COMPAT_MODE (auto, always or never).
        
        Raises:
            ValueError: If the variable holds an unknown mode
        """
        if environ is None:
            environ = os.environ
        value = environ.get(COMPAT_MODE_ENV, "").strip().lower()
        if not value:
            return cls()
        try:
            mode = CompatibilityMode(value)
        except ValueError:
            valid = ', '.join(m.value for m in CompatibilityMode)
            raise ValueError(f"Invalid {COMPAT_MODE_ENV}: {value!r}. Expected one of: {valid}")
        return cls(mode=mode)
    
    def is_legacy_card(self, card: Any) -> bool:
        if not isinstance(card, Mapping) or "spec" not in card:
            return False
        return str(card["spec"]) == self.legacy_spec
    
    def keywords_for(self, card: Any) -> Tuple[str, ...]:
        """
        Keywords a card is embedded under, in insertion order.
        """
        if self.mode == CompatibilityMode.ALWAYS:
            return (self.primary_keyword, self.legacy_keyword)
        if self.mode == CompatibilityMode.AUTO and self.is_legacy_card(card):
            return (self.primary_keyword, self.legacy_keyword)
        return (self.primary_keyword,)
