# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Command-line interface for cardpng

Provides a CLI for reading, writing and inspecting character cards
embedded in PNG files.

Copyright 2025 DNAi inc.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cardpng.config import CompatibilityMode, EmbedConfig
from cardpng.core import CardPNG, load_card_file
from cardpng.exceptions import CardPNGError
from cardpng.png_chunks import Chunk, text_value
from cardpng.png_parser import ParsedCardData


def format_card(parsed: ParsedCardData, format_type: str = "text") -> str:
    """
    Format a parsed card for output.
    
    Args:
        parsed: Parsed card
        format_type: Output format ('text' or 'json')
        
    Returns:
        Formatted output string
    """
    if format_type == "json":
        return json.dumps(parsed.data, indent=2, ensure_ascii=False)
    
    lines = [
        f"Chunk: {parsed.chunk_type}",
        f"SpecVersion: {parsed.spec_version}",
    ]
    card = parsed.data if isinstance(parsed.data, dict) else {}
    fields = card.get('data') if isinstance(card.get('data'), dict) else card
    for field in ('name', 'creator', 'character_version'):
        if fields.get(field):
            lines.append(f"{field}: {fields[field]}")
    if isinstance(fields.get('tags'), list) and fields['tags']:
        lines.append(f"tags: {', '.join(str(t) for t in fields['tags'])}")
    return "\n".join(lines)


def format_chunk(chunk: Chunk) -> str:
    """One line per chunk: offset, type, length, CRC status, tEXt keyword."""
    line = f"{chunk.offset:>10}  {chunk.type_name}  {chunk.length:>10}  {'ok' if chunk.crc_valid else 'BAD CRC'}"
    if chunk.keyword is not None:
        line += f"  keyword={chunk.keyword!r} text_len={len(text_value(chunk.data))}"
    return line


def read_card(file_path: Path, format_type: str = "text") -> int:
    with CardPNG(file_path, read_only=True) as png:
        parsed = png.get_parsed()
    if parsed is None:
        print(f"No character card found in {file_path}", file=sys.stderr)
        return 1
    print(format_card(parsed, format_type))
    return 0


def write_card(
    file_path: Path,
    card_path: Path,
    output_path: Optional[Path] = None,
    compat: Optional[str] = None
) -> int:
    if compat:
        config = EmbedConfig(mode=CompatibilityMode(compat))
    else:
        config = EmbedConfig.from_env()
    card = load_card_file(card_path)
    with CardPNG(file_path, config=config) as png:
        png.set_card(card)
        written = png.save(output_path)
    print(f"Card written successfully to {written}")
    return 0


def list_card_chunks(file_path: Path) -> int:
    with CardPNG(file_path, read_only=True) as png:
        for chunk in png.chunks():
            print(format_chunk(chunk))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cardpng",
        description="cardpng - Read and write character cards embedded in PNG files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show the embedded card
  cardpng read card.png
  
  # Print the card JSON
  cardpng read --json card.png
  
  # Embed an edited card into a copy of the image
  cardpng write card.png edited.json -o edited.png
  
  # List PNG chunks
  cardpng chunks card.png
        """
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    
    subparsers = parser.add_subparsers(dest='command', required=True)
    
    read_parser = subparsers.add_parser('read', help='Show the card embedded in a PNG file')
    read_parser.add_argument('image', type=Path, help='PNG file')
    read_parser.add_argument('-j', '--json', action='store_true', help='Print the card as JSON')
    
    write_parser = subparsers.add_parser('write', help='Embed a card JSON file in a PNG file')
    write_parser.add_argument('image', type=Path, help='PNG file')
    write_parser.add_argument('card', type=Path, help='Card JSON file')
    write_parser.add_argument('-o', '--output', type=Path, help='Output file (default: overwrite IMAGE)')
    write_parser.add_argument(
        '--compat',
        choices=[m.value for m in CompatibilityMode],
        help='Also embed under the legacy "chara" keyword (default: auto, for V2 cards)'
    )
    
    chunks_parser = subparsers.add_parser('chunks', help='List the chunks of a PNG file')
    chunks_parser.add_argument('image', type=Path, help='PNG file')
    
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    
    try:
        if args.command == 'read':
            return read_card(args.image, "json" if args.json else "text")
        if args.command == 'write':
            return write_card(args.image, args.card, args.output, args.compat)
        return list_card_chunks(args.image)
    except (CardPNGError, OSError, ValueError) as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
