#!/usr/bin/env python3
"""
Manage assets in a pack file (add/remove/list).

Usage:
    # Add file under its own name
    python scripts/manage_entry.py add game.opak logo.png

    # Add file under a chosen asset id, with metadata
    python scripts/manage_entry.py add game.opak logo.png -a images/logo.png --meta author=me

    # Add a text asset given on the command line
    python scripts/manage_entry.py add-text game.opak hello.txt "Hello!"

    # Remove asset by id
    python scripts/manage_entry.py remove game.opak images/logo.png

    # List asset ids
    python scripts/manage_entry.py list game.opak

    # Save to different file
    python scripts/manage_entry.py add game.opak logo.png -o modified.opak
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

sys.path.insert(0, str(Path(__file__).parent.parent))
from obsidian_pack import PackManager
from obsidian_pack.config import DEBUG


def parse_metadata(items: Optional[List[str]]) -> Dict[str, str]:
    metadata = {}
    for item in items or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ValueError(f"Metadata must be given as key=value: {item!r}")
        metadata[key] = value
    return metadata


def add_file(
    pack_file: Path,
    input_path: Path,
    asset_id: Optional[str] = None,
    mime: Optional[str] = None,
    metadata: Optional[Dict[str, str]] = None,
    output_path: Optional[Path] = None,
) -> str:
    if output_path is None:
        output_path = pack_file

    manager = PackManager()
    manager.load_from_file(pack_file)

    if asset_id is None:
        asset_id = input_path.name
    manager.import_asset(input_path, asset_id, mime, metadata)

    manager.save_as(output_path)
    print(f"Added {input_path.name} as {asset_id}, saved to {output_path.name}")

    return asset_id


def add_text(
    pack_file: Path,
    asset_id: str,
    text: str,
    mime: Optional[str] = "text/plain",
    output_path: Optional[Path] = None,
) -> None:
    if output_path is None:
        output_path = pack_file

    manager = PackManager()
    manager.load_from_file(pack_file)

    manager.import_text(text, asset_id, mime)

    manager.save_as(output_path)
    print(f"Added text asset {asset_id}, saved to {output_path.name}")


def remove_file(
    pack_file: Path,
    asset_id: str,
    output_path: Optional[Path] = None,
) -> None:
    if output_path is None:
        output_path = pack_file

    manager = PackManager()
    manager.load_from_file(pack_file)

    if asset_id not in manager.pack:
        raise ValueError(f"Asset {asset_id!r} not found in {pack_file.name}")

    manager.remove_asset(asset_id)

    manager.save_as(output_path)
    print(f"Removed asset {asset_id}, saved to {output_path.name}")


def list_assets(pack_file: Path) -> List[str]:
    manager = PackManager()
    manager.load_from_file(pack_file)

    asset_ids = manager.pack.list_asset_ids()
    for asset_id in asset_ids:
        print(asset_id)
    return asset_ids


def main():
    parser = argparse.ArgumentParser(description="Manage assets in a pack file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    add_parser = subparsers.add_parser("add", help="Add a file to the pack")
    add_parser.add_argument("pack_file", help="Pack file (.opak)")
    add_parser.add_argument("input", help="File to add")
    add_parser.add_argument(
        "--asset-id", "-a", help="Asset id (default: the file name)"
    )
    add_parser.add_argument("--mime", "-m", help="MIME type (default: guessed)")
    add_parser.add_argument(
        "--meta", action="append", metavar="KEY=VALUE", help="Metadata entry"
    )
    add_parser.add_argument(
        "--output", "-o", help="Output file (defaults to overwriting input pack)"
    )

    text_parser = subparsers.add_parser("add-text", help="Add a text asset")
    text_parser.add_argument("pack_file", help="Pack file (.opak)")
    text_parser.add_argument("asset_id", help="Asset id")
    text_parser.add_argument("text", help="Asset contents (stored as UTF-8)")
    text_parser.add_argument("--mime", "-m", default="text/plain", help="MIME type")
    text_parser.add_argument(
        "--output", "-o", help="Output file (defaults to overwriting input pack)"
    )

    remove_parser = subparsers.add_parser(
        "remove", help="Remove an asset from the pack"
    )
    remove_parser.add_argument("pack_file", help="Pack file (.opak)")
    remove_parser.add_argument("asset_id", help="Id of asset to remove")
    remove_parser.add_argument(
        "--output", "-o", help="Output file (defaults to overwriting input pack)"
    )

    list_parser = subparsers.add_parser("list", help="List asset ids")
    list_parser.add_argument("pack_file", help="Pack file (.opak)")

    args = parser.parse_args()

    if DEBUG:
        logging.basicConfig(level=logging.DEBUG)

    pack_file = Path(args.pack_file)
    if not pack_file.exists():
        print(f"Error: Pack file not found: {pack_file}")
        sys.exit(1)

    output_path = Path(args.output) if getattr(args, "output", None) else None

    try:
        if args.command == "add":
            input_path = Path(args.input)
            if not input_path.exists():
                print(f"Error: Input file not found: {input_path}")
                sys.exit(1)
            add_file(
                pack_file,
                input_path,
                args.asset_id,
                args.mime,
                parse_metadata(args.meta),
                output_path,
            )

        elif args.command == "add-text":
            add_text(pack_file, args.asset_id, args.text, args.mime, output_path)

        elif args.command == "remove":
            remove_file(pack_file, args.asset_id, output_path)

        elif args.command == "list":
            list_assets(pack_file)

    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
