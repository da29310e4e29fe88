#!/usr/bin/env python3
"""
Export, create or inspect entire pack files.

Usage:
    # Export all assets of a pack to a directory
    python scripts/pack_io.py export game.opak output_dir/

    # Create a pack from every file below a directory
    python scripts/pack_io.py import assets_dir/ game.opak --name org.example.game

    # Store the asset index as plain JSON instead of deflated JSON
    python scripts/pack_io.py import assets_dir/ game.opak --format json

    # Show header fields and asset list
    python scripts/pack_io.py info game.opak
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).parent.parent))
from obsidian_pack import IndexFormat, PackManager, decode_header, format_size
from obsidian_pack.config import DEBUG, DEFAULT_INDEX_FORMAT

FORMATS = {"json": IndexFormat.JSON, "deflate": IndexFormat.JSON_DEFLATE}


def export_pack(input_path: Path, output_dir: Path) -> int:
    output_dir.mkdir(parents=True, exist_ok=True)

    manager = PackManager()
    manager.load_from_file(input_path)

    exported = manager.export_all(output_dir)
    print(f"Exported {exported} assets to {output_dir}/")

    return exported


def create_pack(
    input_dir: Path,
    output_file: Path,
    pack_name: Optional[str] = None,
    index_format: int = DEFAULT_INDEX_FORMAT,
) -> int:
    manager = PackManager(index_format)
    manager.create_new(pack_name)
    count = manager.import_all(input_dir)

    if count == 0:
        print("Warning: No files found in directory")
        return 0

    manager.save_as(output_file)
    print(f"Created {output_file.name} with {count} assets")

    return count


def format_name(index_format: int) -> str:
    try:
        return IndexFormat(index_format).name
    except ValueError:
        return str(index_format)


def show_info(input_path: Path) -> None:
    data = input_path.read_bytes()
    header = decode_header(data)

    manager = PackManager()
    manager.load_from_file(input_path)

    print(f"Pack name:    {header.pack_name}")
    print(f"Version:      {header.version}")
    print(f"Index format: {format_name(header.asset_index_format)}")
    print(f"Index:        {header.asset_index_offset} (+{header.asset_index_length})")
    print(f"Assets:       {header.assets_offset} (+{header.assets_length})")
    print(f"Size:         {format_size(len(data))}")
    print(f"MD5:          {manager.get_loaded_checksum()}")
    print()

    for asset_id in manager:
        mime, length = manager.get_asset_info(asset_id)
        print(f"{format_size(length):>10}  {mime:<32} {asset_id}")


def main():
    parser = argparse.ArgumentParser(description="Export or import entire pack files.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser(
        "export", help="Export all assets to directory"
    )
    export_parser.add_argument("input", help="Input pack file (.opak)")
    export_parser.add_argument("output", help="Output directory")

    import_parser = subparsers.add_parser("import", help="Create pack from directory")
    import_parser.add_argument("input_dir", help="Input directory with files to pack")
    import_parser.add_argument("output_file", help="Output pack file (.opak)")
    import_parser.add_argument("--name", "-n", help="Pack name (ASCII)")
    import_parser.add_argument(
        "--format",
        "-f",
        choices=sorted(FORMATS),
        help="Asset index format (default: deflate)",
    )

    info_parser = subparsers.add_parser("info", help="Show pack header and assets")
    info_parser.add_argument("input", help="Input pack file (.opak)")

    args = parser.parse_args()

    if DEBUG:
        logging.basicConfig(level=logging.DEBUG)

    try:
        if args.command in ("export", "info"):
            input_path = Path(args.input)

            if not input_path.exists():
                print(f"Error: Input file not found: {input_path}")
                sys.exit(1)

            if args.command == "export":
                export_pack(input_path, Path(args.output))
            else:
                show_info(input_path)

        elif args.command == "import":
            input_dir = Path(args.input_dir)

            if not input_dir.exists():
                print(f"Error: Input directory not found: {input_dir}")
                sys.exit(1)

            index_format = (
                FORMATS[args.format] if args.format else DEFAULT_INDEX_FORMAT
            )
            create_pack(input_dir, Path(args.output_file), args.name, index_format)

    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
