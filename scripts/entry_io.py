#!/usr/bin/env python3
"""
Export or import a single asset from/to a pack file.

Usage:
    # Export single asset (output name defaults to the asset id)
    python scripts/entry_io.py export game.opak images/logo.png
    python scripts/entry_io.py export game.opak images/logo.png logo.png

    # Export single asset as a data URL on stdout
    python scripts/entry_io.py export game.opak images/logo.png --data-url

    # Import single asset (overwrites pack)
    python scripts/entry_io.py import game.opak images/logo.png new_logo.png

    # Import single asset with explicit MIME type and separate output
    python scripts/entry_io.py import game.opak readme readme.md -m text/markdown -o new.opak
"""

import argparse
import logging
import sys
from pathlib import Path, PurePosixPath
from typing import Optional

sys.path.insert(0, str(Path(__file__).parent.parent))
from obsidian_pack import PackManager, mime_to_ext
from obsidian_pack.config import DEBUG


def default_output_path(asset_id: str, mime: str) -> Path:
    name = PurePosixPath(asset_id).name or "asset"
    if not PurePosixPath(name).suffix:
        name += mime_to_ext(mime)
    return Path(name)


def export_entry(
    pack_file: Path,
    asset_id: str,
    output_path: Optional[Path] = None,
) -> Path:
    manager = PackManager()
    manager.load_from_file(pack_file)

    if asset_id not in manager.pack:
        raise ValueError(f"Asset {asset_id!r} not found in {pack_file.name}")

    if output_path is None:
        mime, _ = manager.get_asset_info(asset_id)
        output_path = default_output_path(asset_id, mime)

    manager.export_asset(asset_id, output_path)
    print(f"Exported asset {asset_id} to {output_path.name}")

    return output_path


def export_entry_data_url(pack_file: Path, asset_id: str) -> str:
    manager = PackManager()
    manager.load_from_file(pack_file)

    if asset_id not in manager.pack:
        raise ValueError(f"Asset {asset_id!r} not found in {pack_file.name}")

    return manager.pack.get_asset_as_data_url(asset_id)


def import_entry(
    pack_file: Path,
    asset_id: str,
    input_path: Path,
    output_path: Optional[Path] = None,
    mime: Optional[str] = None,
) -> str:
    if output_path is None:
        output_path = pack_file

    manager = PackManager()
    manager.load_from_file(pack_file)

    stored_mime = manager.import_asset(input_path, asset_id, mime)

    manager.save_as(output_path)
    print(
        f"Imported {input_path.name} as {asset_id} ({stored_mime}), "
        f"saved to {output_path.name}"
    )

    return stored_mime


def main():
    parser = argparse.ArgumentParser(
        description="Export or import a single asset from/to a pack file."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Export a single asset")
    export_parser.add_argument("pack_file", help="Pack file (.opak)")
    export_parser.add_argument("asset_id", help="Asset id to export")
    export_parser.add_argument("output", nargs="?", help="Output file path")
    export_parser.add_argument(
        "--data-url",
        action="store_true",
        help="Print the asset as a data URL instead of writing a file",
    )

    import_parser = subparsers.add_parser("import", help="Import a single asset")
    import_parser.add_argument("pack_file", help="Pack file (.opak)")
    import_parser.add_argument("asset_id", help="Asset id to replace or create")
    import_parser.add_argument("input", help="Input file to import")
    import_parser.add_argument(
        "--mime", "-m", help="MIME type (default: guessed from the file)"
    )
    import_parser.add_argument(
        "--output",
        "-o",
        help="Output file (defaults to overwriting input pack)",
    )

    args = parser.parse_args()

    if DEBUG:
        logging.basicConfig(level=logging.DEBUG)

    pack_file = Path(args.pack_file)
    if not pack_file.exists():
        print(f"Error: Pack file not found: {pack_file}")
        sys.exit(1)

    try:
        if args.command == "export":
            if args.data_url:
                print(export_entry_data_url(pack_file, args.asset_id))
            else:
                output_path = Path(args.output) if args.output else None
                export_entry(pack_file, args.asset_id, output_path)

        elif args.command == "import":
            input_path = Path(args.input)
            if not input_path.exists():
                print(f"Error: Input file not found: {input_path}")
                sys.exit(1)

            output_path = Path(args.output) if args.output else None
            import_entry(pack_file, args.asset_id, input_path, output_path, args.mime)

    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
