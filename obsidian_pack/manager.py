"""
Pack file manager - File level operations on a single pack.
"""

import hashlib
import logging
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Optional, Set, Tuple

from .config import DEFAULT_INDEX_FORMAT
from .file_types import guess_mime
from .data_url import parse_data_url
from .model import PackFile, decode_header

logger = logging.getLogger(__name__)


def asset_id_for(path: Path, root: Path) -> str:
    return path.relative_to(root).as_posix()


def asset_path_for(asset_id: str, root: Path) -> Path:
    """Map an asset id onto a file below ``root``, refusing ids that escape it."""
    parts = PurePosixPath(asset_id).parts
    if not parts or asset_id.startswith("/") or ".." in parts:
        raise ValueError(f"Asset id cannot be used as a file path: {asset_id!r}")
    return root.joinpath(*parts)


class PackManager:
    """Manages pack file operations."""

    def __init__(self, index_format: Optional[int] = None):
        self.pack: Optional[PackFile] = None
        self.file_path: Optional[Path] = None
        # None keeps the format of the loaded pack
        self.index_format: Optional[int] = index_format
        self._loaded_format: Optional[int] = None
        self.modified: bool = False
        self.modified_ids: Set[str] = set()
        self._loaded_data: Optional[bytes] = None
        # Checksum caching
        self._loaded_checksum: Optional[str] = None
        self._current_checksum: Optional[str] = None

    def create_new(self, pack_name: Optional[str] = None) -> None:
        self.pack = PackFile()
        if pack_name is not None:
            self.pack.pack_name = pack_name
        self.file_path = None
        self.modified = True
        self.modified_ids.clear()
        self._loaded_format = None
        self._loaded_data = None
        self._cache_loaded_checksum()
        self._invalidate_current_checksum()

    def load_from_file(self, path: Path) -> int:
        data = path.read_bytes()
        self._load(data)
        self.file_path = path
        return len(self.pack)

    def load_from_data_url(self, url: str) -> int:
        _, data = parse_data_url(url)
        self._load(data)
        self.file_path = None
        return len(self.pack)

    def _load(self, data: bytes) -> None:
        self.pack = PackFile(data)
        self._loaded_format = decode_header(data).asset_index_format
        self.modified = False
        self.modified_ids.clear()
        self._loaded_data = data
        self._cache_loaded_checksum()
        self._current_checksum = self._loaded_checksum
        logger.debug("loaded pack %r with %d assets", self.pack.pack_name, len(self.pack))

    def get_export_format(self) -> int:
        if self.index_format is not None:
            return self.index_format
        if self._loaded_format is not None:
            return self._loaded_format
        return DEFAULT_INDEX_FORMAT

    def _require_pack(self) -> PackFile:
        if self.pack is None:
            raise RuntimeError("No file loaded")
        return self.pack

    def save(self) -> None:
        if self.pack is None or self.file_path is None:
            raise RuntimeError("No file loaded")

        self._save_to_file(self.file_path)

    def save_as(self, path: Path) -> None:
        self._require_pack()
        self._save_to_file(path)

    def _save_to_file(self, path: Path) -> None:
        data = self.pack.to_bytes(self.get_export_format())
        path.write_bytes(data)

        self.file_path = path
        self.modified = False
        self.modified_ids.clear()
        self._loaded_data = data
        self._cache_loaded_checksum()
        self._current_checksum = self._loaded_checksum
        logger.debug("saved %d bytes to %s", len(data), path)

    def to_data_url(self) -> str:
        return self._require_pack().to_data_url(self.get_export_format())

    def import_asset(
        self,
        path: Path,
        asset_id: Optional[str] = None,
        mime: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Add a file as an asset, replacing an existing one with the same id."""
        self._require_pack()

        data = path.read_bytes()
        if asset_id is None:
            asset_id = path.name
        return self.import_data(data, asset_id, mime or guess_mime(path, data), metadata)

    def import_data(
        self,
        data: bytes,
        asset_id: str,
        mime: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Store raw data as an asset. Returns the MIME type it was stored with."""
        pack = self._require_pack()

        pack.add_asset(data, asset_id, mime, metadata)
        self.modified = True
        self.modified_ids.add(asset_id)
        self._invalidate_current_checksum()

        return pack.get_asset_record(asset_id)["mime"]

    def import_text(
        self,
        text: str,
        asset_id: str,
        mime: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        pack = self._require_pack()

        pack.add_asset_from_string(text, asset_id, mime, metadata)
        self.modified = True
        self.modified_ids.add(asset_id)
        self._invalidate_current_checksum()

        return pack.get_asset_record(asset_id)["mime"]

    def remove_asset(self, asset_id: str) -> None:
        pack = self._require_pack()

        if not pack.asset_exists(asset_id):
            raise KeyError(asset_id)

        pack.remove_asset(asset_id)
        self.modified = True
        self.modified_ids.discard(asset_id)
        self._invalidate_current_checksum()

    def get_asset_data(self, asset_id: str) -> bytes:
        pack = self._require_pack()

        data = pack.get_asset_bytes(asset_id)
        if data is None:
            raise KeyError(asset_id)
        return bytes(data)

    def export_asset(self, asset_id: str, path: Path) -> None:
        path.write_bytes(self.get_asset_data(asset_id))

    def export_all(self, directory: Path) -> int:
        pack = self._require_pack()

        for asset_id in pack.list_asset_ids():
            target = asset_path_for(asset_id, directory)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(bytes(pack.get_asset_bytes(asset_id)))

        return len(pack)

    def import_all(self, directory: Path) -> int:
        """Replace every asset with the files found below ``directory``."""
        pack = self._require_pack()

        files = sorted(f for f in directory.rglob("*") if f.is_file())

        if not files:
            return 0

        for asset_id in pack.list_asset_ids():
            pack.remove_asset(asset_id)

        for file in files:
            data = file.read_bytes()
            pack.add_asset(data, asset_id_for(file, directory), guess_mime(file, data))

        self.modified = True
        self.modified_ids = set(pack.list_asset_ids())
        self._invalidate_current_checksum()

        return len(pack)

    def get_asset_info(self, asset_id: str) -> Tuple[str, int]:
        record = self._require_pack().get_asset_record(asset_id)
        return record["mime"], record["length"]

    def get_loaded_checksum(self) -> str:
        if self._loaded_checksum is None:
            return "-"
        return self._loaded_checksum

    def get_current_checksum(self) -> str:
        if self.pack is None:
            return "-"
        if self._current_checksum is None:
            self._current_checksum = hashlib.md5(
                self.pack.to_bytes(self.get_export_format())
            ).hexdigest()
        return self._current_checksum

    def _invalidate_current_checksum(self):
        """Call when pack contents change."""
        self._current_checksum = None

    def _cache_loaded_checksum(self):
        """Calculate and cache loaded data checksum."""
        if self._loaded_data is not None:
            self._loaded_checksum = hashlib.md5(self._loaded_data).hexdigest()
        else:
            self._loaded_checksum = None

    def get_loaded_size(self) -> int:
        if self._loaded_data is None:
            return 0
        return len(self._loaded_data)

    def get_current_size(self) -> int:
        if self.pack is None:
            return 0
        return len(self.pack.to_bytes(self.get_export_format()))

    def __len__(self) -> int:
        if self.pack is None:
            return 0
        return len(self.pack)

    def __iter__(self):
        if self.pack is None:
            return iter([])
        return iter(self.pack)
