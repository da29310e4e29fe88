"""
Obsidian pack file container format.

Format (all integers big-endian):
    Header (25 bytes + pack name):
        - 4 bytes: Magic "OPAK"
        - 2 bytes: Format version (uint16)
        - 1 byte:  Asset index format (uint8)
        - 4 bytes: Asset index offset (uint32)
        - 4 bytes: Asset index length (uint32)
        - 4 bytes: Asset data offset (uint32)
        - 4 bytes: Asset data length (uint32)
        - 2 bytes: Pack name length (uint16)
        - N bytes: Pack name (ASCII)
    Asset index: encoded by the codec selected by the format tag.
    Asset data: asset payloads concatenated in index order, no padding.

Offsets stored in the asset index are relative to the start of the asset
data region.

A PackFile instance is not thread safe; callers sharing one across threads
must serialize access themselves.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from . import codecs
from .codecs import IndexFormat
from .data_url import DEFAULT_MIME, build_data_url, parse_data_url
from .exceptions import (
    BufferTruncated,
    CorruptedIndex,
    NotAPackFile,
    UnsupportedVersion,
)

logger = logging.getLogger(__name__)

MAGIC = b"OPAK"
VERSION = 1
HEADER_SIZE = 25
MIMETYPE = "application/x-obsidian-pack"
DEFAULT_PACK_NAME = "org.example.unnamed-pack"

BytesLike = Union[bytes, bytearray, memoryview]


def read_u8(data: BytesLike, offset: int) -> int:
    return data[offset]


def read_u16(data: BytesLike, offset: int) -> int:
    return int.from_bytes(data[offset : offset + 2], "big")


def read_u32(data: BytesLike, offset: int) -> int:
    return int.from_bytes(data[offset : offset + 4], "big")


def _is_u32(value: Any) -> bool:
    # bool is an int subclass; JSON floats such as 1.5 or Infinity are refused
    return type(value) is int and 0 <= value <= 0xFFFFFFFF


def write_u8(data: bytearray, value: int, offset: int) -> None:
    data[offset : offset + 1] = value.to_bytes(1, "big")


def write_u16(data: bytearray, value: int, offset: int) -> None:
    data[offset : offset + 2] = value.to_bytes(2, "big")


def write_u32(data: bytearray, value: int, offset: int) -> None:
    data[offset : offset + 4] = value.to_bytes(4, "big")


class PackHeader:
    """Decoded header fields of a pack file."""

    def __init__(
        self,
        magic: bytes,
        version: int,
        asset_index_format: int,
        asset_index_offset: int,
        asset_index_length: int,
        assets_offset: int,
        assets_length: int,
        pack_name: str,
    ):
        self.magic = magic
        self.version = version
        self.asset_index_format = asset_index_format
        self.asset_index_offset = asset_index_offset
        self.asset_index_length = asset_index_length
        self.assets_offset = assets_offset
        self.assets_length = assets_length
        self.pack_name = pack_name

    @property
    def pack_name_length(self) -> int:
        return len(self.pack_name)

    @property
    def size(self) -> int:
        return HEADER_SIZE + self.pack_name_length

    def __repr__(self) -> str:
        return (
            f"<PackHeader version={self.version} name={self.pack_name!r} "
            f"index=({self.asset_index_format}, {self.asset_index_offset}, "
            f"{self.asset_index_length}) "
            f"assets=({self.assets_offset}, {self.assets_length})>"
        )


def encode_header(
    pack_name: str,
    asset_index_format: int,
    asset_index_length: int,
    assets_length: int,
    version: int = VERSION,
) -> bytes:
    name = pack_name.encode("ascii")
    header_len = HEADER_SIZE + len(name)

    out = bytearray(header_len)
    out[0:4] = MAGIC
    write_u16(out, version, 4)
    write_u8(out, asset_index_format, 6)
    write_u32(out, header_len, 7)
    write_u32(out, asset_index_length, 11)
    write_u32(out, header_len + asset_index_length, 15)
    write_u32(out, assets_length, 19)
    write_u16(out, len(name), 23)
    out[HEADER_SIZE:] = name

    return bytes(out)


def decode_header(data: BytesLike) -> PackHeader:
    if len(data) < HEADER_SIZE:
        raise BufferTruncated(
            f"Buffer too small for a pack header ({len(data)} < {HEADER_SIZE})"
        )

    name_len = read_u16(data, 23)
    try:
        pack_name = bytes(data[HEADER_SIZE : HEADER_SIZE + name_len]).decode("ascii")
    except UnicodeDecodeError as e:
        raise NotAPackFile("Pack name is not ASCII") from e

    return PackHeader(
        magic=bytes(data[0:4]),
        version=read_u16(data, 4),
        asset_index_format=read_u8(data, 6),
        asset_index_offset=read_u32(data, 7),
        asset_index_length=read_u32(data, 11),
        assets_offset=read_u32(data, 15),
        assets_length=read_u32(data, 19),
        pack_name=pack_name,
    )


def is_pack_file(data: BytesLike) -> bool:
    """Check the magic and that the declared lengths cover the whole buffer.

    Offsets, version and index format are not checked here.
    """
    if len(data) <= HEADER_SIZE:
        return False
    if bytes(data[0:4]) != MAGIC:
        return False
    expected = read_u32(data, 11) + read_u32(data, 19) + read_u16(data, 23) + HEADER_SIZE
    return len(data) == expected


class AssetRecord:
    __slots__ = ("data", "mime", "metadata")

    def __init__(self, data: BytesLike, mime: str, metadata: Dict[str, Any]):
        self.data = data
        self.mime = mime
        self.metadata = metadata

    def __repr__(self) -> str:
        return f"<AssetRecord mime={self.mime!r} length={len(self.data)}>"


class PackFile:
    def __init__(self, source: Optional[Union[BytesLike, str]] = None):
        self.version: int = VERSION
        self._pack_name: str = DEFAULT_PACK_NAME
        # dict keeps insertion order, which is the export order
        self._assets: Dict[str, AssetRecord] = {}

        if isinstance(source, str):
            self._load_from_data_url(source)
        elif source is not None:
            self._load_from_buffer(source)

    # Header

    @property
    def pack_name(self) -> str:
        return self._pack_name

    @pack_name.setter
    def pack_name(self, value: str) -> None:
        try:
            encoded = value.encode("ascii")
        except UnicodeEncodeError as e:
            raise ValueError(f"Pack name must be ASCII: {value!r}") from e
        if len(encoded) > 0xFFFF:
            raise ValueError("Pack name is longer than 65535 bytes")
        self._pack_name = value

    # Assets

    def list_asset_ids(self) -> List[str]:
        return list(self._assets)

    def asset_exists(self, asset_id: str) -> bool:
        return asset_id in self._assets

    def get_asset_bytes(self, asset_id: str) -> Optional[BytesLike]:
        record = self._assets.get(asset_id)
        if record is None:
            return None
        return record.data

    def get_asset_as_data_url(self, asset_id: str) -> str:
        record = self._assets.get(asset_id)
        if record is None:
            return build_data_url(DEFAULT_MIME, b"")
        return build_data_url(record.mime, record.data)

    def get_asset_as_text(self, asset_id: str, encoding: str = "utf-8") -> str:
        record = self._assets.get(asset_id)
        if record is None:
            return ""
        return bytes(record.data).decode(encoding, errors="replace")

    def get_asset_record(self, asset_id: str) -> Dict[str, Any]:
        """Describe an asset. ``offset`` is only known while exporting."""
        record = self._assets.get(asset_id)
        if record is None:
            return {"offset": None, "length": 0, "mime": DEFAULT_MIME, "metadata": {}}
        return {
            "offset": None,
            "length": len(record.data),
            "mime": record.mime,
            "metadata": record.metadata,
        }

    def add_asset(
        self,
        data: BytesLike,
        asset_id: str,
        mime: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Store ``data`` under ``asset_id``, replacing any existing asset.

        The buffer is kept by reference, not copied.
        """
        if asset_id in self._assets:
            self.remove_asset(asset_id)

        self._assets[asset_id] = AssetRecord(
            data, mime or DEFAULT_MIME, metadata if metadata is not None else {}
        )
        logger.debug("added asset %r (%d bytes)", asset_id, len(data))

    def add_asset_from_data_url(
        self,
        url: str,
        asset_id: str,
        mime: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        url_mime, data = parse_data_url(url)
        self.add_asset(data, asset_id, mime or url_mime, metadata)

    def add_asset_from_string(
        self,
        text: str,
        asset_id: str,
        mime: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        encoding: str = "utf-8",
    ) -> None:
        self.add_asset(text.encode(encoding), asset_id, mime, metadata)

    def remove_asset(self, asset_id: str) -> None:
        self._assets.pop(asset_id, None)

    # Export

    def to_bytes(self, index_format: int = IndexFormat.JSON_DEFLATE) -> bytes:
        index_data, assets_data = self._export_assets(index_format)
        header = self._export_header(index_format, len(index_data), len(assets_data))
        logger.debug(
            "exported pack %r: %d assets, index %d bytes, data %d bytes",
            self._pack_name,
            len(self._assets),
            len(index_data),
            len(assets_data),
        )
        return header + index_data + assets_data

    def to_data_url(self, index_format: int = IndexFormat.JSON_DEFLATE) -> str:
        return build_data_url(MIMETYPE, self.to_bytes(index_format))

    def _export_header(
        self, index_format: int, index_length: int, assets_length: int
    ) -> bytes:
        return encode_header(
            self._pack_name, index_format, index_length, assets_length, self.version
        )

    def _export_assets(self, index_format: int) -> Tuple[bytes, bytes]:
        offset = 0
        index: codecs.AssetIndex = {}
        chunks: List[BytesLike] = []

        for asset_id, record in self._assets.items():
            entry = self.get_asset_record(asset_id)
            entry["offset"] = offset
            index[asset_id] = entry
            chunks.append(record.data)
            offset += len(record.data)

        return codecs.encode_index(index, index_format), b"".join(chunks)

    # Loading

    def _load_from_buffer(self, data: BytesLike) -> None:
        if not is_pack_file(data):
            raise NotAPackFile("Buffer is not an Obsidian pack file")

        header = decode_header(data)
        if header.version != VERSION:
            raise UnsupportedVersion(header.version)

        logger.debug("loading %r", header)

        self._pack_name = header.pack_name
        self._assets = self._load_assets(
            data,
            header.asset_index_offset,
            header.asset_index_length,
            header.asset_index_format,
            header.assets_offset,
            header.assets_length,
        )

    def _load_from_data_url(self, url: str) -> None:
        _, data = parse_data_url(url)
        self._load_from_buffer(data)

    def _load_assets(
        self,
        data: BytesLike,
        index_offset: int,
        index_length: int,
        index_format: int,
        assets_offset: int,
        assets_length: int,
    ) -> Dict[str, AssetRecord]:
        view = memoryview(data) if not isinstance(data, memoryview) else data
        index = codecs.decode_index(
            view[index_offset : index_offset + index_length].tobytes(), index_format
        )

        assets: Dict[str, AssetRecord] = {}
        for asset_id, entry in index.items():
            if not isinstance(entry, dict):
                raise CorruptedIndex(f"Bad index entry for asset {asset_id!r}")

            offset = entry.get("offset")
            length = entry.get("length")
            if not _is_u32(offset) or not _is_u32(length):
                raise CorruptedIndex(
                    f"Bad offset or length for asset {asset_id!r}: {offset!r}, {length!r}"
                )

            if offset + length > assets_length:
                raise CorruptedIndex(
                    f"Asset {asset_id!r} lies outside the asset data region"
                )

            metadata = entry.get("metadata") or {}
            if not isinstance(metadata, dict):
                raise CorruptedIndex(f"Metadata of asset {asset_id!r} is not a mapping")

            start = assets_offset + offset
            assets[asset_id] = AssetRecord(
                view[start : start + length].tobytes(),
                entry.get("mime") or DEFAULT_MIME,
                metadata,
            )

        return assets

    def __len__(self) -> int:
        return len(self._assets)

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self._assets

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._assets))
