"""
Asset index codecs.

The asset index is a mapping of asset id to its offset, length, MIME type and
metadata. How it is serialized inside a pack is selected by a one byte format
tag stored in the header:

    0: JSON
    1: JSON, zlib deflated
"""

import json
import logging
import zlib
from enum import IntEnum
from typing import Any, Callable, Dict, NamedTuple

from .exceptions import CorruptedIndex, UnsupportedIndexFormat

logger = logging.getLogger(__name__)

AssetIndex = Dict[str, Dict[str, Any]]


class IndexFormat(IntEnum):
    JSON = 0
    JSON_DEFLATE = 1


class IndexCodec(NamedTuple):
    encode: Callable[[AssetIndex], bytes]
    decode: Callable[[bytes], AssetIndex]


def json_encode(index: AssetIndex) -> bytes:
    return json.dumps(index, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def json_decode(data: bytes) -> AssetIndex:
    return json.loads(bytes(data).decode("utf-8"))


def json_deflate_encode(index: AssetIndex) -> bytes:
    return zlib.compress(json_encode(index))


def json_deflate_decode(data: bytes) -> AssetIndex:
    return json_decode(zlib.decompress(data))


_CODECS: Dict[int, IndexCodec] = {
    IndexFormat.JSON: IndexCodec(json_encode, json_decode),
    IndexFormat.JSON_DEFLATE: IndexCodec(json_deflate_encode, json_deflate_decode),
}


def register_codec(
    index_format: int,
    encode: Callable[[AssetIndex], bytes],
    decode: Callable[[bytes], AssetIndex],
) -> None:
    """Register (or replace) the codec used for a format tag."""
    if not 0 <= index_format <= 0xFF:
        raise ValueError(f"Index format tag must fit in one byte: {index_format}")
    _CODECS[int(index_format)] = IndexCodec(encode, decode)
    logger.debug("registered asset index codec %d", index_format)


def get_codec(index_format: int) -> IndexCodec:
    try:
        return _CODECS[int(index_format)]
    except KeyError:
        raise UnsupportedIndexFormat(index_format) from None


def encode_index(index: AssetIndex, index_format: int) -> bytes:
    return get_codec(index_format).encode(index)


def decode_index(data: bytes, index_format: int) -> AssetIndex:
    codec = get_codec(index_format)
    try:
        index = codec.decode(data)
    except (ValueError, zlib.error) as e:
        raise CorruptedIndex(f"Cannot decode asset index: {e}") from e

    if not isinstance(index, dict):
        raise CorruptedIndex("Asset index is not a mapping")
    return index
