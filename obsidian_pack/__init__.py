"""
obsidian_pack - Obsidian pack file (OPAK) container format utilities.
"""

from .model import (
    PackFile,
    PackHeader,
    encode_header,
    decode_header,
    is_pack_file,
    MAGIC,
    VERSION,
    HEADER_SIZE,
    MIMETYPE,
    DEFAULT_PACK_NAME,
)
from .codecs import IndexFormat, IndexCodec, register_codec, get_codec
from .data_url import DEFAULT_MIME, build_data_url, parse_data_url
from .exceptions import (
    PackError,
    NotAPackFile,
    BufferTruncated,
    UnsupportedVersion,
    UnsupportedIndexFormat,
    CorruptedIndex,
    InvalidDataUrl,
)
from .file_types import guess_mime, mime_to_ext, format_size
from .manager import PackManager

__all__ = [
    "PackFile",
    "PackHeader",
    "PackManager",
    "encode_header",
    "decode_header",
    "is_pack_file",
    "MAGIC",
    "VERSION",
    "HEADER_SIZE",
    "MIMETYPE",
    "DEFAULT_MIME",
    "DEFAULT_PACK_NAME",
    "IndexFormat",
    "IndexCodec",
    "register_codec",
    "get_codec",
    "build_data_url",
    "parse_data_url",
    "PackError",
    "NotAPackFile",
    "BufferTruncated",
    "UnsupportedVersion",
    "UnsupportedIndexFormat",
    "CorruptedIndex",
    "InvalidDataUrl",
    "guess_mime",
    "mime_to_ext",
    "format_size",
]
