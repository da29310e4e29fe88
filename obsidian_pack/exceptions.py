"""
Errors raised while reading or writing pack files.
"""


class PackError(ValueError):
    """Base class for every pack file error."""


class NotAPackFile(PackError):
    pass


class BufferTruncated(PackError):
    pass


class UnsupportedVersion(PackError):
    def __init__(self, version: int):
        self.version = version
        super().__init__(f"Unsupported pack version: {version}")


class UnsupportedIndexFormat(PackError):
    def __init__(self, index_format: int):
        self.index_format = index_format
        super().__init__(f"Unsupported asset index format: {index_format}")


class CorruptedIndex(PackError):
    """The asset index cannot be decoded or points outside the asset data."""


class InvalidDataUrl(PackError):
    pass
