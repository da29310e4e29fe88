import pytest

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def image_data() -> bytes:
    """192 bytes starting with a PNG signature."""
    return PNG_SIGNATURE + bytes(range(184))
