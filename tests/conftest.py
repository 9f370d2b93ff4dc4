# Test fixtures and configuration
import io
import pytest
import sys
from pathlib import Path

from PIL import Image

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from fitting_room.models import PreparedImage, SourceFile

RED = (220, 30, 30)
BLUE = (30, 30, 220)


def make_image_bytes(width: int, height: int, fmt: str = "JPEG") -> bytes:
    """Two-tone test image: left half red, right half blue."""
    img = Image.new("RGB", (width, height), BLUE)
    img.paste(RED, (0, 0, width // 2, height))
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def decode(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


@pytest.fixture
def person_jpeg():
    """200x100 JPEG person photo."""
    return SourceFile(media_type="image/jpeg", data=make_image_bytes(200, 100, "JPEG"), filename="person.jpg")


@pytest.fixture
def outfit_png():
    """50x50 PNG outfit photo."""
    return SourceFile(media_type="image/png", data=make_image_bytes(50, 50, "PNG"), filename="outfit.png")


@pytest.fixture
def portrait_jpeg():
    """100x200 JPEG."""
    return SourceFile(media_type="image/jpeg", data=make_image_bytes(100, 200, "JPEG"), filename="portrait.jpg")


@pytest.fixture
def text_file():
    """4-byte text file posing as an upload."""
    return SourceFile(media_type="text/plain", data=b"text", filename="notes.txt")


@pytest.fixture
def person_image():
    return PreparedImage(base64="UEVSU09O", mime_type="image/jpeg")


@pytest.fixture
def outfit_image():
    return PreparedImage(base64="T1VURklU", mime_type="image/png")
