"""Image Normalizer - rotates and re-encodes an uploaded image into a PreparedImage."""

import asyncio
import base64
import io
import logging
from enum import Enum
from typing import Callable

from PIL import Image, ImageOps

from ..errors import DecodeFailed, NormalizerError, RasterUnavailable, UnsupportedMediaType
from ..models import PreparedImage, SourceFile
from .previews import PreviewStore

logger = logging.getLogger(__name__)

DEFAULT_JPEG_QUALITY = 92

# Clockwise quarter turns expressed as Pillow transposes (Pillow rotates counter-clockwise)
_CLOCKWISE_TRANSPOSE = {
    1: Image.Transpose.ROTATE_270,
    2: Image.Transpose.ROTATE_180,
    3: Image.Transpose.ROTATE_90,
}

# Non-standard media types browsers still advertise
_MIME_ALIASES = {
    "image/jpg": "image/jpeg",
    "image/pjpeg": "image/jpeg",
    "image/x-png": "image/png",
}

# Modes the JPEG encoder accepts as-is
_JPEG_MODES = ("RGB", "L", "CMYK")


class RotateDirection(str, Enum):
    LEFT = "left"
    RIGHT = "right"


def normalize_quarters(quarters: int) -> int:
    """Reduce a quarter-turn count to 0..3, negative counts included."""
    return int(quarters) % 4


def format_for_mime(mime_type: str) -> str:
    """Find the Pillow format that encodes ``mime_type``.

    Raises:
        RasterUnavailable: if Pillow has no encoder for the type
    """
    Image.init()
    wanted = mime_type.lower().split(";", 1)[0].strip()
    wanted = _MIME_ALIASES.get(wanted, wanted)
    for fmt, mime in Image.MIME.items():
        if mime == wanted and fmt in Image.SAVE:
            return fmt
    raise RasterUnavailable(f"No raster encoder available for {mime_type}")


def decode_image(data: bytes) -> Image.Image:
    """Decode bytes into a raster, honouring the EXIF orientation tag.

    Raises:
        DecodeFailed: if the bytes are not a readable image
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
        return ImageOps.exif_transpose(image)
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise DecodeFailed(f"Could not decode image: {e}") from e


def rotate_quarters(image: Image.Image, quarters: int) -> Image.Image:
    """Rotate clockwise by ``quarters`` x 90 degrees.

    The output raster is (w, h) for even counts and (h, w) for odd counts.
    A zero count still returns a fresh copy of the raster.
    """
    quarters = normalize_quarters(quarters)
    if quarters == 0:
        return image.copy()
    return image.transpose(_CLOCKWISE_TRANSPOSE[quarters])


def encode_image(image: Image.Image, mime_type: str, jpeg_quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """Encode a raster in the format matching ``mime_type``."""
    fmt = format_for_mime(mime_type)
    save_kwargs = {}
    if fmt == "JPEG":
        if image.mode not in _JPEG_MODES:
            image = image.convert("RGB")
        save_kwargs["quality"] = jpeg_quality

    buffer = io.BytesIO()
    try:
        image.save(buffer, format=fmt, **save_kwargs)
    except (OSError, KeyError, ValueError) as e:
        raise RasterUnavailable(f"Could not encode image as {mime_type}: {e}") from e
    return buffer.getvalue()


def encode_rotated(
    data: bytes,
    mime_type: str,
    quarters: int,
    jpeg_quality: int = DEFAULT_JPEG_QUALITY,
) -> bytes:
    """Decode, rotate and re-encode image bytes. Blocking; run it off the event loop."""
    image = decode_image(data)
    rotated = rotate_quarters(image, quarters)
    return encode_image(rotated, mime_type, jpeg_quality)


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def payload_from_data_url(data_url: str) -> str:
    """Everything after the first comma of a data URL."""
    _, _, payload = data_url.partition(",")
    return payload


def prepare_image(
    source: SourceFile,
    quarters: int = 0,
    jpeg_quality: int = DEFAULT_JPEG_QUALITY,
) -> PreparedImage:
    """Run the full transform synchronously and return the PreparedImage."""
    encoded = encode_rotated(source.data, source.media_type, quarters, jpeg_quality)
    return PreparedImage(
        base64=payload_from_data_url(to_data_url(encoded, source.media_type)),
        mime_type=source.media_type,
    )


class ImageNormalizer:
    """One upload slot: holds a source file and its rotation, publishes PreparedImages.

    The subscriber receives the current PreparedImage after every successful
    recompute, and ``None`` on clear or after a failed recompute. Only the most
    recent recompute may publish; an earlier one still in flight is discarded.
    """

    def __init__(
        self,
        on_change: Callable[[PreparedImage | None], None],
        *,
        previews: PreviewStore | None = None,
        on_alert: Callable[[str], None] | None = None,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
        name: str = "image",
    ):
        self.on_change = on_change
        self.previews = previews if previews is not None else PreviewStore()
        self.on_alert = on_alert
        self.jpeg_quality = jpeg_quality
        self.name = name

        self.source: SourceFile | None = None
        self.rotation_quarters = 0
        self.busy = False
        self.preview_url: str | None = None
        self.prepared: PreparedImage | None = None
        self.last_alert: str | None = None
        self._ticket = 0

    async def select(self, source: SourceFile) -> PreparedImage | None:
        """Accept a new file, reset rotation and recompute.

        Raises:
            UnsupportedMediaType: if the file is not an image; state is left unchanged
        """
        if not source.is_image:
            error = UnsupportedMediaType(source.media_type)
            self._alert(error)
            raise error

        self.last_alert = None
        self.source = source
        self.rotation_quarters = 0
        logger.info("[%s] selected %s (%s, %d bytes)", self.name, source.filename or "file", source.media_type, len(source.data))
        return await self.recompute()

    async def rotate(self, direction: RotateDirection | str) -> PreparedImage | None:
        """Turn the image a quarter left or right. Ignored while empty or busy."""
        direction = RotateDirection(direction)
        if self.source is None or self.busy:
            return self.prepared

        step = -1 if direction is RotateDirection.LEFT else 1
        self.rotation_quarters = normalize_quarters(self.rotation_quarters + step)
        return await self.recompute()

    async def recompute(self) -> PreparedImage | None:
        """Re-run decode, rotate and encode for the current file and rotation."""
        if self.source is None:
            return None

        self._ticket += 1
        ticket = self._ticket
        source, quarters = self.source, self.rotation_quarters
        self.busy = True
        try:
            encoded = await asyncio.to_thread(
                encode_rotated, source.data, source.media_type, quarters, self.jpeg_quality
            )
        except NormalizerError as e:
            if ticket != self._ticket:
                return None
            logger.warning("[%s] could not prepare image: %s", self.name, e)
            self._alert(e)
            self._publish(None)
            return None
        finally:
            if ticket == self._ticket:
                self.busy = False

        if ticket != self._ticket:
            logger.debug("[%s] discarding superseded recompute", self.name)
            return None

        prepared = PreparedImage(
            base64=payload_from_data_url(to_data_url(encoded, source.media_type)),
            mime_type=source.media_type,
        )
        self._publish(prepared, encoded)
        return prepared

    def clear(self) -> None:
        """Drop the file and its preview, and tell the subscriber."""
        self._ticket += 1
        self.busy = False
        self.source = None
        self.rotation_quarters = 0
        self._publish(None)

    def close(self) -> None:
        """Teardown: release resources without notifying."""
        self._ticket += 1
        self.busy = False
        self.previews.release(self.preview_url)
        self.preview_url = None

    def _publish(self, prepared: PreparedImage | None, encoded: bytes | None = None) -> None:
        self.previews.release(self.preview_url)
        self.preview_url = None
        if prepared is not None and encoded is not None:
            self.preview_url = self.previews.create(encoded, prepared.mime_type)
        self.prepared = prepared
        self.on_change(prepared)

    def _alert(self, error: Exception) -> None:
        self.last_alert = str(error)
        if self.on_alert is not None:
            self.on_alert(self.last_alert)
