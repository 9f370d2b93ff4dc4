"""User-visible error kinds for the try-on pipeline."""


class TryOnError(Exception):
    """Base class for every error surfaced to the user."""


class NormalizerError(TryOnError):
    """Raised while preparing an uploaded image."""


class UnsupportedMediaType(NormalizerError):
    """The selected file does not advertise an ``image/*`` media type."""

    def __init__(self, media_type: str | None):
        self.media_type = media_type
        super().__init__(f"Please select an image file (got {media_type or 'unknown type'}).")


class DecodeFailed(NormalizerError):
    """The image bytes could not be decoded."""


class RasterUnavailable(NormalizerError):
    """No raster encoder is available for the image format."""


class MissingCredential(TryOnError):
    """The API key is not configured. Fatal at startup."""


class GenerationFailed(TryOnError):
    """Any transport, decoding or model-side failure of a generation call."""

    PREFIX = "Failed to generate image. Please try again. Details: "

    def __init__(self, details: str):
        self.details = details
        super().__init__(f"{self.PREFIX}{details}")


class NoCandidates(GenerationFailed):
    """The endpoint returned zero candidates."""

    def __init__(self):
        super().__init__("The API did not return any candidates. The request may have been blocked.")


class NoImageReturned(GenerationFailed):
    """The first candidate carried no inline image."""

    def __init__(self):
        super().__init__("The model did not return an image. It might have refused the request.")
