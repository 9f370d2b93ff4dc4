"""Image payload models."""

import base64 as b64

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SourceFile(BaseModel):
    """A user-selected file: advertised media type plus raw bytes."""
    
    media_type: str = Field(description="Advertised media type, e.g. 'image/jpeg'")
    data: bytes
    filename: str | None = None
    
    @property
    def is_image(self) -> bool:
        return self.media_type.lower().startswith("image/")


class PreparedImage(BaseModel):
    """A raster payload plus its media type, ready for a multimodal request.
    
    ``base64`` holds the payload only, never a ``data:`` URL.
    """
    
    model_config = ConfigDict(frozen=True, populate_by_name=True)
    
    base64: str
    mime_type: str = Field(alias="mimeType")
    
    @field_validator("base64")
    @classmethod
    def _payload_only(cls, value: str) -> str:
        if value.startswith("data:") or ";base64," in value:
            raise ValueError("base64 must be the payload only, without a data URL prefix")
        return value
    
    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64}"
    
    def to_bytes(self) -> bytes:
        """Decode the payload back to raw image bytes."""
        return b64.b64decode(self.base64)
