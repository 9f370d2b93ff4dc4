"""Display URLs for local image previews.

Mirrors the browser's object-URL model: a URL is minted for a blob of bytes,
stays resolvable until it is released, and is owned by whoever created it.
"""

import logging
import uuid
from dataclasses import dataclass

logger = logging.getLogger(__name__)

PREVIEW_PREFIX = "/previews/"


@dataclass(frozen=True)
class PreviewBlob:
    data: bytes
    mime_type: str


class PreviewStore:
    """In-memory registry of live preview URLs."""
    
    def __init__(self, prefix: str = PREVIEW_PREFIX):
        self.prefix = prefix
        self._blobs: dict[str, PreviewBlob] = {}
    
    def __len__(self) -> int:
        return len(self._blobs)
    
    def create(self, data: bytes, mime_type: str) -> str:
        """Register bytes and return a display URL for them."""
        token = uuid.uuid4().hex
        self._blobs[token] = PreviewBlob(data=data, mime_type=mime_type)
        return f"{self.prefix}{token}"
    
    def resolve(self, url: str) -> PreviewBlob | None:
        return self._blobs.get(self._token(url))
    
    def release(self, url: str | None) -> None:
        """Release a display URL. Releasing twice or releasing None is harmless."""
        if url is None:
            return
        if self._blobs.pop(self._token(url), None) is not None:
            logger.debug("Released preview %s", url)
    
    def _token(self, url: str) -> str:
        return url[len(self.prefix):] if url.startswith(self.prefix) else url
