"""Contracts for the two external generative collaborators and the image payload they receive.

Structural typing only: any object with a matching ``generate`` method
qualifies.  Implementations must raise ``TransformationFailure`` for errors
and timeouts; the pipeline treats anything else as a programming error.
"""

import base64
import binascii
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(?:;[\w=-]+)*;base64,(?P<data>.*)$", re.DOTALL)

# A conversation turn: {"role": "user" | "assistant", "content": str}
Turn = dict[str, str]


@dataclass(frozen=True)
class ImagePayload:
    """Raw image bytes plus the MIME type needed to build a data URL."""

    data: bytes
    mime_type: str = "image/jpeg"

    @classmethod
    def from_path(cls, path: Path) -> "ImagePayload":
        """Read an image from disk, inferring the MIME type from the suffix."""
        path = Path(path)
        if path.suffix.lower() not in IMAGE_EXTENSIONS:
            raise ValueError(f"Unsupported image format '{path.suffix}'. Supported: {sorted(IMAGE_EXTENSIONS)}")
        suffix = path.suffix.lower().lstrip(".")
        mime_type = "image/jpeg" if suffix == "jpg" else f"image/{suffix}"
        return cls(data=path.read_bytes(), mime_type=mime_type)

    @classmethod
    def from_data_url(cls, value: str) -> "ImagePayload":
        """Decode a ``data:image/...;base64,`` URL or a bare base64 string.

        Raises ValueError when the payload is not valid base64.
        """
        mime_type = "image/jpeg"
        encoded = value.strip()
        match = _DATA_URL_RE.match(encoded)
        if match:
            mime_type = match.group("mime") or mime_type
            encoded = match.group("data")
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"Image data is not valid base64: {exc}") from exc
        return cls(data=data, mime_type=mime_type)

    @property
    def data_url(self) -> str:
        """The image as a base64 data URL, the form vision chat APIs accept."""
        return f"data:{self.mime_type};base64,{base64.b64encode(self.data).decode('utf-8')}"


@runtime_checkable
class ImageTextTransform(Protocol):
    """Image + conversation in, free-form text out.

    The image is attached to the first user turn.  Called twice per run:
    once for the initial CSV and once for the self-review pass.
    """

    def generate(self, image: ImagePayload, turns: list[Turn]) -> str:
        """Return the model's text reply to *turns* with *image* attached."""
        ...


@runtime_checkable
class RepairTransform(Protocol):
    """Conversation in, free-form text out.  Used only by the validate-repair loop."""

    def generate(self, turns: list[Turn]) -> str:
        """Return the model's text reply to *turns*."""
        ...
