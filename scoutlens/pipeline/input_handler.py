"""Input handling utilities for preparing screenshots for the pipeline."""
from __future__ import annotations

import base64
import binascii
import io
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from ..errors import DecodeError
from .models import ImageInput

ImageSource = Union[ImageInput, Image.Image, bytes, bytearray, str, Path]


def _is_file(text: str) -> bool:
    try:
        return Path(text).is_file()
    except (OSError, ValueError):
        return False


class BasicImageLoader:
    """Normalize the ways a caller can hand over a screenshot.

    * :class:`ImageInput` instances are returned unchanged.
    * ``PIL.Image`` objects are wrapped as-is.
    * ``bytes`` are decoded with Pillow.
    * Strings starting with ``data:`` are treated as data URLs, other strings
      (and :class:`~pathlib.Path` objects) as file paths when the file exists
      and as bare base64 payloads otherwise.

    Anything Pillow cannot read raises :class:`DecodeError`.
    """

    def __init__(self, mode: Optional[str] = "RGB") -> None:
        self.mode = mode

    def _finish(self, image: Image.Image, source: Optional[str]) -> ImageInput:
        if self.mode and image.mode != self.mode:
            image = image.convert(self.mode)
        width, height = image.size
        if width <= 0 or height <= 0:
            raise DecodeError("Image must have positive dimensions")
        return ImageInput(image=image, width=width, height=height, source=source)

    def _decode_bytes(self, payload: bytes, source: Optional[str]) -> ImageInput:
        if not payload:
            raise DecodeError("Image payload is empty")
        try:
            image = Image.open(io.BytesIO(payload))
            image.load()
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise DecodeError(f"Could not decode image: {exc}") from exc
        return self._finish(image, source)

    def _decode_base64(self, data: str, source: Optional[str]) -> ImageInput:
        try:
            payload = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DecodeError("Image string is neither a file path nor valid base64") from exc
        return self._decode_bytes(payload, source)

    def _decode_data_url(self, url: str) -> ImageInput:
        header, sep, data = url.partition(",")
        if not sep or ";base64" not in header:
            raise DecodeError("Only base64 data URLs are supported")
        return self._decode_base64(data.strip(), source="data-url")

    def load(self, source: ImageSource) -> ImageInput:
        if isinstance(source, ImageInput):
            return source
        if isinstance(source, Image.Image):
            return self._finish(source, None)
        if isinstance(source, (bytes, bytearray)):
            return self._decode_bytes(bytes(source), None)
        if isinstance(source, Path):
            return self._load_path(source)
        if isinstance(source, str):
            text = source.strip()
            if text.startswith("data:"):
                return self._decode_data_url(text)
            if _is_file(text):
                return self._load_path(Path(text))
            return self._decode_base64(text, None)
        raise DecodeError(f"Unsupported image source type: {type(source).__name__}")

    def _load_path(self, path: Path) -> ImageInput:
        try:
            payload = path.read_bytes()
        except OSError as exc:
            raise DecodeError(f"Could not read image file {path}: {exc}") from exc
        return self._decode_bytes(payload, path.as_posix())


def load_image(source: ImageSource) -> ImageInput:
    return BasicImageLoader().load(source)
