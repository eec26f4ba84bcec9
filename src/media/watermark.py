import io
from dataclasses import dataclass
from typing import Optional, Tuple

import requests
from PIL import Image, UnidentifiedImageError

from src.specs.common.errors import ImageFetchError

WATERMARK_OPACITY = 0.5
WATERMARK_OFFSET: Tuple[int, int] = (50, 50)
SOURCE_URL_SCHEME = "https:"
DEFAULT_FORMAT = "PNG"
# Formats Pillow cannot write with an alpha channel
_OPAQUE_FORMATS = {"JPEG", "MPO"}


@dataclass(frozen=True)
class WatermarkedImage:
    data: bytes
    format: str
    content_type: Optional[str]


def to_fetchable_url(image_ref: str) -> str:
    """Prefix a scheme-relative asset reference (``//host/path``) with ``https:``."""
    return f"{SOURCE_URL_SCHEME}{image_ref}"


class ImageCompositor:
    """Fetches images over HTTP and stamps a watermark on them with Pillow."""

    def __init__(self, session: Optional[requests.Session] = None):
        self._http = session or requests

    def fetch(self, image_ref: str) -> Image.Image:
        try:
            response = self._http.get(image_ref)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ImageFetchError(image_ref, str(e)) from e
        try:
            image = Image.open(io.BytesIO(response.content))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise ImageFetchError(image_ref, f"unsupported image data ({e})") from e
        return image

    def composite(
        self,
        base: Image.Image,
        overlay: Image.Image,
        opacity: float,
        x: int,
        y: int,
    ) -> Image.Image:
        result = base.convert("RGBA")
        overlay_img = overlay.convert("RGBA")
        alpha = overlay_img.split()[3]
        alpha = alpha.point(lambda p: int(p * opacity))
        overlay_img.putalpha(alpha)
        result.alpha_composite(overlay_img, dest=(x, y))
        return result

    def encode(self, image: Image.Image, fmt: Optional[str] = None) -> bytes:
        fmt = (fmt or DEFAULT_FORMAT).upper()
        if fmt in _OPAQUE_FORMATS:
            image = image.convert("RGB")
        buf = io.BytesIO()
        image.save(buf, format=fmt)
        return buf.getvalue()

    def watermark(self, source_ref: str, watermark_url: str) -> WatermarkedImage:
        """Overlay the watermark image on the source image.

        ``source_ref`` is the scheme-relative reference stored by Contentful;
        the watermark is drawn at half opacity, 50px from the top-left corner,
        and the result is encoded in the source image's own format.
        """
        original = self.fetch(to_fetchable_url(source_ref))
        mark = self.fetch(watermark_url)
        fmt = original.format or DEFAULT_FORMAT
        x, y = WATERMARK_OFFSET
        composited = self.composite(original, mark, WATERMARK_OPACITY, x, y)
        return WatermarkedImage(
            data=self.encode(composited, fmt),
            format=fmt,
            content_type=Image.MIME.get(fmt),
        )
