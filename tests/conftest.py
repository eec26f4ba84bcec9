"""Shared fixtures for the watermark hook test suite."""

from __future__ import annotations

import base64
import io
import json
from typing import Any, Callable, Dict

import pytest
from PIL import Image

from src.shared.settings import WatermarkSettings


@pytest.fixture()
def settings() -> WatermarkSettings:
    return WatermarkSettings(
        space_id="space123",
        watermark_image_url="https://cdn.example.com/watermark.png",
        cma_access_token="cma-token",
    )


@pytest.fixture()
def payload() -> Dict[str, Any]:
    return {
        "url": "//images.ctfassets.net/space123/abc/def/photo.png",
        "title": "Sunset",
        "description": "Beach at dusk",
        "fileName": "photo.png",
        "contentType": "image/png",
        "width": 400,
        "height": 300,
    }


@pytest.fixture()
def encode_event() -> Callable[[Any], Dict[str, Any]]:
    def _encode(record: Any) -> Dict[str, Any]:
        raw = json.dumps(record).encode("utf-8")
        return {"body": base64.b64encode(raw).decode("ascii")}

    return _encode


@pytest.fixture()
def image_bytes() -> Callable[..., bytes]:
    def _make(size=(200, 150), color=(0, 0, 255, 255), fmt="PNG", mode="RGBA") -> bytes:
        img = Image.new(mode, size, color=color if mode == "RGBA" else color[:3])
        buf = io.BytesIO()
        img.save(buf, format=fmt)
        return buf.getvalue()

    return _make
