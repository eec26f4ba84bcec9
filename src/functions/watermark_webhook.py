"""
Webhook handler that watermarks newly created Contentful image assets.

Contentful fires the hook for every new asset, including the ones this handler
publishes, so watermarked output is recognised by the ``[WATERMARKED]`` file
name prefix and skipped.
"""
import base64
import binascii
import io
import json
import posixpath
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

from src.media.watermark import ImageCompositor
from src.shared.asset_publisher import AssetPublisher
from src.shared.logging_utils import info as log_info, error as log_error
from src.shared.settings import WatermarkSettings, get_settings
from src.specs.common.errors import InvalidEventError
from src.specs.functions.watermark_spec import (
    WATERMARK_MARKER,
    IncomingRequest,
    OutcomeResponse,
    add_watermark_marker,
)


def decode_event_body(body: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decode a base64 JSON event body; ``None`` when absent or unreadable."""
    if not body:
        return None
    try:
        text = base64.b64decode(body, validate=True).decode("utf-8")
        decoded = json.loads(text)
    except (binascii.Error, ValueError, TypeError):
        return None
    return decoded if isinstance(decoded, dict) else None


def is_already_watermarked(file_name: Optional[str]) -> bool:
    # A missing file name counts as not yet watermarked
    return isinstance(file_name, str) and file_name.startswith(WATERMARK_MARKER)


def _fallback_file_name(source_ref: str) -> str:
    return posixpath.basename(urlparse(source_ref).path) or "image"


def build_success_response(request: IncomingRequest, input_record: Mapping[str, Any]) -> Dict[str, Any]:
    return OutcomeResponse.success(request.title, input_record).to_dict()


def build_skip_response() -> Dict[str, Any]:
    return OutcomeResponse.skipped().to_dict()


def build_error_response(exc: BaseException) -> Dict[str, Any]:
    return OutcomeResponse.failure(exc).to_dict()


def handle_event(
    event: Mapping[str, Any],
    settings: Optional[WatermarkSettings] = None,
    compositor: Optional[ImageCompositor] = None,
    publisher: Optional[AssetPublisher] = None,
    trace_id: Optional[str] = None,
) -> Dict[str, Any]:
    settings = settings or get_settings()
    try:
        body = decode_event_body(event.get("body"))
        if body is None:
            raise InvalidEventError("Event body is missing or could not be decoded")
        request = IncomingRequest.model_validate(body)

        if is_already_watermarked(request.fileName):
            log_info(trace_id, "watermark:skipped", fileName=request.fileName)
            return build_skip_response()

        log_info(trace_id, "watermark:start", title=request.title, url=request.sourceImageUrl)
        compositor = compositor or ImageCompositor()
        image = compositor.watermark(request.sourceImageUrl, settings.watermark_image_url)

        publisher = publisher or AssetPublisher(settings, trace_id=trace_id)
        file_name = request.fileName or _fallback_file_name(request.sourceImageUrl)
        publisher.upload_asset(
            title=add_watermark_marker(request.title),
            description=request.description,
            file_name=add_watermark_marker(file_name),
            content_type=request.contentType or image.content_type,
            stream=io.BytesIO(image.data),
        )
        log_info(trace_id, "watermark:completed", title=request.title)
        return build_success_response(request, body)
    except Exception as e:
        log_error(trace_id, "watermark:failed", error=str(e), errorType=type(e).__name__)
        return build_error_response(e)
