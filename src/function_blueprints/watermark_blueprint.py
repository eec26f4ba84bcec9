import azure.functions as func
import base64
import json
from typing import Any, Dict, Optional

from src.functions.watermark_webhook import handle_event

bp = func.Blueprint()


def to_event(req: func.HttpRequest) -> Dict[str, Any]:
    """Wrap the raw webhook request into an event with a base64 ``body``."""
    raw = req.get_body()
    return {"body": base64.b64encode(raw).decode("ascii") if raw else None}


def to_http_response(outcome: Dict[str, Any]) -> func.HttpResponse:
    return func.HttpResponse(
        body=json.dumps(outcome),
        status_code=outcome["statusCode"],
        mimetype="application/json",
    )


def process_request(req: func.HttpRequest, trace_id: Optional[str] = None) -> func.HttpResponse:
    return to_http_response(handle_event(to_event(req), trace_id=trace_id))


@bp.function_name(name="watermark")
@bp.route(route="watermark", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
def watermark(req: func.HttpRequest, context: func.Context) -> func.HttpResponse:
    return process_request(req, trace_id=getattr(context, "invocation_id", None))
