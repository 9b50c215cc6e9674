"""Chat endpoint forwarding to the hosted model.

Validates the request body, calls the upstream inference service and passes
the reply through: event streams byte-for-byte, JSON with its upstream status.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import ValidationError
from starlette.background import BackgroundTask

from src.models.schemas import ChatRequest
from src.proxy.inference import InferenceService, get_inference_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

EVENT_STREAM = "text/event-stream"
MISSING_INPUT_ERROR = 'Missing required "input" field.'
INVALID_BODY_ERROR = "Invalid request body."


@router.post("/chat")
async def chat(
    request: Request,
    service: InferenceService = Depends(get_inference_service),
) -> Response:
    """Forward a chat request to the model.

    Args:
        request: Raw request; body must be `{input, reasoning?}` JSON.
        service: Upstream inference service.

    Returns:
        The upstream event stream, or the upstream JSON body and status.

    Raises:
        400: Missing or empty input or an undecodable body, or an invalid
            reasoning field.
        500: Upstream unreachable (handled at app level).
    """
    try:
        body = ChatRequest.model_validate_json(await request.body())
    except ValidationError as e:
        logger.warning(f"Rejected chat request: {e.error_count()} validation error(s)")
        # Whole-body errors (undecodable JSON, not an object) carry an empty loc.
        missing_input = any(err["loc"][:1] in ((), ("input",)) for err in e.errors())
        return JSONResponse(
            {"error": MISSING_INPUT_ERROR if missing_input else INVALID_BODY_ERROR},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    upstream = await service.run(body)

    content_type = upstream.headers.get("content-type", "")
    if EVENT_STREAM in content_type:
        return StreamingResponse(
            upstream.aiter_raw(),
            status_code=upstream.status_code,
            media_type=EVENT_STREAM,
            background=BackgroundTask(upstream.aclose),
        )

    try:
        content = await upstream.aread()
    finally:
        await upstream.aclose()
    return Response(
        content=content,
        status_code=upstream.status_code,
        media_type="application/json",
    )
