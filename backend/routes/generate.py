"""Story generation endpoint."""

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from storygen.generator import StoryGenerator
from storygen.models import DEFAULT_LENGTH, LENGTH_POLICY, validate_request

from .models import ErrorResponse, StoryResponse

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_TOPIC = "a brave explorer on an alien planet"
DEFAULT_STYLE = "adventure"


def get_generator(request: Request) -> StoryGenerator:
    return request.app.state.generator


async def read_body(request: Request) -> dict[str, Any]:
    """Decode the JSON body; anything that is not a JSON object reads as {}."""
    try:
        body = json.loads(await request.body())
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def apply_defaults(body: dict[str, Any]) -> dict[str, Any]:
    """Fill in topic/style/length the way clients expect.

    Empty or missing topic/style get the defaults. A length that is not one
    of the known values falls back to "medium".
    """
    length = body.get("length")
    if not (isinstance(length, str) and length in LENGTH_POLICY):
        if length:
            logger.warning("Unknown length %r, using %r", length, DEFAULT_LENGTH)
        length = DEFAULT_LENGTH
    return {
        "topic": body.get("topic") or DEFAULT_TOPIC,
        "style": body.get("style") or DEFAULT_STYLE,
        "length": length,
    }


@router.post("/generate")
async def generate_story(
    request: Request,
    generator: StoryGenerator = Depends(get_generator),
):
    """Generate a story from {topic, style, length}."""
    logger.info("Story request url=%s method=%s", request.url, request.method)

    try:
        fields = apply_defaults(await read_body(request))
        logger.info("Generating story with input: %s", fields)
        story = await generator.generate(validate_request(fields))
    except Exception as e:
        logger.exception("Error generating story")
        error = ErrorResponse(error=str(e) or "Unknown error occurred")
        return JSONResponse(error.model_dump(), status_code=500)

    logger.info("Story generated successfully")
    return JSONResponse(StoryResponse(data=story).model_dump(by_alias=True))
