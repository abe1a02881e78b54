"""
Probability lookup router for the tokenprobe API.

``POST /props`` reports target token probabilities; ``POST /shutdown``
releases the engine and stops the server.
"""

import json

from fastapi import APIRouter, BackgroundTasks, Request, status
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from tokenprobe.api.schemas import PropsRequest, PropsResponse, ShutdownResponse
from tokenprobe.utils.api_errors import ErrorResponse, RequestError
from tokenprobe.utils.logger import get_logger

logger = get_logger("tokenprobe-api")

router = APIRouter(tags=["Probabilities"])


def parse_props_request(body: bytes) -> PropsRequest:
    """
    Decode and validate a ``/props`` body.

    Raises:
        RequestError: Malformed JSON, a non-object body, or missing, empty
            or non-string fields
    """
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RequestError(message=f"Invalid JSON: {e}")

    if not isinstance(payload, dict):
        raise RequestError(message="Request body must be a JSON object")

    try:
        return PropsRequest.model_validate(payload)
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(loc) for loc in error.get("loc", ())) or "body"
        if error.get("type") in ("missing", "string_too_short"):
            raise RequestError(message=f"Missing or empty field: {field}")
        raise RequestError(message=f"Invalid field {field}: {error.get('msg')}")


@router.post(
    "/props",
    summary="Target token probabilities",
    description="""
    Evaluate `prompt` once and report the probability of each token of the
    comma-separated `target_chars` at the next position.

    ## Example Request
    ```json
    {"prompt": "Hello my name is", "target_chars": " John, Bob"}
    ```
    """,
    response_model=PropsResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"description": "Invalid request or prompt too long", "model": ErrorResponse},
        500: {"description": "Engine decode failure", "model": ErrorResponse},
        503: {"description": "Model not available", "model": ErrorResponse},
    },
)
async def props(request: Request) -> PropsResponse:
    """Compute target token probabilities for a prompt."""
    props_request = parse_props_request(await request.body())

    # The first call loads the model; keep it off the event loop
    service = await run_in_threadpool(request.app.state.engine_manager.get_service)
    result = await run_in_threadpool(
        service.compute, props_request.prompt, props_request.target_chars
    )

    logger.info(
        f"Computed {len(result.tokens)} probabilities for a "
        f"{result.prompt_token_count}-token prompt in {result.elapsed_seconds:.3f}s"
    )
    return PropsResponse.from_result(result)


@router.post(
    "/shutdown",
    summary="Shut down the server",
    description="Release the model and stop the listener.",
    response_model=ShutdownResponse,
    status_code=status.HTTP_200_OK,
)
async def shutdown(request: Request, background_tasks: BackgroundTasks) -> ShutdownResponse:
    """Acknowledge, then release the engine after the response is sent."""
    logger.info("Shutdown requested")
    background_tasks.add_task(request.app.state.engine_manager.shutdown)
    return ShutdownResponse(message="Shutting down")
