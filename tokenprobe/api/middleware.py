"""
tokenprobe API middleware.

Request ID generation and access logging.
"""

import time
import uuid
from fastapi import Request, Response
from starlette.middleware.base import RequestResponseEndpoint

from tokenprobe.utils.logger import get_logger

logger = get_logger("tokenprobe-api")


async def request_id_middleware(
    request: Request, call_next: RequestResponseEndpoint
) -> Response:
    """
    Add a unique request ID to each request and log its outcome.

    Args:
        request: The incoming request
        call_next: The next middleware or route handler

    Returns:
        Response: The processed response with added request ID header
    """
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()
    with logger.context(request_id=request_id):
        response = await call_next(request)
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {time.time() - start_time:.3f}s"
        )

    response.headers["X-Request-ID"] = request_id
    return response
