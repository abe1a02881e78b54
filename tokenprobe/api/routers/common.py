"""
Common API router for tokenprobe.

Health check reporting model and memory status.
"""

import psutil
from fastapi import APIRouter, Request, status

from tokenprobe.api.schemas.health import HealthResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    summary="Health Check",
    description="Checks whether the model is loaded and reports memory usage.",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint to verify API and model status.

    Returns:
        HealthResponse: Health status information
    """
    manager = request.app.state.engine_manager
    process_memory_mb = psutil.Process().memory_info().rss / (1024**2)
    system_memory_percent = psutil.virtual_memory().percent

    if manager.shut_down:
        health_status = "shutting_down"
    elif manager.is_loaded:
        health_status = "healthy"
    else:
        health_status = "initializing"

    engine = manager.engine if manager.is_loaded else None
    return HealthResponse(
        status=health_status,
        model_loaded=engine is not None,
        model_id=getattr(engine, "model_id", None),
        device=str(getattr(engine, "device", None)) if engine is not None else None,
        n_ctx=engine.n_ctx if engine is not None else None,
        n_vocab=engine.n_vocab if engine is not None else None,
        process_memory_mb=round(process_memory_mb, 1),
        system_memory_percent=system_memory_percent,
    )
