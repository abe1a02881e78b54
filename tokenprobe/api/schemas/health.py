"""
Health check schemas for the tokenprobe API.
"""

from pydantic import BaseModel, Field
from typing import Optional


class HealthResponse(BaseModel):
    """Response model for the health check endpoint."""

    status: str = Field(..., description="Health status")
    model_loaded: bool = Field(..., description="Whether the model is loaded")
    model_id: Optional[str] = Field(None, description="Name of the loaded model")
    device: Optional[str] = Field(None, description="Device being used")
    n_ctx: Optional[int] = Field(None, description="Context window in tokens")
    n_vocab: Optional[int] = Field(None, description="Vocabulary size")
    process_memory_mb: float = Field(..., description="Resident memory of the server process")
    system_memory_percent: float = Field(..., description="System memory in use")

    model_config = {
        "protected_namespaces": (),
        "json_schema_extra": {
            "example": {
                "status": "healthy",
                "model_loaded": True,
                "model_id": "gpt2",
                "device": "cpu",
                "n_ctx": 1024,
                "n_vocab": 50257,
                "process_memory_mb": 812.4,
                "system_memory_percent": 41.7,
            }
        },
    }
