"""
Probability lookup schemas for the tokenprobe API.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, StrictStr

from tokenprobe.domain.entities import ProbeResult


class PropsRequest(BaseModel):
    """Request body of ``POST /props``."""

    prompt: StrictStr = Field(..., min_length=1, description="Text evaluated by the model")
    target_chars: StrictStr = Field(
        ..., min_length=1, description="Comma-separated target strings"
    )

    model_config = {
        "json_schema_extra": {
            "example": {"prompt": "Hello my name is", "target_chars": " John, Bob"}
        }
    }


class TokenProbabilityInfo(BaseModel):
    """Probability of one target token."""

    token: str = Field(..., description="Surface text of the token")
    probability: Optional[float] = Field(
        ..., description="Probability of the token at the next position (null if not finite)"
    )


class PropsResponse(BaseModel):
    """Response body of ``POST /props``."""

    tokens: List[TokenProbabilityInfo] = Field(
        ..., description="One entry per parsed target token, in parse order"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "tokens": [
                    {"token": " John", "probability": 0.0123},
                    {"token": " Bob", "probability": 0.0045},
                ]
            }
        }
    }

    @classmethod
    def from_result(cls, result: ProbeResult) -> "PropsResponse":
        return cls(
            tokens=[
                TokenProbabilityInfo(**entry.to_dict())
                for entry in result.tokens
            ]
        )


class ShutdownResponse(BaseModel):
    """Response body of ``POST /shutdown``."""

    message: str = Field("Shutting down", description="Acknowledgement")
