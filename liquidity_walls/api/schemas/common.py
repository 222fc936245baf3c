from __future__ import annotations

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    message: str
    code: int


class HealthResponse(BaseModel):
    status: str
