# app/schemas.py
from pydantic import BaseModel
from typing import Any

class ErrorResponse(BaseModel):
    error: str
    detail: Any | None = None
    details: Any | None = None
    message: str | None = None

class ServiceInfo(BaseModel):
    message: str
    version: str
