"""
Shared response schemas.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of every error response."""

    detail: str
    error_code: str
    errors: Optional[List[Dict[str, Any]]] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
