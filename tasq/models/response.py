"""
Response models for API responses
"""

from typing import Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error response model"""
    message: str
    error_code: Optional[str] = None
    retryable: bool = False
    details: Optional[dict] = None
