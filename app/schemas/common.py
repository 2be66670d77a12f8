"""
Response envelopes shared by every booking API route
"""

from typing import Any, Optional
from pydantic import BaseModel

class StandardResponse(BaseModel):
    """Successful result: a user-facing message plus the payload"""
    success: bool
    message: str
    data: Optional[Any] = None

class ErrorResponse(BaseModel):
    """Failed request.

    ``error_code`` is machine readable (``TABLE_ALREADY_BOOKED``,
    ``NOT_FOUND_OR_FORBIDDEN`` ...); ``message`` is shown to the user as is.
    """
    success: bool = False
    message: str
    error_code: Optional[str] = None
    details: Optional[Any] = None
