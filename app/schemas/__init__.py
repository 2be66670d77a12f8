"""
Pydantic schemas package
"""

from .common import *
from .catalog import *
from .booking import *
from .user import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "HallCreate",
    "HallResponse",
    "TableCreate",
    "TableResponse",
    "GameCreate",
    "GameResponse",
    "ClosureCreate",
    "ClosureResponse",
    "BookingCreate",
    "BookingResponse",
    "TableStatus",
    "IdentityProfile",
    "UserResponse"
]
