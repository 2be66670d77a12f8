"""
User-related Pydantic schemas
"""

from typing import Optional
from pydantic import BaseModel

class IdentityProfile(BaseModel):
    """Profile returned by the identity provider after a successful login"""
    external_id: str
    display_name: str
    avatar_ref: Optional[str] = None

class UserResponse(BaseModel):
    """User response schema"""
    id: int
    external_identity_id: str
    display_name: str
    avatar_ref: Optional[str] = None
    is_admin: bool

    class Config:
        from_attributes = True
