"""
Booking and availability Pydantic schemas
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel

class BookingCreate(BaseModel):
    """Booking request body.

    Required fields are optional here so the booking service can report every
    missing field in one validation error.
    """
    table_id: Optional[int] = None
    booking_date: Optional[date] = None
    player_count: Optional[int] = None
    game_id: Optional[int] = None

class BookingResponse(BaseModel):
    """A booking with display fields resolved"""
    id: int
    table_id: int
    table_name: str
    hall_name: str
    booking_date: date
    game_id: Optional[int] = None
    game_name: Optional[str] = None
    player_count: int
    booked_by_user_id: int
    booked_by_username: Optional[str] = None

class TableStatus(BaseModel):
    """Availability of one table on one date"""
    table_id: int
    table_name: str
    hall_id: int
    hall_name: str
    hall_closed: bool = False
    booking_id: Optional[int] = None
    game_id: Optional[int] = None
    game_name: Optional[str] = None
    player_count: Optional[int] = None
    booked_by_user_id: Optional[int] = None
    booked_by_username: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.booking_id is None and not self.hall_closed

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data["available"] = self.available
        return data
