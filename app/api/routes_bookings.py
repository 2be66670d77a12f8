"""
Booking API routes - authenticated users
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.models import User
from app.schemas.booking import BookingCreate
from app.schemas.catalog import GameResponse, HallResponse, TableResponse
from app.services.availability_service import AvailabilityService
from app.services.booking_service import BookingService
from app.services.repositories import GameRepo, HallRepo, TableRepo
from app.utils.responses import success_response
from app.utils.security import get_current_user

router = APIRouter()

def get_booking_service(request: Request) -> BookingService:
    return request.app.state.booking_service

@router.get("/availability")
async def list_availability(
    booking_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """Every table with its booking status on a date"""
    tables = AvailabilityService.list_availability(db, booking_date)

    return success_response(
        message="Table availability retrieved",
        data={
            "date": booking_date.isoformat(),
            "tables": [status.to_dict() for status in tables]
        }
    )

@router.post("/bookings")
async def create_booking(
    booking_data: BookingCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service)
):
    """Book a table for the logged-in user"""
    booking = await service.create_booking(db, user, booking_data)

    return success_response(
        message="Booking confirmed successfully!",
        data={
            "id": booking.id,
            "table_id": booking.table_id,
            "booking_date": booking.booking_date.isoformat(),
            "game_id": booking.game_id,
            "player_count": booking.player_count,
            "booked_by_user_id": booking.booked_by_user_id
        },
        status_code=201
    )

@router.delete("/bookings/{booking_id}")
async def cancel_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service)
):
    """Cancel one of the logged-in user's bookings"""
    freed_date = await service.cancel_booking(db, booking_id, user)

    return success_response(
        message="Booking cancelled successfully!",
        data={"booking_id": booking_id, "booking_date": freed_date.isoformat()}
    )

@router.get("/bookings/mine")
async def my_bookings(
    include_past: bool = False,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """The logged-in user's bookings, upcoming only unless asked otherwise"""
    bookings = BookingService.list_user_bookings(db, user.id, include_past=include_past)

    return success_response(
        message="Your bookings retrieved",
        data={"bookings": bookings}
    )

@router.get("/halls")
async def list_halls(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    halls = HallRepo.list_all(db)
    return success_response(
        message="Halls retrieved",
        data=[HallResponse.model_validate(h).model_dump() for h in halls]
    )

@router.get("/tables")
async def list_tables(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    tables = TableRepo.list_all(db)
    return success_response(
        message="Tables retrieved",
        data=[
            TableResponse(id=t.id, name=t.name, hall_id=t.hall_id, hall_name=t.hall.name).model_dump()
            for t in tables
        ]
    )

@router.get("/games")
async def list_games(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    games = GameRepo.list_all(db)
    return success_response(
        message="Games retrieved",
        data=[GameResponse.model_validate(g).model_dump() for g in games]
    )
