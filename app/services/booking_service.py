"""
Booking command handler: validation, ledger calls and view refresh
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.api.ws import WebSocketManager
from app.core.config import Settings
from app.core.errors import ConflictError, ValidationError
from app.models import Booking, User
from app.schemas.booking import BookingCreate
from app.services.availability_service import AvailabilityService
from app.services.booking_calendar import describe_weekdays, is_bookable_day
from app.services.ledger import BookingLedger
from app.services.repositories import BookingRepo, ClosureRepo, GameRepo, TableRepo

logger = logging.getLogger(__name__)

class BookingService:
    """Create and cancel bookings on behalf of an authenticated user"""

    def __init__(self, settings: Settings, websocket_manager: Optional[WebSocketManager] = None):
        self.settings = settings
        self.websocket_manager = websocket_manager

    def validate_request(self, db: Session, request: BookingCreate) -> None:
        """Reject a booking request before it reaches the ledger"""
        missing = [
            field for field in ("table_id", "booking_date", "player_count")
            if getattr(request, field) is None
        ]
        if missing:
            raise ValidationError("Missing required booking details.", details={"missing": missing})

        if request.player_count < 1:
            raise ValidationError("Player count must be at least 1.")

        if self.settings.ENFORCE_BOOKING_WEEKDAYS and not is_bookable_day(
            request.booking_date, self.settings.BOOKING_WEEKDAYS
        ):
            raise ValidationError(
                f"Bookings are only allowed on {describe_weekdays(self.settings.BOOKING_WEEKDAYS)}."
            )

        table = TableRepo.get(db, request.table_id)
        if table is None:
            raise ValidationError(f"Table {request.table_id} does not exist.")

        if request.game_id is not None and GameRepo.get(db, request.game_id) is None:
            raise ValidationError(f"Game {request.game_id} does not exist.")

        if ClosureRepo.is_closed(db, table.hall_id, request.booking_date):
            raise ConflictError(
                f"{table.hall.name} is closed on {request.booking_date.isoformat()}.",
                reason=ConflictError.HALL_CLOSED
            )

    async def create_booking(self, db: Session, user: User, request: BookingCreate) -> Booking:
        """Book a table for the calling user"""
        self.validate_request(db, request)

        booking = BookingLedger.try_create(
            db,
            table_id=request.table_id,
            booking_date=request.booking_date,
            user_id=user.id,
            player_count=request.player_count,
            game_id=request.game_id,
        )

        await self.broadcast_availability(db, booking.booking_date)
        return booking

    async def cancel_booking(self, db: Session, booking_id: int, user: User) -> date:
        """Cancel a booking owned by the user, or any booking for an admin"""
        freed_date = BookingLedger.cancel(
            db,
            booking_id,
            requesting_user_id=user.id,
            requesting_user_is_admin=bool(user.is_admin),
        )

        await self.broadcast_availability(db, freed_date)
        return freed_date

    @staticmethod
    def list_user_bookings(db: Session, user_id: int, include_past: bool = False, today: Optional[date] = None) -> List[dict]:
        from_date = None if include_past else (today or date.today())
        return BookingRepo.list_for_user(db, user_id, from_date=from_date)

    @staticmethod
    def list_all_bookings(db: Session) -> List[dict]:
        return BookingRepo.list_all(db)

    async def broadcast_availability(self, db: Session, on_date: date):
        """Push the refreshed availability of a date to its subscribers.

        Runs after the mutation has committed, so a failed refresh is logged
        and never reported as a failed booking.
        """
        if self.websocket_manager is None:
            return

        room = on_date.isoformat()
        if not self.websocket_manager.get_connection_count(room):
            return

        try:
            tables = AvailabilityService.snapshot(db, on_date)
        except OperationalError as e:
            db.rollback()
            logger.error(f"Could not refresh availability for {room}: {e}")
            return

        await self.websocket_manager.broadcast(room, {
            "type": "availability_update",
            "date": room,
            "tables": tables
        })
