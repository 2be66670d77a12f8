"""
Booking ledger: the only code that writes or deletes booking rows.

Uniqueness is decided by the store. ``try_create`` never looks for an existing
booking first; it inserts and lets the ``(table_id, booking_date)`` constraint
(and, in strict mode, the ``(booked_by_user_id, booking_date)`` index) reject
the loser of any race. The resulting ``IntegrityError`` is mapped back to the
invariant that was violated.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app.core.db import USER_DAY_INDEX
from app.core.errors import ConflictError, NotFoundOrForbidden, StorageUnavailable, ValidationError
from app.models import Booking
from app.models.booking import TABLE_DATE_CONSTRAINT

logger = logging.getLogger(__name__)

TABLE_TAKEN_MESSAGE = "This table is already booked for the selected date."
USER_TAKEN_MESSAGE = "You already have a booking for this date. One booking per user per day allowed."

# SQLite reports the columns of the violated index, PostgreSQL its name.
# DELETE ... RETURNING limits the supported stores to SQLite and PostgreSQL.
_USER_DAY_MARKERS = (USER_DAY_INDEX, "bookings.booked_by_user_id")
_TABLE_DAY_MARKERS = (TABLE_DATE_CONSTRAINT, "bookings.table_id")


def _is_unique_violation(text: str) -> bool:
    return "UNIQUE CONSTRAINT" in text.upper() or "duplicate key" in text


def classify_integrity_error(exc: IntegrityError) -> Exception:
    """Translate a constraint violation on the bookings table into the taxonomy"""
    text = str(exc.orig)
    upper = text.upper()

    # Column names also appear in NOT NULL messages, so rule those out first
    if "NOT NULL" in upper or "NOT-NULL" in upper:
        return ValidationError("Missing required booking details.")
    if "FOREIGN KEY" in upper:
        return ValidationError("Booking references a table, game or user that does not exist.")
    if "CHECK" in upper:
        return ValidationError("Player count must be at least 1.")
    if not _is_unique_violation(text):
        return ValidationError("Booking violates a storage constraint.")

    if any(marker in text for marker in _TABLE_DAY_MARKERS):
        return ConflictError(TABLE_TAKEN_MESSAGE, reason=ConflictError.TABLE_ALREADY_BOOKED)
    if any(marker in text for marker in _USER_DAY_MARKERS):
        return ConflictError(USER_TAKEN_MESSAGE, reason=ConflictError.USER_ALREADY_BOOKED)
    # An unnamed unique violation on bookings can only be the table/date pair
    return ConflictError(TABLE_TAKEN_MESSAGE, reason=ConflictError.TABLE_ALREADY_BOOKED)


class BookingLedger:
    """Atomic create and authorized cancel of bookings"""

    @staticmethod
    def try_create(
        db: Session,
        table_id: int,
        booking_date: date,
        user_id: int,
        player_count: int,
        game_id: Optional[int] = None,
    ) -> Booking:
        """Insert a booking or raise ConflictError naming the violated invariant"""
        booking = Booking(
            table_id=table_id,
            booking_date=booking_date,
            game_id=game_id,
            player_count=player_count,
            booked_by_user_id=user_id,
        )

        try:
            db.add(booking)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            error = classify_integrity_error(exc)
            if isinstance(error, ConflictError):
                logger.info(
                    f"Booking conflict ({error.reason}) for table {table_id} on {booking_date} by user {user_id}"
                )
            raise error from exc
        except OperationalError as exc:
            db.rollback()
            logger.error(f"Storage failure while creating booking: {exc}")
            raise StorageUnavailable(details=str(exc.orig)) from exc

        db.refresh(booking)
        logger.info(f"Booking {booking.id} created: table {table_id} on {booking_date} by user {user_id}")
        return booking

    @staticmethod
    def cancel(
        db: Session,
        booking_id: int,
        requesting_user_id: int,
        requesting_user_is_admin: bool = False,
    ) -> date:
        """Delete a booking the caller may remove; return the date it freed"""
        statement = delete(Booking).where(Booking.id == booking_id)
        if not requesting_user_is_admin:
            statement = statement.where(Booking.booked_by_user_id == requesting_user_id)
        statement = statement.returning(Booking.booking_date)

        try:
            freed = db.execute(statement).scalars().all()
            db.commit()
        except OperationalError as exc:
            db.rollback()
            logger.error(f"Storage failure while cancelling booking {booking_id}: {exc}")
            raise StorageUnavailable(details=str(exc.orig)) from exc

        if not freed:
            raise NotFoundOrForbidden()

        logger.info(
            f"Booking {booking_id} cancelled by user {requesting_user_id}"
            f"{' (admin)' if requesting_user_is_admin else ''}"
        )
        return freed[0]
