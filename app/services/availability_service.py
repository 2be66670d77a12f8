"""
Per-table availability for a single date
"""

from datetime import date
from typing import List

from sqlalchemy.orm import Session

from app.schemas.booking import TableStatus
from app.services.repositories import availability_rows, natural_key

class AvailabilityService:
    """Service for availability queries"""

    @staticmethod
    def list_availability(db: Session, on_date: date) -> List[TableStatus]:
        """One status per table, grouped by hall and in natural table-name order.

        Tables with no booking on the date carry no booking fields, which is
        how callers tell that they are free.
        """
        rows = availability_rows(db, on_date)
        rows.sort(key=lambda r: (r["hall_name"], natural_key(r["table_name"]), r["table_id"]))

        return [
            TableStatus(
                table_id=row["table_id"],
                table_name=row["table_name"],
                hall_id=row["hall_id"],
                hall_name=row["hall_name"],
                hall_closed=row["closure_id"] is not None,
                booking_id=row["booking_id"],
                game_id=row["game_id"],
                game_name=row["game_name"],
                player_count=row["player_count"],
                booked_by_user_id=row["booked_by_user_id"],
                booked_by_username=row["booked_by_username"],
            )
            for row in rows
        ]

    @staticmethod
    def snapshot(db: Session, on_date: date) -> List[dict]:
        """JSON-ready availability, as pushed to websocket subscribers"""
        return [status.to_dict() for status in AvailabilityService.list_availability(db, on_date)]
