"""
Excel export of bookings for administrators
"""

import io
from typing import List

import pandas as pd
from sqlalchemy.orm import Session

from app.services.repositories import BookingRepo

class ExcelService:
    """Service for handling Excel operations"""

    EXPORT_COLUMNS = [
        'Booking ID', 'Date', 'Hall', 'Table', 'Game', 'Players', 'Booked By'
    ]

    @staticmethod
    def bookings_frame(bookings: List[dict]) -> pd.DataFrame:
        """Build the export sheet from booking detail rows"""
        rows = [
            [
                b["id"],
                b["booking_date"].isoformat(),
                b["hall_name"],
                b["table_name"],
                b["game_name"] or "",
                b["player_count"],
                b["booked_by_username"] or "",
            ]
            for b in bookings
        ]
        return pd.DataFrame(rows, columns=ExcelService.EXPORT_COLUMNS)

    @staticmethod
    def export_bookings(db: Session) -> bytes:
        """Export every booking to an .xlsx workbook"""
        df = ExcelService.bookings_frame(BookingRepo.list_all(db))

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Bookings')

        return buffer.getvalue()
