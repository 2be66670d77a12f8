"""
Public API routes - no authentication required
"""

from datetime import date

from fastapi import APIRouter, Request

from app.services.booking_calendar import describe_weekdays, upcoming_booking_dates
from app.utils.responses import success_response

router = APIRouter()

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}

@router.get("/api/booking-dates")
async def booking_dates(request: Request):
    """Next bookable dates, as offered in the booking form"""
    settings = request.app.state.settings
    dates = upcoming_booking_dates(
        date.today(),
        settings.BOOKING_WEEKDAYS,
        settings.UPCOMING_DATES_COUNT
    )

    return success_response(
        message="Upcoming booking dates retrieved",
        data={
            "weekdays": describe_weekdays(settings.BOOKING_WEEKDAYS),
            "dates": [d.isoformat() for d in dates]
        }
    )
