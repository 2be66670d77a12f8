"""
Admin API routes - requires an administrator session
"""

from datetime import date
from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.models import User
from app.schemas.catalog import (
    ClosureCreate, ClosureResponse, GameCreate, GameResponse,
    HallCreate, HallResponse, TableCreate, TableResponse
)
from app.schemas.user import UserResponse
from app.services.booking_service import BookingService
from app.services.catalog_service import CatalogService
from app.services.excel_service import ExcelService
from app.services.repositories import ClosureRepo, HallRepo, UserRepo
from app.services.user_service import UserService
from app.api.routes_bookings import get_booking_service
from app.utils.responses import success_response, not_found_error
from app.utils.security import require_admin

router = APIRouter()

# -------- Bookings --------

@router.get("/bookings")
async def list_all_bookings(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Every booking, ordered by date and table"""
    bookings = BookingService.list_all_bookings(db)

    return success_response(
        message="All bookings retrieved",
        data={"bookings": bookings, "total": len(bookings)}
    )

@router.delete("/bookings/{booking_id}")
async def admin_cancel_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    service: BookingService = Depends(get_booking_service)
):
    """Cancel any booking"""
    freed_date = await service.cancel_booking(db, booking_id, admin)

    return success_response(
        message="Booking cancelled by admin successfully!",
        data={"booking_id": booking_id, "booking_date": freed_date.isoformat()}
    )

@router.get("/bookings/export.xlsx")
async def export_bookings(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Download all bookings as an Excel workbook"""
    excel_content = ExcelService.export_bookings(db)

    return Response(
        content=excel_content,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename=bookings_{date.today().isoformat()}.xlsx"}
    )

# -------- Halls --------

@router.get("/halls")
async def list_halls(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    halls = HallRepo.list_all(db)
    return success_response(
        message="Halls retrieved",
        data=[HallResponse.model_validate(h).model_dump() for h in halls]
    )

@router.post("/halls")
async def create_hall(
    hall_data: HallCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    hall = CatalogService.create_hall(db, hall_data.name)
    return success_response(
        message="Hall added successfully!",
        data=HallResponse.model_validate(hall).model_dump(),
        status_code=201
    )

@router.delete("/halls/{hall_id}")
async def delete_hall(
    hall_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Delete a hall with its tables and their bookings"""
    if not CatalogService.delete_hall(db, hall_id):
        raise not_found_error("Hall")
    return success_response(message="Hall deleted successfully!", data={"deleted_hall_id": hall_id})

# -------- Tables --------

@router.post("/tables")
async def create_table(
    table_data: TableCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    table = CatalogService.create_table(db, table_data.name, table_data.hall_id)
    return success_response(
        message="Table added successfully!",
        data=TableResponse(id=table.id, name=table.name, hall_id=table.hall_id, hall_name=table.hall.name).model_dump(),
        status_code=201
    )

@router.delete("/tables/{table_id}")
async def delete_table(
    table_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Delete a table and its bookings"""
    if not CatalogService.delete_table(db, table_id):
        raise not_found_error("Table")
    return success_response(message="Table deleted successfully!", data={"deleted_table_id": table_id})

# -------- Games --------

@router.post("/games")
async def create_game(
    game_data: GameCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    game = CatalogService.create_game(db, game_data.name)
    return success_response(
        message="Game added successfully!",
        data=GameResponse.model_validate(game).model_dump(),
        status_code=201
    )

@router.delete("/games/{game_id}")
async def delete_game(
    game_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Delete a game; bookings are cleared or removed per GAME_DELETE_POLICY"""
    policy = request.app.state.settings.GAME_DELETE_POLICY
    if not CatalogService.delete_game(db, game_id, policy=policy):
        raise not_found_error("Game")
    return success_response(message="Game deleted successfully!", data={"deleted_game_id": game_id, "policy": policy})

# -------- Hall closures --------

@router.get("/closures")
async def list_closures(
    include_past: bool = False,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Dates on which halls are closed"""
    closures = ClosureRepo.list_all(db, from_date=None if include_past else date.today())
    return success_response(
        message="Hall closures retrieved",
        data=[
            ClosureResponse(hall_id=c.hall_id, hall_name=c.hall.name, closure_date=c.closure_date).model_dump()
            for c in closures
        ]
    )

@router.post("/halls/{hall_id}/closures")
async def close_hall(
    hall_id: int,
    closure_data: ClosureCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    service: BookingService = Depends(get_booking_service)
):
    """Close a hall for one date"""
    closure = CatalogService.close_hall(db, hall_id, closure_data.closure_date)
    await service.broadcast_availability(db, closure.closure_date)

    return success_response(
        message=f"{closure.hall.name} disabled successfully for {closure.closure_date.isoformat()}",
        data=ClosureResponse(hall_id=closure.hall_id, hall_name=closure.hall.name, closure_date=closure.closure_date).model_dump(),
        status_code=201
    )

@router.delete("/halls/{hall_id}/closures/{closure_date}")
async def reopen_hall(
    hall_id: int,
    closure_date: date,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    service: BookingService = Depends(get_booking_service)
):
    """Reopen a hall closed for one date"""
    if not CatalogService.reopen_hall(db, hall_id, closure_date):
        raise not_found_error("Hall closure")
    await service.broadcast_availability(db, closure_date)

    return success_response(
        message=f"Hall enabled successfully for {closure_date.isoformat()}",
        data={"hall_id": hall_id, "closure_date": closure_date.isoformat()}
    )

# -------- Users --------

@router.get("/users")
async def list_users(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    users = UserRepo.list_all(db)
    return success_response(
        message="Users retrieved",
        data=[UserResponse.model_validate(u).model_dump() for u in users]
    )

@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Delete a user and their bookings"""
    if not UserService.delete_user(db, user_id):
        raise not_found_error("User")
    return success_response(message="User deleted successfully!", data={"deleted_user_id": user_id})
