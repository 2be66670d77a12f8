"""
Catalog management: halls, tables, games and hall closures
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, ValidationError
from app.models import Game, Hall, HallClosure, Table
from app.services.repositories import BookingRepo, ClosureRepo, GameRepo, HallRepo, TableRepo

logger = logging.getLogger(__name__)

DEFAULT_HALLS = ["Large Hall", "Small Hall"]
DEFAULT_TABLES = [
    ("Table A1", "Large Hall"),
    ("Table A2", "Large Hall"),
    ("Table A3", "Large Hall"),
    ("Table A4", "Large Hall"),
    ("Table B1", "Small Hall"),
    ("Table B2", "Small Hall"),
    ("Table B3", "Small Hall"),
]
DEFAULT_GAMES = ["Chess", "Checkers", "Monopoly", "Risk", "Catan", "Poker"]

GAME_DELETE_POLICIES = ("nullify", "cascade")


def _duplicate(kind: str, name: str) -> ConflictError:
    return ConflictError(f"{kind} with this name already exists.", reason=ConflictError.DUPLICATE_NAME, details={"name": name})


class CatalogService:
    """Service for admin-managed reference data"""

    @staticmethod
    def create_hall(db: Session, name: str) -> Hall:
        try:
            hall = HallRepo.create(db, name.strip())
        except IntegrityError as exc:
            db.rollback()
            raise _duplicate("Hall", name) from exc
        logger.info(f"Hall '{hall.name}' created")
        return hall

    @staticmethod
    def delete_hall(db: Session, hall_id: int) -> bool:
        """Delete a hall with its tables, their bookings and its closures"""
        hall = HallRepo.get(db, hall_id)
        if not hall:
            return False
        db.delete(hall)
        db.commit()
        logger.info(f"Hall {hall_id} deleted")
        return True

    @staticmethod
    def create_table(db: Session, name: str, hall_id: int) -> Table:
        if HallRepo.get(db, hall_id) is None:
            raise ValidationError(f"Hall {hall_id} does not exist.")
        try:
            table = TableRepo.create(db, name.strip(), hall_id)
        except IntegrityError as exc:
            db.rollback()
            raise _duplicate("Table", name) from exc
        logger.info(f"Table '{table.name}' created in hall {hall_id}")
        return table

    @staticmethod
    def delete_table(db: Session, table_id: int) -> bool:
        """Delete a table; its bookings go with it"""
        table = TableRepo.get(db, table_id)
        if not table:
            return False
        db.delete(table)
        db.commit()
        logger.info(f"Table {table_id} deleted")
        return True

    @staticmethod
    def create_game(db: Session, name: str) -> Game:
        try:
            game = GameRepo.create(db, name.strip())
        except IntegrityError as exc:
            db.rollback()
            raise _duplicate("Game", name) from exc
        logger.info(f"Game '{game.name}' created")
        return game

    @staticmethod
    def delete_game(db: Session, game_id: int, policy: str = "nullify") -> bool:
        """Delete a game, then either clear it from bookings or delete those bookings"""
        if policy not in GAME_DELETE_POLICIES:
            raise ValueError(f"Unknown game delete policy: {policy}")

        game = GameRepo.get(db, game_id)
        if not game:
            return False

        if policy == "cascade":
            affected = BookingRepo.delete_for_game(db, game_id)
        else:
            affected = BookingRepo.detach_game(db, game_id)
        db.delete(game)
        db.commit()

        logger.info(f"Game {game_id} deleted ({policy}, {affected} bookings affected)")
        return True

    @staticmethod
    def close_hall(db: Session, hall_id: int, closure_date: date) -> HallClosure:
        """Close a hall for a date. Closing an already closed hall is a no-op."""
        hall = HallRepo.get(db, hall_id)
        if hall is None:
            raise ValidationError(f"Hall {hall_id} does not exist.")

        existing = db.query(HallClosure).filter(
            HallClosure.hall_id == hall_id,
            HallClosure.closure_date == closure_date
        ).first()
        if existing:
            return existing

        closure = HallClosure(hall_id=hall_id, closure_date=closure_date)
        db.add(closure)
        try:
            db.commit()
        except IntegrityError:
            # Closed concurrently by another request
            db.rollback()
            return db.query(HallClosure).filter(
                HallClosure.hall_id == hall_id,
                HallClosure.closure_date == closure_date
            ).one()
        db.refresh(closure)
        logger.info(f"{hall.name} closed on {closure_date.isoformat()}")
        return closure

    @staticmethod
    def reopen_hall(db: Session, hall_id: int, closure_date: date) -> bool:
        removed = ClosureRepo.delete(db, hall_id, closure_date)
        if removed:
            logger.info(f"Hall {hall_id} reopened on {closure_date.isoformat()}")
        return removed > 0

    @staticmethod
    def seed_defaults(db: Session) -> Optional[dict]:
        """Populate an empty catalog with the default halls, tables and games"""
        seeded = {"halls": 0, "tables": 0, "games": 0}

        if db.query(Hall).count() == 0:
            halls = {name: Hall(name=name) for name in DEFAULT_HALLS}
            db.add_all(halls.values())
            db.flush()
            seeded["halls"] = len(halls)

            if db.query(Table).count() == 0:
                for table_name, hall_name in DEFAULT_TABLES:
                    db.add(Table(name=table_name, hall_id=halls[hall_name].id))
                seeded["tables"] = len(DEFAULT_TABLES)

        if db.query(Game).count() == 0:
            db.add_all([Game(name=name) for name in DEFAULT_GAMES])
            seeded["games"] = len(DEFAULT_GAMES)

        db.commit()

        if not any(seeded.values()):
            return None
        logger.info(f"Seeded default catalog: {seeded}")
        return seeded
