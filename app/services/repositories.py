"""
Repository layer over the relational store.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, List, Optional, Sequence

from sqlalchemy import and_, delete, select, update
from sqlalchemy.orm import Session

from app.models import Booking, Game, Hall, HallClosure, Table, User


def natural_key(name: str) -> tuple:
    """Sort key that compares digit runs numerically ("A2" < "A10")"""
    parts = re.split(r"(\d+)", name or "")
    return tuple((0, int(p), "") if p.isdigit() else (1, 0, p.lower()) for p in parts)


# -------- Catalog repositories --------

class HallRepo:
    @staticmethod
    def list_all(db: Session) -> List[Hall]:
        return db.query(Hall).order_by(Hall.name).all()

    @staticmethod
    def get(db: Session, hall_id: int) -> Optional[Hall]:
        return db.get(Hall, hall_id)

    @staticmethod
    def create(db: Session, name: str) -> Hall:
        hall = Hall(name=name)
        db.add(hall)
        db.commit()
        db.refresh(hall)
        return hall


class TableRepo:
    @staticmethod
    def list_all(db: Session) -> List[Table]:
        tables = db.query(Table).join(Hall).all()
        return sorted(tables, key=lambda t: (t.hall.name, natural_key(t.name), t.id))

    @staticmethod
    def get(db: Session, table_id: int) -> Optional[Table]:
        return db.get(Table, table_id)

    @staticmethod
    def create(db: Session, name: str, hall_id: int) -> Table:
        table = Table(name=name, hall_id=hall_id)
        db.add(table)
        db.commit()
        db.refresh(table)
        return table


class GameRepo:
    @staticmethod
    def list_all(db: Session) -> List[Game]:
        return db.query(Game).order_by(Game.name).all()

    @staticmethod
    def get(db: Session, game_id: int) -> Optional[Game]:
        return db.get(Game, game_id)

    @staticmethod
    def create(db: Session, name: str) -> Game:
        game = Game(name=name)
        db.add(game)
        db.commit()
        db.refresh(game)
        return game


class ClosureRepo:
    @staticmethod
    def is_closed(db: Session, hall_id: int, on_date: date) -> bool:
        return db.query(HallClosure.id).filter(
            HallClosure.hall_id == hall_id,
            HallClosure.closure_date == on_date
        ).first() is not None

    @staticmethod
    def list_all(db: Session, from_date: Optional[date] = None) -> List[HallClosure]:
        query = db.query(HallClosure).join(Hall)
        if from_date is not None:
            query = query.filter(HallClosure.closure_date >= from_date)
        return query.order_by(HallClosure.closure_date, Hall.name).all()

    @staticmethod
    def delete(db: Session, hall_id: int, on_date: date) -> int:
        result = db.execute(
            delete(HallClosure).where(
                HallClosure.hall_id == hall_id,
                HallClosure.closure_date == on_date
            )
        )
        db.commit()
        return result.rowcount


# -------- User repository --------

class UserRepo:
    @staticmethod
    def get(db: Session, user_id: int) -> Optional[User]:
        return db.get(User, user_id)

    @staticmethod
    def get_by_external_id(db: Session, external_id: str) -> Optional[User]:
        return db.query(User).filter(User.external_identity_id == external_id).first()

    @staticmethod
    def list_all(db: Session) -> List[User]:
        return db.query(User).order_by(User.display_name).all()


# -------- Booking read repository --------

class BookingRepo:
    """Read-side booking queries. Writes go through BookingLedger."""

    @staticmethod
    def _detail_query():
        return (
            select(
                Booking.id,
                Booking.table_id,
                Table.name.label("table_name"),
                Hall.name.label("hall_name"),
                Booking.booking_date,
                Booking.game_id,
                Game.name.label("game_name"),
                Booking.player_count,
                Booking.booked_by_user_id,
                User.display_name.label("booked_by_username"),
            )
            .join(Table, Booking.table_id == Table.id)
            .join(Hall, Table.hall_id == Hall.id)
            .join(User, Booking.booked_by_user_id == User.id)
            .outerjoin(Game, Booking.game_id == Game.id)
        )

    @staticmethod
    def _sorted(rows: Sequence[Any]) -> List[dict]:
        items = [dict(row._mapping) for row in rows]
        return sorted(items, key=lambda b: (b["booking_date"], natural_key(b["table_name"]), b["id"]))

    @staticmethod
    def list_for_user(db: Session, user_id: int, from_date: Optional[date] = None) -> List[dict]:
        query = BookingRepo._detail_query().where(Booking.booked_by_user_id == user_id)
        if from_date is not None:
            query = query.where(Booking.booking_date >= from_date)
        return BookingRepo._sorted(db.execute(query).all())

    @staticmethod
    def list_all(db: Session) -> List[dict]:
        return BookingRepo._sorted(db.execute(BookingRepo._detail_query()).all())

    @staticmethod
    def detach_game(db: Session, game_id: int) -> int:
        result = db.execute(update(Booking).where(Booking.game_id == game_id).values(game_id=None))
        return result.rowcount

    @staticmethod
    def delete_for_game(db: Session, game_id: int) -> int:
        result = db.execute(delete(Booking).where(Booking.game_id == game_id))
        return result.rowcount


def availability_rows(db: Session, on_date: date) -> List[dict]:
    """Every table, left-joined to its booking and its hall's closure on one date"""
    query = (
        select(
            Table.id.label("table_id"),
            Table.name.label("table_name"),
            Hall.id.label("hall_id"),
            Hall.name.label("hall_name"),
            HallClosure.id.label("closure_id"),
            Booking.id.label("booking_id"),
            Booking.game_id,
            Game.name.label("game_name"),
            Booking.player_count,
            Booking.booked_by_user_id,
            User.display_name.label("booked_by_username"),
        )
        .join(Hall, Table.hall_id == Hall.id)
        .outerjoin(Booking, and_(Booking.table_id == Table.id, Booking.booking_date == on_date))
        .outerjoin(Game, Booking.game_id == Game.id)
        .outerjoin(User, Booking.booked_by_user_id == User.id)
        .outerjoin(HallClosure, and_(HallClosure.hall_id == Hall.id, HallClosure.closure_date == on_date))
    )
    return [dict(row._mapping) for row in db.execute(query).all()]
