"""
Tests for availability queries and catalog cascades
"""

from datetime import date

import pytest

from app.core.db import Store
from app.models import Booking, Game, Hall, HallClosure, Table, User
from app.services.availability_service import AvailabilityService
from app.services.catalog_service import CatalogService
from app.services.ledger import BookingLedger
from app.services.repositories import natural_key
from app.services.user_service import UserService

# Test database setup
store = Store("sqlite:///./test_availability.db")

TUESDAY = date(2025, 7, 29)
NEXT_TUESDAY = date(2025, 8, 5)

@pytest.fixture
def db_session():
    """Create test database session"""
    store.create_schema()
    db = store.session()
    try:
        yield db
    finally:
        db.close()
        store.drop_schema()

@pytest.fixture
def club(db_session):
    """Two halls, tables whose names need numeric ordering, a game and two players"""
    large = Hall(name="Large Hall")
    small = Hall(name="Small Hall")
    db_session.add_all([large, small])
    db_session.flush()

    for name in ["A10", "A2", "A1"]:
        db_session.add(Table(name=name, hall_id=large.id))
    db_session.add(Table(name="B1", hall_id=small.id))

    chess = Game(name="Chess")
    alice = User(external_identity_id="100", display_name="Alice")
    bob = User(external_identity_id="200", display_name="Bob")
    db_session.add_all([chess, alice, bob])
    db_session.commit()

    tables = {t.name: t for t in db_session.query(Table).all()}
    return {"large": large, "small": small, "tables": tables, "chess": chess, "alice": alice, "bob": bob}

def test_natural_key_orders_numeric_suffixes():
    names = ["Table A10", "Table A2", "Table A1", "Table B3"]
    assert sorted(names, key=natural_key) == ["Table A1", "Table A2", "Table A10", "Table B3"]

def test_every_table_listed_in_hall_then_natural_order(db_session, club):
    statuses = AvailabilityService.list_availability(db_session, TUESDAY)

    assert [(s.hall_name, s.table_name) for s in statuses] == [
        ("Large Hall", "A1"),
        ("Large Hall", "A2"),
        ("Large Hall", "A10"),
        ("Small Hall", "B1"),
    ]
    assert all(s.available for s in statuses)
    assert all(s.booking_id is None and s.booked_by_user_id is None for s in statuses)

def test_booked_table_carries_booking_fields(db_session, club):
    a2 = club["tables"]["A2"]
    booking = BookingLedger.try_create(
        db_session, a2.id, TUESDAY, club["alice"].id, player_count=4, game_id=club["chess"].id
    )

    statuses = {s.table_name: s for s in AvailabilityService.list_availability(db_session, TUESDAY)}

    booked = statuses["A2"]
    assert booked.booking_id == booking.id
    assert booked.booked_by_user_id == club["alice"].id
    assert booked.booked_by_username == "Alice"
    assert booked.game_name == "Chess"
    assert booked.player_count == 4
    assert not booked.available
    assert statuses["A1"].available

    # Other dates are unaffected
    other_day = AvailabilityService.list_availability(db_session, NEXT_TUESDAY)
    assert all(s.available for s in other_day)

def test_availability_is_idempotent(db_session, club):
    BookingLedger.try_create(db_session, club["tables"]["A1"].id, TUESDAY, club["bob"].id, player_count=2)

    first = AvailabilityService.snapshot(db_session, TUESDAY)
    second = AvailabilityService.snapshot(db_session, TUESDAY)

    assert first == second
    assert first[0]["available"] is False

def test_closed_hall_tables_are_unavailable(db_session, club):
    CatalogService.close_hall(db_session, club["small"].id, TUESDAY)
    # Closing twice is harmless
    CatalogService.close_hall(db_session, club["small"].id, TUESDAY)

    statuses = {s.table_name: s for s in AvailabilityService.list_availability(db_session, TUESDAY)}
    assert statuses["B1"].hall_closed
    assert not statuses["B1"].available
    assert statuses["A1"].available
    assert db_session.query(HallClosure).count() == 1

    assert CatalogService.reopen_hall(db_session, club["small"].id, TUESDAY)
    statuses = {s.table_name: s for s in AvailabilityService.list_availability(db_session, TUESDAY)}
    assert statuses["B1"].available

def test_deleting_table_removes_its_bookings(db_session, club):
    a1 = club["tables"]["A1"]
    BookingLedger.try_create(db_session, a1.id, TUESDAY, club["alice"].id, player_count=4)
    BookingLedger.try_create(db_session, a1.id, NEXT_TUESDAY, club["bob"].id, player_count=4)
    a1_id = a1.id

    assert CatalogService.delete_table(db_session, a1_id)

    assert db_session.query(Booking).filter(Booking.table_id == a1_id).count() == 0
    for day in (TUESDAY, NEXT_TUESDAY):
        names = [s.table_name for s in AvailabilityService.list_availability(db_session, day)]
        assert "A1" not in names

def test_deleting_hall_removes_tables_and_bookings(db_session, club):
    b1 = club["tables"]["B1"]
    BookingLedger.try_create(db_session, b1.id, TUESDAY, club["alice"].id, player_count=4)
    CatalogService.close_hall(db_session, club["small"].id, NEXT_TUESDAY)

    assert CatalogService.delete_hall(db_session, club["small"].id)

    assert db_session.query(Table).filter(Table.name == "B1").count() == 0
    assert db_session.query(Booking).count() == 0
    assert db_session.query(HallClosure).count() == 0

def test_deleting_game_nullifies_bookings_by_default(db_session, club):
    chess_id = club["chess"].id
    booking = BookingLedger.try_create(
        db_session, club["tables"]["A1"].id, TUESDAY, club["alice"].id, player_count=2, game_id=chess_id
    )
    booking_id = booking.id

    assert CatalogService.delete_game(db_session, chess_id)

    kept = db_session.get(Booking, booking_id)
    assert kept is not None
    assert kept.game_id is None

def test_deleting_game_can_cascade(db_session, club):
    chess_id = club["chess"].id
    BookingLedger.try_create(
        db_session, club["tables"]["A1"].id, TUESDAY, club["alice"].id, player_count=2, game_id=chess_id
    )
    BookingLedger.try_create(db_session, club["tables"]["A2"].id, TUESDAY, club["bob"].id, player_count=2)

    assert CatalogService.delete_game(db_session, chess_id, policy="cascade")

    remaining = db_session.query(Booking).all()
    assert len(remaining) == 1
    assert remaining[0].booked_by_user_id == club["bob"].id

def test_unknown_game_delete_policy(db_session, club):
    with pytest.raises(ValueError):
        CatalogService.delete_game(db_session, club["chess"].id, policy="archive")

def test_deleting_user_removes_their_bookings(db_session, club):
    BookingLedger.try_create(db_session, club["tables"]["A1"].id, TUESDAY, club["alice"].id, player_count=2)
    BookingLedger.try_create(db_session, club["tables"]["A2"].id, TUESDAY, club["bob"].id, player_count=2)
    alice_id = club["alice"].id

    assert UserService.delete_user(db_session, alice_id)

    assert db_session.query(Booking).filter(Booking.booked_by_user_id == alice_id).count() == 0
    assert db_session.query(Booking).count() == 1

def test_delete_missing_catalog_items(db_session, club):
    assert not CatalogService.delete_table(db_session, 9999)
    assert not CatalogService.delete_hall(db_session, 9999)
    assert not CatalogService.delete_game(db_session, 9999)
    assert not UserService.delete_user(db_session, 9999)
