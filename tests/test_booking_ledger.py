"""
Tests for the booking ledger's uniqueness and cancel rules
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.db import Store
from app.core.errors import ConflictError, NotFoundOrForbidden, StorageUnavailable, ValidationError
from app.models import Booking, Hall, Table, User
from app.services.ledger import BookingLedger, classify_integrity_error

# Test database setup
store = Store("sqlite:///./test_ledger.db")

TUESDAY = date(2025, 7, 29)
NEXT_TUESDAY = date(2025, 8, 5)

@pytest.fixture
def db_session():
    """Create test database session with the strict per-user rule"""
    store.create_schema(one_booking_per_user_per_day=True)
    db = store.session()
    try:
        yield db
    finally:
        db.close()
        store.drop_schema()

@pytest.fixture
def relaxed_session():
    """Test database session without the per-user-per-day rule"""
    store.create_schema(one_booking_per_user_per_day=False)
    db = store.session()
    try:
        yield db
    finally:
        db.close()
        store.drop_schema()

def seed(db):
    """Two tables in one hall and ten users"""
    hall = Hall(name="Large Hall")
    db.add(hall)
    db.flush()

    tables = [Table(name="A1", hall_id=hall.id), Table(name="A2", hall_id=hall.id)]
    users = [User(external_identity_id=f"ext-{i}", display_name=f"Player {i}") for i in range(10)]
    admin = User(external_identity_id="ext-admin", display_name="Admin", is_admin=True)
    db.add_all(tables + users + [admin])
    db.commit()
    return {"tables": tables, "users": users, "admin": admin}

@pytest.fixture
def catalog(db_session):
    return seed(db_session)

def test_create_booking(db_session, catalog):
    table = catalog["tables"][0]
    user = catalog["users"][0]

    booking = BookingLedger.try_create(db_session, table.id, TUESDAY, user.id, player_count=4)

    assert booking.id is not None
    assert booking.table_id == table.id
    assert booking.booking_date == TUESDAY
    assert booking.booked_by_user_id == user.id
    assert booking.player_count == 4
    assert booking.game_id is None

def test_same_table_same_date_conflicts(db_session, catalog):
    table = catalog["tables"][0]
    first, second = catalog["users"][:2]

    BookingLedger.try_create(db_session, table.id, TUESDAY, first.id, player_count=4)

    with pytest.raises(ConflictError) as exc_info:
        BookingLedger.try_create(db_session, table.id, TUESDAY, second.id, player_count=2)

    assert exc_info.value.reason == ConflictError.TABLE_ALREADY_BOOKED
    assert exc_info.value.error_code == "TABLE_ALREADY_BOOKED"
    assert db_session.query(Booking).filter(Booking.table_id == table.id).count() == 1

def test_same_table_other_date_is_allowed(db_session, catalog):
    table = catalog["tables"][0]
    first, second = catalog["users"][:2]

    BookingLedger.try_create(db_session, table.id, TUESDAY, first.id, player_count=4)
    BookingLedger.try_create(db_session, table.id, NEXT_TUESDAY, second.id, player_count=4)

    assert db_session.query(Booking).count() == 2

def test_one_booking_per_user_per_day(db_session, catalog):
    a1, a2 = catalog["tables"]
    user = catalog["users"][0]

    BookingLedger.try_create(db_session, a1.id, TUESDAY, user.id, player_count=4)

    with pytest.raises(ConflictError) as exc_info:
        BookingLedger.try_create(db_session, a2.id, TUESDAY, user.id, player_count=4)

    assert exc_info.value.reason == ConflictError.USER_ALREADY_BOOKED
    assert "One booking per user per day" in exc_info.value.message
    assert db_session.query(Booking).count() == 1

    # A different date is fine
    BookingLedger.try_create(db_session, a2.id, NEXT_TUESDAY, user.id, player_count=4)

def test_per_user_rule_can_be_disabled(relaxed_session):
    catalog = seed(relaxed_session)
    a1, a2 = catalog["tables"]
    user = catalog["users"][0]

    BookingLedger.try_create(relaxed_session, a1.id, TUESDAY, user.id, player_count=4)
    BookingLedger.try_create(relaxed_session, a2.id, TUESDAY, user.id, player_count=2)

    assert relaxed_session.query(Booking).filter(Booking.booked_by_user_id == user.id).count() == 2

    # The table rule still holds
    with pytest.raises(ConflictError) as exc_info:
        BookingLedger.try_create(relaxed_session, a1.id, TUESDAY, catalog["users"][1].id, player_count=1)
    assert exc_info.value.reason == ConflictError.TABLE_ALREADY_BOOKED

def test_player_count_must_be_positive(db_session, catalog):
    table = catalog["tables"][0]
    user = catalog["users"][0]

    with pytest.raises(ValidationError):
        BookingLedger.try_create(db_session, table.id, TUESDAY, user.id, player_count=0)

    assert db_session.query(Booking).count() == 0

def test_unknown_table_is_rejected(db_session, catalog):
    user = catalog["users"][0]

    with pytest.raises(ValidationError):
        BookingLedger.try_create(db_session, 9999, TUESDAY, user.id, player_count=2)

def test_concurrent_creates_only_one_wins(db_session, catalog):
    """N racing requests for one table and date: one booking, N-1 conflicts"""
    table_id = catalog["tables"][0].id
    user_ids = [u.id for u in catalog["users"]]
    barrier = threading.Barrier(len(user_ids))

    def attempt(user_id):
        db = store.session()
        try:
            barrier.wait()
            BookingLedger.try_create(db, table_id, TUESDAY, user_id, player_count=2)
            return "booked"
        except ConflictError as e:
            return e.reason
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=len(user_ids)) as pool:
        results = list(pool.map(attempt, user_ids))

    assert results.count("booked") == 1
    assert results.count(ConflictError.TABLE_ALREADY_BOOKED) == len(user_ids) - 1

    db_session.expire_all()
    assert db_session.query(Booking).filter(
        Booking.table_id == table_id,
        Booking.booking_date == TUESDAY
    ).count() == 1

def test_owner_can_cancel(db_session, catalog):
    table = catalog["tables"][0]
    user = catalog["users"][0]
    booking = BookingLedger.try_create(db_session, table.id, TUESDAY, user.id, player_count=4)

    freed = BookingLedger.cancel(db_session, booking.id, user.id)

    assert freed == TUESDAY
    assert db_session.query(Booking).count() == 0

def test_other_user_cannot_cancel(db_session, catalog):
    table = catalog["tables"][0]
    owner, stranger = catalog["users"][:2]
    booking = BookingLedger.try_create(db_session, table.id, TUESDAY, owner.id, player_count=4)

    with pytest.raises(NotFoundOrForbidden):
        BookingLedger.cancel(db_session, booking.id, stranger.id, requesting_user_is_admin=False)

    assert db_session.query(Booking).filter(Booking.id == booking.id).count() == 1

def test_admin_can_cancel_any_booking(db_session, catalog):
    table = catalog["tables"][0]
    owner = catalog["users"][0]
    admin = catalog["admin"]
    booking = BookingLedger.try_create(db_session, table.id, TUESDAY, owner.id, player_count=4)

    BookingLedger.cancel(db_session, booking.id, admin.id, requesting_user_is_admin=True)

    assert db_session.query(Booking).count() == 0

def test_cancel_unknown_booking(db_session, catalog):
    user = catalog["users"][0]

    with pytest.raises(NotFoundOrForbidden) as exc_info:
        BookingLedger.cancel(db_session, 12345, user.id)

    assert exc_info.value.status_code == 404

def test_cancel_then_rebook(db_session, catalog):
    table = catalog["tables"][0]
    first, second = catalog["users"][:2]
    booking = BookingLedger.try_create(db_session, table.id, TUESDAY, first.id, player_count=4)
    BookingLedger.cancel(db_session, booking.id, first.id)

    rebooked = BookingLedger.try_create(db_session, table.id, TUESDAY, second.id, player_count=3)

    assert rebooked.booked_by_user_id == second.id

def test_unreachable_store_is_reported_as_unavailable():
    broken = Store("sqlite:////nonexistent-directory/for/bookings.db")
    db = broken.session()
    try:
        with pytest.raises(StorageUnavailable) as exc_info:
            BookingLedger.try_create(db, 1, TUESDAY, 1, player_count=2)
    finally:
        db.close()
        broken.dispose()

    assert exc_info.value.status_code == 503

@pytest.mark.parametrize("missing", ["table_id", "user_id"])
def test_missing_reference_is_a_validation_error(db_session, catalog, missing):
    ids = {"table_id": catalog["tables"][0].id, "user_id": catalog["users"][0].id}
    ids[missing] = None

    with pytest.raises(ValidationError):
        BookingLedger.try_create(db_session, ids["table_id"], TUESDAY, ids["user_id"], player_count=2)

    assert db_session.query(Booking).count() == 0

@pytest.mark.parametrize("message, expected", [
    ("NOT NULL constraint failed: bookings.table_id", ValidationError),
    ("NOT NULL constraint failed: bookings.booked_by_user_id", ValidationError),
    ('null value in column "table_id" of relation "bookings" violates not-null constraint', ValidationError),
    ("UNIQUE constraint failed: bookings.table_id, bookings.booking_date", ConflictError),
    ("UNIQUE constraint failed: bookings.booked_by_user_id, bookings.booking_date", ConflictError),
    ('duplicate key value violates unique constraint "uq_bookings_user_date"', ConflictError),
    ("FOREIGN KEY constraint failed", ValidationError),
])
def test_integrity_errors_are_classified(message, expected):
    error = classify_integrity_error(IntegrityError("INSERT INTO bookings ...", {}, Exception(message)))

    assert isinstance(error, expected)

def test_user_day_violation_names_the_user_rule():
    error = classify_integrity_error(IntegrityError(
        "INSERT INTO bookings ...", {},
        Exception("UNIQUE constraint failed: bookings.booked_by_user_id, bookings.booking_date")
    ))

    assert error.reason == ConflictError.USER_ALREADY_BOOKED
