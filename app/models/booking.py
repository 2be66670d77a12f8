"""
Booking model
"""

from datetime import datetime
from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from app.core.db import Base

TABLE_DATE_CONSTRAINT = "uq_bookings_table_date"

class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    table_id = Column(Integer, ForeignKey("tables.id", ondelete="CASCADE"), nullable=False)
    booking_date = Column(Date, nullable=False, index=True)
    game_id = Column(Integer, ForeignKey("games.id", ondelete="SET NULL"), nullable=True)
    player_count = Column(Integer, nullable=False)
    booked_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    table = relationship("Table", back_populates="bookings")
    user = relationship("User", back_populates="bookings")
    game = relationship("Game")

    # The per-user-per-day index is toggled by Store.create_schema
    __table_args__ = (
        UniqueConstraint("table_id", "booking_date", name=TABLE_DATE_CONSTRAINT),
        CheckConstraint("player_count >= 1", name="ck_bookings_player_count_positive"),
    )
