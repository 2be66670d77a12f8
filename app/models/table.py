"""
Table model
"""

from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from app.core.db import Base

class Table(Base):
    __tablename__ = "tables"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    hall_id = Column(Integer, ForeignKey("halls.id", ondelete="CASCADE"), nullable=False, index=True)

    # Relationships
    hall = relationship("Hall", back_populates="tables")
    bookings = relationship("Booking", back_populates="table", cascade="all, delete-orphan", passive_deletes=True)
