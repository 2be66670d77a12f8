"""
Hall closure model
"""

from sqlalchemy import Column, Integer, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.db import Base

class HallClosure(Base):
    __tablename__ = "hall_closures"

    id = Column(Integer, primary_key=True, index=True)
    hall_id = Column(Integer, ForeignKey("halls.id", ondelete="CASCADE"), nullable=False)
    closure_date = Column(Date, nullable=False, index=True)

    # Relationships
    hall = relationship("Hall", back_populates="closures")

    __table_args__ = (
        UniqueConstraint("hall_id", "closure_date", name="uq_hall_closures_hall_date"),
    )
