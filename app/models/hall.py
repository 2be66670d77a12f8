"""
Hall model
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from app.core.db import Base

class Hall(Base):
    __tablename__ = "halls"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)

    # Relationships
    tables = relationship("Table", back_populates="hall", cascade="all, delete-orphan", passive_deletes=True)
    closures = relationship("HallClosure", back_populates="hall", cascade="all, delete-orphan", passive_deletes=True)
