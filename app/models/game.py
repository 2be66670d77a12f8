"""
Game model
"""

from sqlalchemy import Column, Integer, String

from app.core.db import Base

class Game(Base):
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
