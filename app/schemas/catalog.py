"""
Catalog Pydantic schemas (halls, tables, games, closures)
"""

from datetime import date
from pydantic import BaseModel, Field

class HallCreate(BaseModel):
    """Schema for creating a hall"""
    name: str = Field(min_length=1, max_length=100)

class HallResponse(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True

class TableCreate(BaseModel):
    """Schema for creating a table"""
    name: str = Field(min_length=1, max_length=100)
    hall_id: int

class TableResponse(BaseModel):
    id: int
    name: str
    hall_id: int
    hall_name: str

class GameCreate(BaseModel):
    """Schema for creating a game"""
    name: str = Field(min_length=1, max_length=100)

class GameResponse(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True

class ClosureCreate(BaseModel):
    """Schema for closing a hall on a date"""
    closure_date: date

class ClosureResponse(BaseModel):
    hall_id: int
    hall_name: str
    closure_date: date
