"""
Database models package
"""

from .hall import Hall
from .table import Table
from .game import Game
from .user import User
from .booking import Booking
from .hall_closure import HallClosure

__all__ = ["Hall", "Table", "Game", "User", "Booking", "HallClosure"]
