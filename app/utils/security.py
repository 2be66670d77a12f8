"""
Session-based authentication dependencies
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.models import User
from app.services.repositories import UserRepo
from app.utils.responses import forbidden_error, unauthorized_error

def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Resolve the logged-in user from the signed session cookie"""
    user_id = request.session.get("user_id")
    if user_id is None:
        unauthorized_error()

    user = UserRepo.get(db, user_id)
    if user is None:
        # Session outlived the account
        request.session.clear()
        unauthorized_error()

    return user

def require_admin(user: User = Depends(get_current_user)) -> User:
    """Allow administrators only"""
    if not user.is_admin:
        forbidden_error()
    return user
