"""
User directory: login upsert and admin management
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import User
from app.schemas.user import IdentityProfile
from app.services.repositories import UserRepo

logger = logging.getLogger(__name__)

class UserService:
    """Service for users known through the identity provider"""

    @staticmethod
    def upsert_from_identity(db: Session, profile: IdentityProfile, admin_identity_id: Optional[str] = None) -> User:
        """Create the user on first login, refresh name and avatar afterwards.

        The identity matching ``admin_identity_id`` is promoted to admin. Admin
        status is never revoked here.
        """
        user = UserRepo.get_by_external_id(db, profile.external_id)

        if user is None:
            user = User(
                external_identity_id=profile.external_id,
                display_name=profile.display_name,
                avatar_ref=profile.avatar_ref,
                is_admin=False,
            )
            db.add(user)
            try:
                db.commit()
            except IntegrityError:
                # First login raced with another request for the same identity
                db.rollback()
                user = UserRepo.get_by_external_id(db, profile.external_id)
            else:
                logger.info(f"New user {profile.display_name} ({profile.external_id}) registered")

        user.display_name = profile.display_name
        user.avatar_ref = profile.avatar_ref
        user.last_login_at = datetime.utcnow()

        if admin_identity_id and profile.external_id == admin_identity_id and not user.is_admin:
            user.is_admin = True
            logger.info(f"User {profile.display_name} ({profile.external_id}) set to admin status.")

        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def delete_user(db: Session, user_id: int) -> bool:
        """Delete a user together with their bookings"""
        user = UserRepo.get(db, user_id)
        if not user:
            return False
        db.delete(user)
        db.commit()
        logger.info(f"User {user_id} deleted")
        return True
