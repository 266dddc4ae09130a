"""
User Directory

Resolves ids, usernames and credentials to User rows. Username lookups are
case-insensitive, matching the uniqueness rule on accounts.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from foodshare.database import coerce_row_id
from foodshare.models.user import User
from foodshare.utils.passwords import hash_password, verify_password

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("home_community", "contact_info", "allergies", "other_dietary_restrictions")


class UserCollection:
    @staticmethod
    def add_one(session: Session, username: str, password: str, **profile: Optional[str]) -> Optional[User]:
        """Create an account; None if the username was taken concurrently"""
        user = User(
            username=username,
            password_hash=hash_password(password),
            **{k: v for k, v in profile.items() if k in PROFILE_FIELDS},
        )
        try:
            session.add(user)
            session.commit()
        except IntegrityError:
            session.rollback()
            logger.warning("Username %s was taken concurrently", username)
            return None
        session.refresh(user)
        logger.info("Created user %s (%s)", user.id, user.username)
        return user

    @staticmethod
    def find_one_by_user_id(session: Session, user_id: Any) -> Optional[User]:
        row_id = coerce_row_id(user_id)
        if row_id is None:
            return None
        return session.get(User, row_id)

    @staticmethod
    def find_one_by_username(session: Session, username: str) -> Optional[User]:
        if not isinstance(username, str):
            return None
        query = select(User).where(func.lower(User.username) == username.lower())
        return session.exec(query).first()

    @staticmethod
    def find_one_by_username_and_password(session: Session, username: str, password: str) -> Optional[User]:
        user = UserCollection.find_one_by_username(session, username)
        if user is None or not isinstance(password, str):
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    @staticmethod
    def update_one(session: Session, user_id: int, details: Dict[str, Any]) -> Optional[User]:
        """Apply only the keys present in `details`; `password` is re-hashed. None on a username clash"""
        user = session.get(User, user_id)
        if user is None:
            return None

        if details.get("username") is not None:
            user.username = details["username"]
        if details.get("password") is not None:
            user.password_hash = hash_password(details["password"])
        for key in PROFILE_FIELDS:
            if key in details:
                setattr(user, key, details[key])

        try:
            session.add(user)
            session.commit()
        except IntegrityError:
            session.rollback()
            logger.warning("Username %s was taken concurrently", details.get("username"))
            return None
        session.refresh(user)
        return user

    @staticmethod
    def delete_one(session: Session, user_id: int) -> bool:
        user = session.get(User, user_id)
        if user is None:
            return False
        session.delete(user)
        session.commit()
        logger.info("Deleted user %s", user_id)
        return True
