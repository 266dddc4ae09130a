"""
Follow Collection

A follow links a user to one community name. The (user, community) pair is
unique at the database level, so two racing follow requests cannot both
insert: the loser gets None back instead of a second row.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from foodshare.models.follow import Follow

logger = logging.getLogger(__name__)


class FollowCollection:
    @staticmethod
    def add_one(session: Session, user_id: int, community_name: str) -> Optional[Follow]:
        follow = Follow(user_id=user_id, community_name=community_name)
        try:
            session.add(follow)
            session.commit()
        except IntegrityError:
            session.rollback()
            logger.warning("Duplicate follow rejected: user %s, community %s", user_id, community_name)
            return None
        session.refresh(follow)
        return follow

    @staticmethod
    def find_one(session: Session, user_id: int, community_name: str) -> Optional[Follow]:
        query = select(Follow).where(Follow.user_id == user_id, Follow.community_name == community_name)
        return session.exec(query).first()

    @staticmethod
    def find_all_follows_by_user_id(session: Session, user_id: int) -> List[Follow]:
        query = select(Follow).where(Follow.user_id == user_id).order_by(Follow.id)
        return list(session.exec(query).all())

    @staticmethod
    def delete_one(session: Session, user_id: int, community_name: str) -> bool:
        follow = FollowCollection.find_one(session, user_id, community_name)
        if follow is None:
            return False
        session.delete(follow)
        session.commit()
        return True

    @staticmethod
    def delete_many(session: Session, user_id: int) -> int:
        follows = FollowCollection.find_all_follows_by_user_id(session, user_id)
        for follow in follows:
            session.delete(follow)
        session.commit()
        return len(follows)
