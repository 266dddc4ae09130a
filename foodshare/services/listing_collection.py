"""
Listing Collection

CRUD over food listings. Every returned listing has its owner resolved so
responses can show the poster's profile.

Partial update policy: a field is applied when its key is present with a
non-null value. A quantity of 0 and a price of "" are real updates.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlmodel import Session, col, select

from foodshare.database import coerce_row_id
from foodshare.models.listing import Listing
from foodshare.models.user import User
from foodshare.services.user_collection import UserCollection

logger = logging.getLogger(__name__)


class ListingCollection:
    @staticmethod
    def add_one(
        session: Session,
        user_id: int,
        name: str,
        quantity: Union[int, float],
        expiration: str,
        price: str,
        email: str,
    ) -> Listing:
        listing = Listing(
            user_id=user_id,
            date_created=datetime.now(timezone.utc),
            name=name,
            quantity=quantity,
            expiration=expiration,
            price=price,
            email=email,
        )
        session.add(listing)
        session.commit()
        session.refresh(listing)
        logger.info("User %s created listing %s", user_id, listing.id)
        return listing

    @staticmethod
    def find_one(session: Session, listing_id: Any) -> Optional[Listing]:
        row_id = coerce_row_id(listing_id)
        if row_id is None:
            return None
        return session.get(Listing, row_id)

    @staticmethod
    def find_all(session: Session) -> List[Listing]:
        """All listings, soonest expiration first"""
        query = select(Listing).order_by(Listing.expiration, Listing.id)
        return list(session.exec(query).all())

    @staticmethod
    def find_all_by_user(session: Session, user_id: int) -> Optional[List[Listing]]:
        """Listings by one user, soonest expiration first; None if the user is unknown"""
        user = UserCollection.find_one_by_user_id(session, user_id)
        if user is None:
            return None
        query = select(Listing).where(Listing.user_id == user.id).order_by(Listing.expiration, Listing.id)
        return list(session.exec(query).all())

    @staticmethod
    def find_all_by_communities(session: Session, community_names: Iterable[str]) -> List[Listing]:
        """Listings posted by users whose home community is one of `community_names`"""
        names = list(community_names)
        if not names:
            return []
        query = (
            select(Listing)
            .join(User, User.id == Listing.user_id)
            .where(col(User.home_community).in_(names))
            .order_by(Listing.expiration, Listing.id)
        )
        return list(session.exec(query).all())

    @staticmethod
    def update_one(session: Session, listing_id: int, details: Dict[str, Any]) -> Optional[Listing]:
        listing = session.get(Listing, listing_id)
        if listing is None:
            return None

        if details.get("quantity") is not None:
            listing.quantity = details["quantity"]
        if details.get("price") is not None:
            listing.price = details["price"]

        session.add(listing)
        session.commit()
        session.refresh(listing)
        return listing

    @staticmethod
    def delete_one(session: Session, listing_id: int) -> bool:
        listing = session.get(Listing, listing_id)
        if listing is None:
            return False
        session.delete(listing)
        session.commit()
        logger.info("Deleted listing %s", listing_id)
        return True

    @staticmethod
    def delete_many(session: Session, user_id: int) -> int:
        """Delete every listing owned by `user_id`; returns how many were removed"""
        listings = session.exec(select(Listing).where(Listing.user_id == user_id)).all()
        for listing in listings:
            session.delete(listing)
        session.commit()
        return len(listings)
