"""
Follow API Routes
Follow and unfollow housing communities, and browse listings from followed communities.
"""

from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlmodel import Session

from foodshare.database import get_session
from foodshare.models.follow import Follow
from foodshare.routes.listings import construct_listings_response
from foodshare.services.follow_collection import FollowCollection
from foodshare.services.listing_collection import ListingCollection
from foodshare.utils.follow_guards import REPEAT_FOLLOW_ERROR, is_repeat_follow, is_valid_community_name
from foodshare.utils.guard_chain import GuardChain, GuardContext, error_response
from foodshare.utils.user_guards import is_current_session_user_exists, is_user_logged_in

router = APIRouter()



class FollowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    user_id: int
    community_name: str
    date_created: datetime


def construct_follow_response(follow: Follow) -> Dict[str, Any]:
    return FollowResponse.model_validate(follow).model_dump(mode="json", by_alias=True)


# ============================================================================
# Guard Chains
# ============================================================================

SESSION_FOLLOWS_CHAIN = GuardChain(is_current_session_user_exists, is_user_logged_in)

FOLLOWED_LISTINGS_CHAIN = GuardChain(is_current_session_user_exists, is_user_logged_in)

FOLLOW_CHAIN = GuardChain(
    is_current_session_user_exists,
    is_user_logged_in,
    is_repeat_follow,
    is_valid_community_name,
)

UNFOLLOW_CHAIN = GuardChain(is_current_session_user_exists, is_user_logged_in, is_valid_community_name)


# ============================================================================
# Follow Endpoints
# ============================================================================


@router.get("/follows/session")
def get_session_follows(request: Request, session: Session = Depends(get_session)):
    """Get every community the signed in user follows"""

    def handler(ctx: GuardContext):
        follows = FollowCollection.find_all_follows_by_user_id(ctx.db, ctx.user_session.user_id)
        return JSONResponse(status_code=200, content=[construct_follow_response(f) for f in follows])

    return SESSION_FOLLOWS_CHAIN.run(GuardContext.from_request(request, session), handler)


@router.get("/follows/listings")
def get_followed_listings(request: Request, session: Session = Depends(get_session)):
    """
    Get listings posted by members of the communities the signed in user follows.

    A listing belongs to a community through its poster's home community.
    Sorted by expiration, soonest first.
    """

    def handler(ctx: GuardContext):
        follows = FollowCollection.find_all_follows_by_user_id(ctx.db, ctx.user_session.user_id)
        community_names = [follow.community_name for follow in follows]
        return construct_listings_response(ListingCollection.find_all_by_communities(ctx.db, community_names))

    return FOLLOWED_LISTINGS_CHAIN.run(GuardContext.from_request(request, session), handler)


@router.put("/follows/{community_name}")
def follow_community(community_name: str, request: Request, session: Session = Depends(get_session)):
    """
    Follow a community.

    Raises 403 if not signed in, 409 if already followed, 400 for an unknown community.
    """

    def handler(ctx: GuardContext):
        follow = FollowCollection.add_one(ctx.db, ctx.user_session.user_id, community_name)
        if follow is None:
            # Lost a race with a concurrent follow of the same community
            return error_response(409, REPEAT_FOLLOW_ERROR)
        return JSONResponse(status_code=200, content={"message": "Your follow was added successfully."})

    ctx = GuardContext.from_request(request, session, path={"community_name": community_name})
    return FOLLOW_CHAIN.run(ctx, handler)


@router.delete("/follows/{community_name}")
def unfollow_community(community_name: str, request: Request, session: Session = Depends(get_session)):
    """
    Unfollow a community.

    Raises 403 if not signed in, 400 for an unknown community, 404 if it is not followed.
    """

    def handler(ctx: GuardContext):
        if not FollowCollection.delete_one(ctx.db, ctx.user_session.user_id, community_name):
            return error_response(404, f"You do not follow {community_name}.")
        return JSONResponse(status_code=200, content={"message": "Your follow was deleted successfully."})

    ctx = GuardContext.from_request(request, session, path={"community_name": community_name})
    return UNFOLLOW_CHAIN.run(ctx, handler)
