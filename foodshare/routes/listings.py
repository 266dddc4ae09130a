"""
Listing API Routes
Provides CRUD operations for food listings.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlmodel import Session

from foodshare.database import get_session
from foodshare.models.listing import Listing
from foodshare.routes.users import UserResponse
from foodshare.services.listing_collection import ListingCollection
from foodshare.services.user_collection import UserCollection
from foodshare.utils.guard_chain import GuardChain, GuardContext
from foodshare.utils.listing_guards import (
    is_listing_exists,
    is_valid_listing_content,
    is_valid_listing_modifier,
    is_valid_listing_update,
)
from foodshare.utils.user_guards import is_author_exists, is_current_session_user_exists, is_user_logged_in

router = APIRouter()


# ============================================================================
# Response Models
# ============================================================================


class ListingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    user_id: int
    owner: Optional[UserResponse] = None  # null once the poster's account is gone
    date_created: datetime
    name: str
    quantity: float
    expiration: str
    price: str
    email: str


def construct_listing_response(listing: Listing) -> Dict[str, Any]:
    return ListingResponse.model_validate(listing).model_dump(mode="json", by_alias=True)


def construct_listings_response(listings: List[Listing]) -> JSONResponse:
    return JSONResponse(status_code=200, content=[construct_listing_response(listing) for listing in listings])


# ============================================================================
# Guard Chains
# ============================================================================

ALL_LISTINGS_CHAIN = GuardChain(is_current_session_user_exists)

AUTHOR_LISTINGS_CHAIN = GuardChain(is_current_session_user_exists, is_author_exists)

GET_LISTING_CHAIN = GuardChain(is_current_session_user_exists, is_listing_exists)

CREATE_LISTING_CHAIN = GuardChain(is_current_session_user_exists, is_user_logged_in, is_valid_listing_content)

UPDATE_LISTING_CHAIN = GuardChain(
    is_current_session_user_exists,
    is_user_logged_in,
    is_valid_listing_update,
    is_listing_exists,
    is_valid_listing_modifier,
)

DELETE_LISTING_CHAIN = GuardChain(
    is_current_session_user_exists,
    is_user_logged_in,
    is_listing_exists,
    is_valid_listing_modifier,
)


# ============================================================================
# Listing Endpoints
# ============================================================================


@router.get("/listings")
def get_listings(request: Request, session: Session = Depends(get_session)):
    """
    Get all listings, or only those by `?author=<username>`.

    Listings are sorted by expiration, soonest first.
    """
    ctx = GuardContext.from_request(request, session)

    if "author" not in request.query_params:
        return ALL_LISTINGS_CHAIN.run(ctx, lambda c: construct_listings_response(ListingCollection.find_all(c.db)))

    def by_author(c: GuardContext):
        author = UserCollection.find_one_by_username(c.db, c.query["author"])
        return construct_listings_response(ListingCollection.find_all_by_user(c.db, author.id))

    return AUTHOR_LISTINGS_CHAIN.run(ctx, by_author)


@router.get("/listings/{listing_id}")
def get_listing(listing_id: str, request: Request, session: Session = Depends(get_session)):
    def handler(ctx: GuardContext):
        listing = ListingCollection.find_one(ctx.db, listing_id)
        return JSONResponse(status_code=200, content=construct_listing_response(listing))

    ctx = GuardContext.from_request(request, session, path={"listing_id": listing_id})
    return GET_LISTING_CHAIN.run(ctx, handler)


@router.post("/listings")
def create_listing(
    request: Request, payload: Optional[Dict[str, Any]] = Body(None), session: Session = Depends(get_session)
):
    """
    Post a listing as the signed in user.

    Body: name, quantity, expiration, price, email
    """

    def handler(ctx: GuardContext):
        listing = ListingCollection.add_one(
            ctx.db,
            ctx.user_session.user_id,
            ctx.body["name"],
            ctx.body["quantity"],
            ctx.body["expiration"],
            ctx.body["price"],
            ctx.body["email"],
        )
        return JSONResponse(
            status_code=201,
            content={"message": "Your listing was created successfully.", "listing": construct_listing_response(listing)},
        )

    return CREATE_LISTING_CHAIN.run(GuardContext.from_request(request, session, body=payload), handler)


@router.patch("/listings/{listing_id}")
def update_listing(
    listing_id: str,
    request: Request,
    payload: Optional[Dict[str, Any]] = Body(None),
    session: Session = Depends(get_session),
):
    """
    Update a listing's quantity and/or price.

    Keys that are omitted (or null) are left unchanged.
    """

    def handler(ctx: GuardContext):
        details = {key: ctx.body[key] for key in ("quantity", "price") if key in ctx.body}
        listing = ListingCollection.update_one(ctx.db, int(listing_id), details)
        return JSONResponse(
            status_code=200,
            content={"message": "Your listing was updated successfully.", "listing": construct_listing_response(listing)},
        )

    ctx = GuardContext.from_request(request, session, body=payload, path={"listing_id": listing_id})
    return UPDATE_LISTING_CHAIN.run(ctx, handler)


@router.delete("/listings/{listing_id}")
def delete_listing(listing_id: str, request: Request, session: Session = Depends(get_session)):
    def handler(ctx: GuardContext):
        ListingCollection.delete_one(ctx.db, int(listing_id))
        return JSONResponse(status_code=200, content={"message": "Your listing was deleted successfully."})

    ctx = GuardContext.from_request(request, session, path={"listing_id": listing_id})
    return DELETE_LISTING_CHAIN.run(ctx, handler)
