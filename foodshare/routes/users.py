"""
User & Session API Routes
Account creation, profile edits, account deletion, login and logout.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlmodel import Session

from foodshare.database import get_session
from foodshare.models.user import User
from foodshare.services.follow_collection import FollowCollection
from foodshare.services.listing_collection import ListingCollection
from foodshare.services.user_collection import UserCollection
from foodshare.utils.guard_chain import GuardChain, GuardContext, error_response, when_present
from foodshare.utils.user_guards import (
    is_account_exists,
    is_current_session_user_exists,
    is_user_logged_in,
    is_user_logged_out,
    is_username_not_already_in_use,
    is_valid_allergies,
    is_valid_contact_info,
    is_valid_dietary_restrictions,
    is_valid_home_community,
    is_valid_password,
    is_valid_username,
)

router = APIRouter()

# Wire (camelCase) profile keys -> User columns
PROFILE_KEYS = {
    "homeCommunity": "home_community",
    "contactInfo": "contact_info",
    "allergies": "allergies",
    "otherDietaryRestrictions": "other_dietary_restrictions",
}


# ============================================================================
# Response Models
# ============================================================================


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    username: str
    home_community: Optional[str] = None
    contact_info: Optional[str] = None
    allergies: Optional[str] = None
    other_dietary_restrictions: Optional[str] = None
    date_joined: datetime


def construct_user_response(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return UserResponse.model_validate(user).model_dump(mode="json", by_alias=True)


def _profile_details(body: Dict[str, Any]) -> Dict[str, Any]:
    return {column: body[key] for key, column in PROFILE_KEYS.items() if key in body}


# ============================================================================
# Guard Chains
# ============================================================================

PROFILE_GUARDS = (
    is_valid_home_community,
    is_valid_contact_info,
    is_valid_allergies,
    is_valid_dietary_restrictions,
)

SESSION_INFO_CHAIN = GuardChain(is_current_session_user_exists)

LOGIN_CHAIN = GuardChain(
    is_current_session_user_exists,
    is_user_logged_out,
    is_valid_username,
    is_valid_password,
    is_account_exists,
)

LOGOUT_CHAIN = GuardChain(is_current_session_user_exists, is_user_logged_in)

CREATE_USER_CHAIN = GuardChain(
    is_current_session_user_exists,
    is_user_logged_out,
    is_valid_username,
    is_valid_password,
    *PROFILE_GUARDS,
    is_username_not_already_in_use,
)

UPDATE_USER_CHAIN = GuardChain(
    is_current_session_user_exists,
    is_user_logged_in,
    when_present("username", is_valid_username),
    when_present("password", is_valid_password),
    *PROFILE_GUARDS,
    is_username_not_already_in_use,
)

DELETE_USER_CHAIN = GuardChain(is_current_session_user_exists, is_user_logged_in)


# ============================================================================
# Session Endpoints
# ============================================================================


@router.get("/users/session")
def get_session_user(request: Request, session: Session = Depends(get_session)):
    """
    Get the signed in user, if any.

    Returns {message, user} where user is null when nobody is signed in.
    """

    def handler(ctx: GuardContext):
        user = None
        if ctx.user_session.is_authenticated:
            user = UserCollection.find_one_by_user_id(ctx.db, ctx.user_session.user_id)
        return JSONResponse(
            status_code=200,
            content={
                "message": "Your session info was found successfully.",
                "user": construct_user_response(user),
            },
        )

    return SESSION_INFO_CHAIN.run(GuardContext.from_request(request, session), handler)


@router.post("/users/session")
def sign_in(request: Request, payload: Optional[Dict[str, Any]] = Body(None), session: Session = Depends(get_session)):
    """
    Sign in.

    Raises 403 if already signed in, 400 on malformed or missing credentials,
    401 if the credentials do not match an account.
    """

    def handler(ctx: GuardContext):
        user = UserCollection.find_one_by_username(ctx.db, ctx.body["username"])
        ctx.user_session.log_in(user.id)
        return JSONResponse(
            status_code=201,
            content={"message": "You have logged in successfully.", "user": construct_user_response(user)},
        )

    return LOGIN_CHAIN.run(GuardContext.from_request(request, session, body=payload), handler)


@router.delete("/users/session")
def sign_out(request: Request, session: Session = Depends(get_session)):
    """Sign out. Raises 403 if nobody is signed in."""

    def handler(ctx: GuardContext):
        ctx.user_session.log_out()
        return JSONResponse(status_code=200, content={"message": "You have been logged out successfully."})

    return LOGOUT_CHAIN.run(GuardContext.from_request(request, session), handler)


# ============================================================================
# Account Endpoints
# ============================================================================


@router.post("/users")
def create_user(
    request: Request, payload: Optional[Dict[str, Any]] = Body(None), session: Session = Depends(get_session)
):
    """
    Create an account and sign in as it.

    Constraints:
    - username matches ^\\w+$ and is not taken (case-insensitive)
    - password is nonempty with no whitespace
    - profile fields, when given, must be well formed
    """

    def handler(ctx: GuardContext):
        user = UserCollection.add_one(
            ctx.db, ctx.body["username"], ctx.body["password"], **_profile_details(ctx.body)
        )
        if user is None:
            return error_response(409, "An account with this username already exists.")
        ctx.user_session.log_in(user.id)
        return JSONResponse(
            status_code=201,
            content={
                "message": f"Your account was created successfully. You have been logged in as {user.username}",
                "user": construct_user_response(user),
            },
        )

    return CREATE_USER_CHAIN.run(GuardContext.from_request(request, session, body=payload), handler)


@router.patch("/users")
def update_user(
    request: Request, payload: Optional[Dict[str, Any]] = Body(None), session: Session = Depends(get_session)
):
    """Update the signed in user's username, password and/or profile. Omitted keys are left alone."""

    def handler(ctx: GuardContext):
        details = _profile_details(ctx.body)
        for key in ("username", "password"):
            if key in ctx.body:
                details[key] = ctx.body[key]

        user = UserCollection.update_one(ctx.db, ctx.user_session.user_id, details)
        if user is None:
            return error_response(409, "An account with this username already exists.")
        return JSONResponse(
            status_code=200,
            content={"message": "Your profile was updated successfully.", "user": construct_user_response(user)},
        )

    return UPDATE_USER_CHAIN.run(GuardContext.from_request(request, session, body=payload), handler)


@router.delete("/users")
def delete_user(request: Request, session: Session = Depends(get_session)):
    """Delete the signed in account along with its listings and follows, then sign out."""

    def handler(ctx: GuardContext):
        user_id = ctx.user_session.user_id
        ListingCollection.delete_many(ctx.db, user_id)
        FollowCollection.delete_many(ctx.db, user_id)
        UserCollection.delete_one(ctx.db, user_id)
        ctx.user_session.log_out()
        return JSONResponse(status_code=200, content={"message": "Your account has been deleted successfully."})

    return DELETE_USER_CHAIN.run(GuardContext.from_request(request, session), handler)
