"""
User Guards

Session, credential and profile checks shared by every route. Body keys use
the wire (camelCase) names. A JSON null stands in for an undefined value.
"""

import re

from foodshare.models.community import is_valid_community_name
from foodshare.services.user_collection import UserCollection
from foodshare.utils.guard_chain import CONTINUE, GuardContext, GuardKind, GuardOutcome, guard, respond

USERNAME_REGEX = re.compile(r"^\w+$", re.ASCII)
PASSWORD_REGEX = re.compile(r"^\S+$")


@guard(GuardKind.session)
def is_current_session_user_exists(ctx: GuardContext) -> GuardOutcome:
    """
    The session user (if any) must still exist. An account deleted from another
    browser leaves a dangling id behind; clear it before anything reads it.
    """
    if ctx.user_session.is_authenticated:
        user = UserCollection.find_one_by_user_id(ctx.db, ctx.user_session.user_id)
        if user is None:
            ctx.user_session.invalidate()
            return respond(500, "User session was not recognized.")
    return CONTINUE


@guard(GuardKind.syntax)
def is_valid_username(ctx: GuardContext) -> GuardOutcome:
    username = ctx.body.get("username")
    if not isinstance(username, str) or not USERNAME_REGEX.fullmatch(username):
        return respond(400, "Username must be a nonempty alphanumeric string.")
    return CONTINUE


@guard(GuardKind.syntax)
def is_valid_password(ctx: GuardContext) -> GuardOutcome:
    password = ctx.body.get("password")
    if not isinstance(password, str) or not PASSWORD_REGEX.fullmatch(password):
        return respond(400, "Password must be a nonempty string.")
    return CONTINUE


@guard(GuardKind.syntax)
def is_valid_home_community(ctx: GuardContext) -> GuardOutcome:
    if "homeCommunity" in ctx.body and not is_valid_community_name(ctx.body["homeCommunity"]):
        return respond(400, "Home Community must be a valid living community at or near MIT.")
    return CONTINUE


@guard(GuardKind.syntax)
def is_valid_contact_info(ctx: GuardContext) -> GuardOutcome:
    if "contactInfo" in ctx.body:
        contact_info = ctx.body["contactInfo"]
        if not isinstance(contact_info, str) or len(contact_info) < 1:
            return respond(400, "You must provide contact info.")
    return CONTINUE


@guard(GuardKind.syntax)
def is_valid_allergies(ctx: GuardContext) -> GuardOutcome:
    # Empty string means "no allergies" and is allowed
    if "allergies" in ctx.body and ctx.body["allergies"] is None:
        return respond(
            400,
            "Allergies must not be undefined. Allergies should be an empty string if the user does not have allergies.",
        )
    return CONTINUE


@guard(GuardKind.syntax)
def is_valid_dietary_restrictions(ctx: GuardContext) -> GuardOutcome:
    if "otherDietaryRestrictions" in ctx.body and ctx.body["otherDietaryRestrictions"] is None:
        return respond(
            400,
            "Dietary restrictions must not be undefined. Dietary restrictions should be an empty string "
            "if the user does not have dietary restrictions.",
        )
    return CONTINUE


@guard(GuardKind.lookup)
def is_account_exists(ctx: GuardContext) -> GuardOutcome:
    username = ctx.body.get("username")
    password = ctx.body.get("password")

    if not username or not password:
        missing = "password" if username else "username"
        return respond(400, f"Missing {missing} credentials for sign in.")

    user = UserCollection.find_one_by_username_and_password(ctx.db, username, password)
    if user is None:
        return respond(401, "Invalid user login credentials provided.")
    return CONTINUE


@guard(GuardKind.lookup)
def is_username_not_already_in_use(ctx: GuardContext) -> GuardOutcome:
    username = ctx.body.get("username")
    if username is None:
        # Username is not being set
        return CONTINUE

    user = UserCollection.find_one_by_username(ctx.db, username)
    # The session user may re-case their own username
    if user is not None and user.id != ctx.user_session.user_id:
        return respond(409, "An account with this username already exists.")
    return CONTINUE


@guard(GuardKind.auth)
def is_user_logged_in(ctx: GuardContext) -> GuardOutcome:
    if not ctx.user_session.is_authenticated:
        return respond(403, "You must be logged in to complete this action.")
    return CONTINUE


@guard(GuardKind.auth)
def is_user_logged_out(ctx: GuardContext) -> GuardOutcome:
    if ctx.user_session.is_authenticated:
        return respond(403, "You are already signed in.")
    return CONTINUE


@guard(GuardKind.lookup)
def is_author_exists(ctx: GuardContext) -> GuardOutcome:
    author = ctx.query.get("author")
    if not author:
        return respond(400, "Provided author username must be nonempty.")

    if UserCollection.find_one_by_username(ctx.db, author) is None:
        return respond(404, f"A user with username {author} does not exist.")
    return CONTINUE
