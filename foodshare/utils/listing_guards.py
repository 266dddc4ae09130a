"""
Listing Guards

Existence, ownership and content checks for listing routes. The listing id
comes from the path; content comes from the JSON body.
"""

from typing import Any

from foodshare.services.listing_collection import ListingCollection
from foodshare.utils.guard_chain import CONTINUE, GuardContext, GuardKind, GuardOutcome, guard, respond

REQUIRED_TEXT_FIELDS = ("name", "expiration", "email")


def _is_non_negative_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0


@guard(GuardKind.lookup)
def is_listing_exists(ctx: GuardContext) -> GuardOutcome:
    listing_id = ctx.path.get("listing_id")
    if ListingCollection.find_one(ctx.db, listing_id) is None:
        return respond(404, f"Listing with listing ID {listing_id} does not exist.")
    return CONTINUE


@guard(GuardKind.lookup)
def is_valid_listing_modifier(ctx: GuardContext) -> GuardOutcome:
    """Only the poster may change or remove a listing"""
    listing = ListingCollection.find_one(ctx.db, ctx.path.get("listing_id"))
    if listing is None or listing.user_id != ctx.user_session.user_id:
        return respond(403, "Cannot modify other users' listings.")
    return CONTINUE


@guard(GuardKind.syntax)
def is_valid_listing_content(ctx: GuardContext) -> GuardOutcome:
    for key in REQUIRED_TEXT_FIELDS:
        value = ctx.body.get(key)
        if not isinstance(value, str) or not value.strip():
            return respond(400, f"Listing {key} must be a nonempty string.")

    if not _is_non_negative_number(ctx.body.get("quantity")):
        return respond(400, "Listing quantity must be a non-negative number.")

    if not isinstance(ctx.body.get("price"), str):
        return respond(400, "Listing price must be a string.")
    return CONTINUE


@guard(GuardKind.syntax)
def is_valid_listing_update(ctx: GuardContext) -> GuardOutcome:
    quantity = ctx.body.get("quantity")
    if quantity is not None and not _is_non_negative_number(quantity):
        return respond(400, "Listing quantity must be a non-negative number.")

    price = ctx.body.get("price")
    if price is not None and not isinstance(price, str):
        return respond(400, "Listing price must be a string.")
    return CONTINUE
