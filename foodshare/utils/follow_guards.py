from foodshare.models.community import is_valid_community_name as _is_known_community
from foodshare.services.follow_collection import FollowCollection
from foodshare.utils.guard_chain import CONTINUE, GuardContext, GuardKind, GuardOutcome, guard, respond

REPEAT_FOLLOW_ERROR = "You already follow this community."


@guard(GuardKind.lookup)
def is_repeat_follow(ctx: GuardContext) -> GuardOutcome:
    """Reject a follow the session user already has (read-then-decide; the unique constraint backs it up)"""
    community_name = ctx.path.get("community_name")
    if FollowCollection.find_one(ctx.db, ctx.user_session.user_id, community_name) is not None:
        return respond(409, REPEAT_FOLLOW_ERROR)
    return CONTINUE


@guard(GuardKind.syntax)
def is_valid_community_name(ctx: GuardContext) -> GuardOutcome:
    community_name = ctx.path.get("community_name")
    if not _is_known_community(community_name):
        return respond(400, f"{community_name} is not a valid community name.")
    return CONTINUE
