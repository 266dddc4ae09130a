from foodshare.models.community import VALID_COMMUNITY_NAMES, Community
from foodshare.models.follow import Follow
from foodshare.models.listing import Listing
from foodshare.models.user import User

__all__ = [
    "Community",
    "VALID_COMMUNITY_NAMES",
    "User",
    "Listing",
    "Follow",
]
