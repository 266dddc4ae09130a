"""
Collections Layer

Data-access services for users, listings and follows that:
- Accept domain inputs (IDs, a db session, field values)
- Return models, or None/False when a record is missing
- Do NOT depend on HTTP request/response objects
"""

# Force SQLModel table registration at test discovery time
from foodshare.models.follow import Follow  # noqa: F401
from foodshare.models.listing import Listing  # noqa: F401
from foodshare.models.user import User  # noqa: F401
