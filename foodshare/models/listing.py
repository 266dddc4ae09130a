from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from foodshare.models.user import User


class Listing(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    # Non-owning reference: listings are not cascaded when the user row goes away
    user_id: int = Field(foreign_key="user.id", index=True)
    date_created: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    name: str
    quantity: float = Field(default=0)
    expiration: str = Field(index=True)  # date-like string, e.g. "2024-01-01"
    price: str  # string-encoded monetary value, e.g. "1.00"
    email: str

    owner: Optional["User"] = Relationship(sa_relationship_kwargs={"lazy": "joined"})
