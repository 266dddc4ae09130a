from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, SQLModel


class Follow(SQLModel, table=True):
    __table_args__ = (
        # A user follows a community at most once; guards the repeat-follow race
        SAUniqueConstraint("user_id", "community_name", name="uq_follow_user_community"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    community_name: str = Field(sa_column=Column(String, nullable=False))
    date_created: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
