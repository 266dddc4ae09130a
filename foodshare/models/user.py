from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Index, func
from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, unique=True)
    password_hash: str
    home_community: Optional[str] = Field(default=None)
    contact_info: Optional[str] = Field(default=None)
    allergies: Optional[str] = Field(default=None)
    other_dietary_restrictions: Optional[str] = Field(default=None)
    date_joined: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# Usernames are unique regardless of case, including under concurrent sign-ups
Index("uq_user_username_lower", func.lower(User.username), unique=True)
