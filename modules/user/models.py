"""
User Module - User Directory Model
====================================
Registered users with a membership tier and loyalty points.
"""

import enum

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from config.database import Base


class MembershipTier(str, enum.Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"

    @classmethod
    def parse(cls, value) -> "MembershipTier":
        """Resolve a stored tier name; unknown or missing falls back to bronze."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.BRONZE


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(150), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    membership = Column(String, default=MembershipTier.BRONZE.value, nullable=False)
    points = Column(Integer, default=0, server_default="0", nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @property
    def tier(self) -> MembershipTier:
        return MembershipTier.parse(self.membership)

    @property
    def display_name(self) -> str:
        """Header label, e.g. 'alice (silver)'."""
        return f"{self.username} ({self.tier.value})"

    def __repr__(self):
        return f"<User {self.username} [{self.membership}]>"
