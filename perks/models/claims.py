"""
SQLModel database model for claims linking a user to a deal.
"""
import secrets
import string
import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field, Relationship

from .base import BaseModel, utcnow
from .deals import Deal

REDEMPTION_CODE_ALPHABET = string.ascii_uppercase + string.digits
REDEMPTION_CODE_LENGTH = 12


class ClaimStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"


def generate_redemption_code(length: int = REDEMPTION_CODE_LENGTH) -> str:
    # Not checked for uniqueness across claims
    return "".join(secrets.choice(REDEMPTION_CODE_ALPHABET) for _ in range(length))


class Claim(BaseModel, table=True):
    """Claim model; one row per (user, deal) pair."""
    __tablename__ = "claims"
    __table_args__ = (
        sa.UniqueConstraint("user_id", "deal_id", name="uq_claims_user_deal"),
        sa.Index("ix_claims_user_status", "user_id", "status"),
        sa.Index("ix_claims_deal_status", "deal_id", "status"),
    )

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", max_length=36)
    deal_id: str = Field(foreign_key="deals.id", max_length=36)
    status: str = Field(default=ClaimStatus.PENDING.value, sa_type=sa.String(length=16))
    redemption_code: Optional[str] = Field(default=None, max_length=32)
    redemption_instructions: Optional[str] = Field(default=None, max_length=1000)
    notes: Optional[str] = Field(default=None, max_length=500)
    claimed_at: datetime = Field(default_factory=utcnow)
    approved_at: Optional[datetime] = Field(default=None)
    expires_at: Optional[datetime] = Field(default=None)
    used_at: Optional[datetime] = Field(default=None)

    deal: Optional[Deal] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})

    def set_status(self, status: ClaimStatus, now: Optional[datetime] = None) -> None:
        self.status = status.value
        if status == ClaimStatus.APPROVED and self.approved_at is None:
            self.approved_at = now or utcnow()

    def is_active(self, now: Optional[datetime] = None) -> bool:
        if self.status != ClaimStatus.APPROVED.value:
            return False
        if self.expires_at and (now or utcnow()) > self.expires_at:
            return False
        return True

    def __repr__(self):
        return f"<Claim(id={self.id}, user_id='{self.user_id}', deal_id='{self.deal_id}', status='{self.status}')>"
