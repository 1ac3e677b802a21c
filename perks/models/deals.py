"""
SQLModel database model for SaaS deals.
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

import sqlalchemy as sa
from sqlmodel import Field

from .base import BaseModel, utcnow

DEFAULT_PARTNER_LOGO = "https://images.unsplash.com/photo-1599305445671-ac291c95aaa9?w=400"
DEFAULT_COVER_IMAGE = "https://images.unsplash.com/photo-1557821552-17105176677c?w=800"


class DealCategory(str, Enum):
    CLOUD_SERVICES = "cloud_services"
    MARKETING = "marketing"
    ANALYTICS = "analytics"
    PRODUCTIVITY = "productivity"
    DEVELOPMENT = "development"
    DESIGN = "design"
    COMMUNICATION = "communication"
    FINANCE = "finance"
    LEGAL = "legal"
    OTHER = "other"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    CREDITS = "credits"
    FREE_TRIAL = "free_trial"


class Deal(BaseModel, table=True):
    """Deal model for storing partner offers."""
    __tablename__ = "deals"
    __table_args__ = (
        sa.CheckConstraint("claim_count >= 0", name="ck_deals_claim_count_ge_0"),
    )

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=36)
    title: str = Field(max_length=100)
    description: str = Field(max_length=1000)
    category: str = Field(index=True, sa_type=sa.String(length=32))

    partner_name: str = Field(max_length=255)
    partner_logo: Optional[str] = Field(default=DEFAULT_PARTNER_LOGO, max_length=500)
    partner_website: Optional[str] = Field(default=None, max_length=500)
    partner_description: Optional[str] = Field(default=None, max_length=500)

    discount_type: str = Field(sa_type=sa.String(length=32))
    discount_value: str = Field(max_length=100)  # e.g. "50%", "$500", "6 months"
    discount_original_price: Optional[str] = Field(default=None, max_length=100)

    is_locked: bool = Field(default=False, index=True)
    eligibility_requirements: str = Field(default="Available to all registered users", max_length=500)
    features: List[str] = Field(default_factory=list, sa_type=sa.JSON)
    terms: Optional[str] = Field(default=None, max_length=1000)
    valid_until: Optional[datetime] = Field(default=None)
    claim_count: int = Field(default=0, index=True)
    max_claims: Optional[int] = Field(default=None)  # None or 0 means uncapped
    is_active: bool = Field(default=True, index=True)
    featured: bool = Field(default=False)
    cover_image: Optional[str] = Field(default=DEFAULT_COVER_IMAGE, max_length=500)

    def evaluate_claimability(self, now: Optional[datetime] = None) -> Tuple[bool, Optional[str]]:
        """Return ``(claimable, reason)``; reason is None when the deal can be claimed."""
        now = now or utcnow()
        if not self.is_active:
            return False, "Deal is no longer active"
        if self.valid_until and now > self.valid_until:
            return False, "Deal has expired"
        if self.max_claims and self.claim_count >= self.max_claims:
            return False, "Maximum claims reached"
        return True, None

    def __repr__(self):
        return f"<Deal(id={self.id}, title='{self.title}', category='{self.category}')>"
