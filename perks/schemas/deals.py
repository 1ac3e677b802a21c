"""
Pydantic schemas for deal catalog request/response models.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from perks.models.deals import (
    DEFAULT_COVER_IMAGE,
    DEFAULT_PARTNER_LOGO,
    Deal,
    DealCategory,
    DiscountType,
)
from perks.schemas.common import CamelModel, Pagination


class DealSort(str, Enum):
    NEWEST = "-createdAt"
    OLDEST = "createdAt"
    MOST_CLAIMED = "-claimCount"
    LEAST_CLAIMED = "claimCount"
    TITLE = "title"
    TITLE_DESC = "-title"
    EXPIRING_FIRST = "validUntil"
    EXPIRING_LAST = "-validUntil"


class DealFilter(CamelModel):
    """Validated listing query handed to ``DealService.list_deals``."""
    category: Optional[DealCategory] = None
    is_locked: Optional[bool] = None
    search: Optional[str] = Field(default=None, max_length=100)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=12, ge=1, le=100)
    sort: DealSort = DealSort.NEWEST


class PartnerRead(CamelModel):
    name: str
    logo: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None


class DiscountRead(CamelModel):
    type: DiscountType
    value: str
    original_price: Optional[str] = None


class DealRead(CamelModel):
    id: str
    title: str
    description: str
    category: DealCategory
    partner: PartnerRead
    discount: DiscountRead
    is_locked: bool
    eligibility_requirements: str
    features: List[str] = []
    terms: Optional[str] = None
    valid_until: Optional[datetime] = None
    claim_count: int
    max_claims: Optional[int] = None
    is_active: bool
    featured: bool
    cover_image: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, deal: Deal) -> "DealRead":
        return cls(
            id=deal.id,
            title=deal.title,
            description=deal.description,
            category=deal.category,
            partner=PartnerRead(
                name=deal.partner_name,
                logo=deal.partner_logo,
                website=deal.partner_website,
                description=deal.partner_description,
            ),
            discount=DiscountRead(
                type=deal.discount_type,
                value=deal.discount_value,
                original_price=deal.discount_original_price,
            ),
            is_locked=deal.is_locked,
            eligibility_requirements=deal.eligibility_requirements,
            features=list(deal.features or []),
            terms=deal.terms,
            valid_until=deal.valid_until,
            claim_count=deal.claim_count,
            max_claims=deal.max_claims,
            is_active=deal.is_active,
            featured=deal.featured,
            cover_image=deal.cover_image,
            created_at=deal.created_at,
            updated_at=deal.updated_at,
        )


class PartnerCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    logo: Optional[str] = Field(default=DEFAULT_PARTNER_LOGO, max_length=500)
    website: Optional[str] = Field(default=None, pattern=r"^https?://.+", max_length=500)
    description: Optional[str] = Field(default=None, max_length=500)


class DiscountCreate(CamelModel):
    type: DiscountType
    value: str = Field(min_length=1, max_length=100)
    original_price: Optional[str] = Field(default=None, max_length=100)


class DealCreate(CamelModel):
    """Schema for creating a deal (seed data and administrative imports)."""
    title: str = Field(min_length=5, max_length=100)
    description: str = Field(min_length=20, max_length=1000)
    category: DealCategory
    partner: PartnerCreate
    discount: DiscountCreate
    is_locked: bool = False
    eligibility_requirements: str = Field(default="Available to all registered users", max_length=500)
    features: List[str] = []
    terms: Optional[str] = Field(default=None, max_length=1000)
    valid_until: Optional[datetime] = None
    max_claims: Optional[int] = Field(default=None, ge=0)
    featured: bool = False
    cover_image: Optional[str] = Field(default=DEFAULT_COVER_IMAGE, max_length=500)

    @field_validator("valid_until")
    @classmethod
    def naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Stored timestamps are naive UTC
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def to_model(self) -> Deal:
        return Deal(
            title=self.title,
            description=self.description,
            category=self.category.value,
            partner_name=self.partner.name,
            partner_logo=self.partner.logo,
            partner_website=self.partner.website,
            partner_description=self.partner.description,
            discount_type=self.discount.type.value,
            discount_value=self.discount.value,
            discount_original_price=self.discount.original_price,
            is_locked=self.is_locked,
            eligibility_requirements=self.eligibility_requirements,
            features=list(self.features),
            terms=self.terms,
            valid_until=self.valid_until,
            max_claims=self.max_claims,
            featured=self.featured,
            cover_image=self.cover_image,
        )


class DealPayload(CamelModel):
    deal: DealRead


class DealsPayload(CamelModel):
    deals: List[DealRead]


class DealListPayload(DealsPayload):
    pagination: Pagination


class CategoryCount(CamelModel):
    category: DealCategory
    count: int
