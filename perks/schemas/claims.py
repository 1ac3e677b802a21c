"""
Pydantic schemas for claim request/response models.
"""
import uuid
from datetime import datetime
from typing import List, Optional

from perks.models.claims import Claim, ClaimStatus
from perks.schemas.common import CamelModel, Pagination
from perks.schemas.deals import DealRead


class ClaimCreate(CamelModel):
    """Schema for claiming a deal."""
    deal_id: uuid.UUID


class ClaimRead(CamelModel):
    id: str
    user_id: str
    deal: Optional[DealRead] = None
    status: ClaimStatus
    is_active: bool = False
    redemption_code: Optional[str] = None
    redemption_instructions: Optional[str] = None
    notes: Optional[str] = None
    claimed_at: datetime
    approved_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    used_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, claim: Claim) -> "ClaimRead":
        return cls(
            id=claim.id,
            user_id=claim.user_id,
            deal=DealRead.from_model(claim.deal) if claim.deal else None,
            status=claim.status,
            is_active=claim.is_active(),
            redemption_code=claim.redemption_code,
            redemption_instructions=claim.redemption_instructions,
            notes=claim.notes,
            claimed_at=claim.claimed_at,
            approved_at=claim.approved_at,
            expires_at=claim.expires_at,
            used_at=claim.used_at,
            created_at=claim.created_at,
            updated_at=claim.updated_at,
        )


class ClaimPayload(CamelModel):
    claim: ClaimRead


class ClaimListPayload(CamelModel):
    claims: List[ClaimRead]
    pagination: Pagination


class ClaimStats(CamelModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    expired: int = 0
