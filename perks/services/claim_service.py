"""
Claim admission and the claim ledger queries.

Admission runs the read-only guards first (deal exists and is active, deal is
claimable, lock vs. verification, no earlier claim by this user) and only then
writes. The claim insert and the claim counter bump share one transaction: the
``uq_claims_user_deal`` constraint rejects a duplicate that slipped past the
guard, and the counter is bumped with a conditional UPDATE that refuses to go
past ``max_claims``. Either failure rolls the whole claim back.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from perks.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    UnclaimableError,
)
from perks.models.base import utcnow
from perks.models.claims import Claim, ClaimStatus, generate_redemption_code
from perks.models.deals import Deal
from perks.models.users import User
from perks.schemas.claims import ClaimStats
from perks.schemas.common import Pagination

logger = logging.getLogger(__name__)

ALREADY_CLAIMED = "You have already claimed this deal"
VERIFICATION_REQUIRED = (
    "This deal requires account verification. Please verify your account to claim this deal."
)
MAX_CLAIMS_REACHED = "Maximum claims reached"


def redemption_instructions(deal: Deal) -> str:
    return f"Visit {deal.partner_website} and use your redemption code at checkout."


class ClaimService:
    """Service for claiming deals and reading a user's claims."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find_claim(self, user_id: str, deal_id: str) -> Optional[Claim]:
        result = await self.db.exec(
            select(Claim).where(Claim.user_id == user_id, Claim.deal_id == deal_id)
        )
        return result.first()

    async def _load_claim(self, claim_id: str) -> Optional[Claim]:
        statement = (
            select(Claim)
            .where(Claim.id == claim_id)
            .options(selectinload(Claim.deal))
            .execution_options(populate_existing=True)
        )
        return (await self.db.exec(statement)).first()

    async def _increment_claim_count(self, deal_id: str) -> bool:
        """Atomically bump the counter unless the cap is already met."""
        statement = (
            update(Deal)
            .where(
                col(Deal.id) == deal_id,
                or_(
                    col(Deal.max_claims).is_(None),
                    col(Deal.max_claims) == 0,
                    col(Deal.claim_count) < col(Deal.max_claims),
                ),
            )
            .values(claim_count=col(Deal.claim_count) + 1, updated_at=utcnow())
        )
        result = await self.db.exec(statement)
        return result.rowcount == 1

    async def claim_deal(self, user: User, deal_id: str) -> Claim:
        """
        Claim a deal for a user.

        Args:
            user: Authenticated user making the claim
            deal_id: Identifier of the deal to claim

        Returns:
            The approved claim with its deal loaded

        Raises:
            NotFoundError: Deal missing or inactive
            UnclaimableError: Deal expired or out of claims
            AuthorizationError: Locked deal and unverified user
            ConflictError: User already holds a claim for this deal
        """
        deal = await self.db.get(Deal, deal_id)
        if not deal or not deal.is_active:
            raise NotFoundError("Deal not found")

        now = utcnow()
        claimable, reason = deal.evaluate_claimability(now)
        if not claimable:
            raise UnclaimableError(reason)

        if deal.is_locked and not user.is_verified:
            raise AuthorizationError(VERIFICATION_REQUIRED)

        if await self._find_claim(user.id, deal.id):
            raise ConflictError(ALREADY_CLAIMED)

        claim = Claim(
            user_id=user.id,
            deal_id=deal.id,
            redemption_instructions=redemption_instructions(deal),
            redemption_code=generate_redemption_code(),
            claimed_at=now,
        )
        claim.set_status(ClaimStatus.APPROVED, now)
        self.db.add(claim)

        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(ALREADY_CLAIMED)

        if not await self._increment_claim_count(deal.id):
            await self.db.rollback()
            raise UnclaimableError(MAX_CLAIMS_REACHED)

        await self.db.commit()
        logger.info(f"User {user.id} claimed deal {deal.id} (claim {claim.id})")

        return await self._load_claim(claim.id)

    async def list_claims(
        self,
        user: User,
        status: Optional[ClaimStatus] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Claim], Pagination]:
        conditions = [Claim.user_id == user.id]
        if status is not None:
            conditions.append(Claim.status == status.value)

        total = (await self.db.exec(select(func.count()).select_from(Claim).where(*conditions))).one()

        statement = (
            select(Claim)
            .where(*conditions)
            .options(selectinload(Claim.deal))
            .order_by(col(Claim.created_at).desc(), col(Claim.id))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        claims = list((await self.db.exec(statement)).all())
        return claims, Pagination.build(page, limit, total)

    async def get_claim(self, user: User, claim_id: str) -> Claim:
        claim = await self._load_claim(claim_id)
        if not claim:
            raise NotFoundError("Claim not found")
        if claim.user_id != user.id:
            raise AuthorizationError("Access denied")
        return claim

    async def get_stats(self, user: User) -> ClaimStats:
        statement = (
            select(Claim.status, func.count(col(Claim.id)))
            .where(Claim.user_id == user.id)
            .group_by(col(Claim.status))
        )
        stats = ClaimStats()
        for status, count in (await self.db.exec(statement)).all():
            if status in ClaimStats.model_fields:
                setattr(stats, status, count)
            stats.total += count
        return stats
