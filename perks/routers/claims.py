import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from perks.core.database import AsyncDBSession
from perks.core.responses import ApiResponse
from perks.dependencies import get_current_user
from perks.models.claims import ClaimStatus
from perks.models.users import User
from perks.schemas.claims import ClaimCreate, ClaimListPayload, ClaimPayload, ClaimRead, ClaimStats
from perks.services.claim_service import ClaimService

# Every claim route requires authentication
router = APIRouter(dependencies=[Depends(get_current_user)])


@router.post("", response_model=ApiResponse[ClaimPayload], status_code=status.HTTP_201_CREATED)
async def claim_deal(
    claim_data: ClaimCreate,
    session: AsyncDBSession,
    current_user: User = Depends(get_current_user),
):
    claim = await ClaimService(session).claim_deal(current_user, str(claim_data.deal_id))
    return ApiResponse(message="Deal claimed successfully", data=ClaimPayload(claim=ClaimRead.from_model(claim)))


@router.get("", response_model=ApiResponse[ClaimListPayload])
async def list_claims(
    session: AsyncDBSession,
    current_user: User = Depends(get_current_user),
    claim_status: Optional[ClaimStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    claims, pagination = await ClaimService(session).list_claims(current_user, claim_status, page, limit)
    return ApiResponse(
        message="Claims retrieved successfully",
        data=ClaimListPayload(claims=[ClaimRead.from_model(claim) for claim in claims], pagination=pagination),
    )


@router.get("/stats", response_model=ApiResponse[ClaimStats])
async def claim_stats(session: AsyncDBSession, current_user: User = Depends(get_current_user)):
    stats = await ClaimService(session).get_stats(current_user)
    return ApiResponse(message="Statistics retrieved successfully", data=stats)


@router.get("/{claim_id}", response_model=ApiResponse[ClaimPayload])
async def get_claim(
    claim_id: uuid.UUID,
    session: AsyncDBSession,
    current_user: User = Depends(get_current_user),
):
    claim = await ClaimService(session).get_claim(current_user, str(claim_id))
    return ApiResponse(message="Claim retrieved successfully", data=ClaimPayload(claim=ClaimRead.from_model(claim)))
