import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from perks.core.database import AsyncDBSession
from perks.core.responses import ApiResponse
from perks.models.deals import DealCategory
from perks.schemas.deals import (
    CategoryCount,
    DealFilter,
    DealListPayload,
    DealPayload,
    DealRead,
    DealSort,
    DealsPayload,
)
from perks.services.deal_service import DealService

router = APIRouter()


def deal_filter(
    category: Optional[DealCategory] = Query(None),
    is_locked: Optional[bool] = Query(None, alias="isLocked"),
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    sort: DealSort = Query(DealSort.NEWEST),
) -> DealFilter:
    return DealFilter(category=category, is_locked=is_locked, search=search, page=page, limit=limit, sort=sort)


@router.get("", response_model=ApiResponse[DealListPayload])
async def list_deals(
    session: AsyncDBSession,
    filters: DealFilter = Depends(deal_filter),
):
    deals, pagination = await DealService(session).list_deals(filters)
    return ApiResponse(
        message="Deals retrieved successfully",
        data=DealListPayload(deals=[DealRead.from_model(deal) for deal in deals], pagination=pagination),
    )


@router.get("/featured", response_model=ApiResponse[DealsPayload])
async def featured_deals(session: AsyncDBSession, limit: int = Query(6, ge=1, le=50)):
    deals = await DealService(session).featured_deals(limit)
    return ApiResponse(
        message="Featured deals retrieved successfully",
        data=DealsPayload(deals=[DealRead.from_model(deal) for deal in deals]),
    )


@router.get("/popular", response_model=ApiResponse[DealsPayload])
async def popular_deals(session: AsyncDBSession, limit: int = Query(6, ge=1, le=50)):
    deals = await DealService(session).popular_deals(limit)
    return ApiResponse(
        message="Popular deals retrieved successfully",
        data=DealsPayload(deals=[DealRead.from_model(deal) for deal in deals]),
    )


@router.get("/categories", response_model=ApiResponse[List[CategoryCount]])
async def deal_categories(session: AsyncDBSession):
    categories = await DealService(session).category_counts()
    return ApiResponse(message="Categories retrieved successfully", data=categories)


@router.get("/{deal_id}", response_model=ApiResponse[DealPayload])
async def get_deal(
    deal_id: uuid.UUID,
    session: AsyncDBSession,
):
    deal = await DealService(session).get_deal(str(deal_id))
    return ApiResponse(message="Deal retrieved successfully", data=DealPayload(deal=DealRead.from_model(deal)))
