"""
Deal catalog queries: listing with filters and pagination, featured/popular
views and per-category counts. Only active deals are ever returned.
"""
import logging
from typing import List, Tuple

from sqlalchemy import func, or_
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from perks.core.exceptions import NotFoundError
from perks.models.deals import Deal
from perks.schemas.common import Pagination
from perks.schemas.deals import CategoryCount, DealFilter, DealSort

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    DealSort.NEWEST: col(Deal.created_at).desc(),
    DealSort.OLDEST: col(Deal.created_at).asc(),
    DealSort.MOST_CLAIMED: col(Deal.claim_count).desc(),
    DealSort.LEAST_CLAIMED: col(Deal.claim_count).asc(),
    DealSort.TITLE: col(Deal.title).asc(),
    DealSort.TITLE_DESC: col(Deal.title).desc(),
    DealSort.EXPIRING_FIRST: col(Deal.valid_until).asc(),
    DealSort.EXPIRING_LAST: col(Deal.valid_until).desc(),
}


def escape_like(text: str) -> str:
    """Make user text match literally inside a LIKE pattern."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class DealService:
    """Service for read-only deal catalog operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _filter_conditions(filters: DealFilter) -> list:
        conditions = [col(Deal.is_active).is_(True)]
        if filters.category is not None:
            conditions.append(col(Deal.category) == filters.category.value)
        if filters.is_locked is not None:
            conditions.append(col(Deal.is_locked).is_(filters.is_locked))
        if filters.search and filters.search.strip():
            pattern = f"%{escape_like(filters.search.strip())}%"
            conditions.append(
                or_(
                    col(Deal.title).ilike(pattern, escape="\\"),
                    col(Deal.description).ilike(pattern, escape="\\"),
                )
            )
        return conditions

    async def list_deals(self, filters: DealFilter) -> Tuple[List[Deal], Pagination]:
        conditions = self._filter_conditions(filters)

        total = (await self.db.exec(select(func.count()).select_from(Deal).where(*conditions))).one()

        statement = (
            select(Deal)
            .where(*conditions)
            .order_by(SORT_COLUMNS[filters.sort], col(Deal.id))
            .offset((filters.page - 1) * filters.limit)
            .limit(filters.limit)
        )
        deals = list((await self.db.exec(statement)).all())
        return deals, Pagination.build(filters.page, filters.limit, total)

    async def get_deal(self, deal_id: str) -> Deal:
        deal = await self.db.get(Deal, deal_id)
        if not deal or not deal.is_active:
            raise NotFoundError("Deal not found")
        return deal

    async def featured_deals(self, limit: int = 6) -> List[Deal]:
        statement = (
            select(Deal)
            .where(col(Deal.is_active).is_(True), col(Deal.featured).is_(True))
            .order_by(col(Deal.created_at).desc())
            .limit(limit)
        )
        return list((await self.db.exec(statement)).all())

    async def popular_deals(self, limit: int = 6) -> List[Deal]:
        statement = (
            select(Deal)
            .where(col(Deal.is_active).is_(True))
            .order_by(col(Deal.claim_count).desc(), col(Deal.created_at).desc())
            .limit(limit)
        )
        return list((await self.db.exec(statement)).all())

    async def category_counts(self) -> List[CategoryCount]:
        count = func.count(col(Deal.id)).label("count")
        statement = (
            select(Deal.category, count)
            .where(col(Deal.is_active).is_(True))
            .group_by(col(Deal.category))
            .order_by(count.desc(), col(Deal.category))
        )
        rows = (await self.db.exec(statement)).all()
        return [CategoryCount(category=category, count=total) for category, total in rows]
