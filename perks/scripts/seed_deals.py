"""
Populate the catalog with the sample deals.

Run with: python -m perks.scripts.seed_deals

Deals whose title already exists are skipped, so the script can be run
repeatedly. Deals are never deleted.
"""
import asyncio
import json
import logging
from pathlib import Path
from typing import List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from perks.core.database import async_engine, async_session_maker
from perks.models.deals import Deal
from perks.schemas.deals import DealCreate

logger = logging.getLogger(__name__)

SAMPLE_DEALS_PATH = Path(__file__).with_name("sample_deals.json")


def load_sample_deals(path: Path = SAMPLE_DEALS_PATH) -> List[DealCreate]:
    with path.open(encoding="utf-8") as fh:
        return [DealCreate.model_validate(item) for item in json.load(fh)]


async def seed_deals(session: AsyncSession, deals: List[DealCreate]) -> int:
    existing = set((await session.exec(select(Deal.title))).all())
    created = 0
    for deal in deals:
        if deal.title in existing:
            logger.info(f"Skipping existing deal: {deal.title}")
            continue
        session.add(deal.to_model())
        created += 1
    await session.commit()
    return created


async def main() -> None:
    deals = load_sample_deals()
    async with async_session_maker() as session:
        created = await seed_deals(session, deals)
    await async_engine.dispose()
    logger.info(f"Seeded {created} of {len(deals)} sample deals")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
