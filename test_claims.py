"""
Tests for claim admission and the claim ledger endpoints.
"""
import re
import uuid
from datetime import timedelta

import pytest

from perks.core.exceptions import ConflictError, UnclaimableError
from perks.models import Claim, ClaimStatus, Deal, User
from perks.models.base import utcnow
from perks.services.claim_service import ClaimService

REDEMPTION_CODE = re.compile(r"^[A-Z0-9]{12}$")


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def claim(client, token: str, deal_id: str):
    return await client.post("/api/claims", json={"dealId": deal_id}, headers=bearer(token))


class TestClaimDeal:

    async def test_claim_is_approved_with_code(self, client, register, create_deal):
        user = await register()
        deal = await create_deal()

        response = await claim(client, user["accessToken"], deal.id)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Deal claimed successfully"
        data = body["data"]["claim"]
        assert data["status"] == "approved"
        assert data["isActive"] is True
        assert data["approvedAt"] is not None
        assert data["userId"] == user["user"]["id"]
        assert data["deal"]["id"] == deal.id
        assert REDEMPTION_CODE.match(data["redemptionCode"])
        assert data["redemptionInstructions"] == (
            "Visit https://acme.example.com and use your redemption code at checkout."
        )

        detail = await client.get(f"/api/deals/{deal.id}")
        assert detail.json()["data"]["deal"]["claimCount"] == 1

    async def test_second_claim_conflicts(self, client, register, create_deal):
        user = await register()
        deal = await create_deal()

        first = await claim(client, user["accessToken"], deal.id)
        second = await claim(client, user["accessToken"], deal.id)

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["message"] == "You have already claimed this deal"

        detail = await client.get(f"/api/deals/{deal.id}")
        assert detail.json()["data"]["deal"]["claimCount"] == 1

    async def test_locked_deal_requires_verification(self, client, register, create_deal, verify_user):
        user = await register()
        deal = await create_deal(is_locked=True)

        denied = await claim(client, user["accessToken"], deal.id)
        assert denied.status_code == 403
        assert "verif" in denied.json()["message"]

        await verify_user(user["user"]["id"])
        granted = await claim(client, user["accessToken"], deal.id)
        assert granted.status_code == 201

    async def test_capped_deal_at_its_cap(self, client, register, create_deal):
        deal = await create_deal(max_claims=1)
        first_user = await register()
        second_user = await register()

        assert (await claim(client, first_user["accessToken"], deal.id)).status_code == 201
        response = await claim(client, second_user["accessToken"], deal.id)

        assert response.status_code == 400
        assert response.json()["message"] == "Maximum claims reached"

    async def test_zero_cap_means_uncapped(self, client, register, create_deal):
        deal = await create_deal(max_claims=0, claim_count=500)
        user = await register()

        response = await claim(client, user["accessToken"], deal.id)

        assert response.status_code == 201

    async def test_expired_deal_is_rejected_before_the_cap(self, client, register, create_deal):
        deal = await create_deal(valid_until=utcnow() - timedelta(days=1), max_claims=1, claim_count=1)
        user = await register()

        response = await claim(client, user["accessToken"], deal.id)

        assert response.status_code == 400
        assert response.json()["message"] == "Deal has expired"

    async def test_missing_or_inactive_deal(self, client, register, create_deal):
        user = await register()
        inactive = await create_deal(is_active=False)

        for deal_id in (str(uuid.uuid4()), inactive.id):
            response = await claim(client, user["accessToken"], deal_id)
            assert response.status_code == 404
            assert response.json()["message"] == "Deal not found"

    async def test_deal_id_must_be_a_uuid(self, client, register):
        user = await register()
        response = await claim(client, user["accessToken"], "12345")
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "dealId"

    async def test_claiming_requires_authentication(self, client, create_deal):
        deal = await create_deal()
        response = await client.post("/api/claims", json={"dealId": deal.id})
        assert response.status_code == 401


class TestClaimAdmissionService:
    """Exercise the transactional guards directly against the session."""

    @pytest.fixture
    async def user(self, db_session):
        user = User(name="Service User", email="service@example.com", password_hash="x")
        db_session.add(user)
        await db_session.commit()
        return user

    async def test_counter_update_refuses_to_pass_the_cap(self, db_session, user, create_deal):
        deal = await create_deal(max_claims=2, claim_count=1)
        service = ClaimService(db_session)

        assert await service._increment_claim_count(deal.id) is True
        assert await service._increment_claim_count(deal.id) is False
        await db_session.commit()

        refreshed = await db_session.get(Deal, deal.id, populate_existing=True)
        assert refreshed.claim_count == 2

    async def test_unique_constraint_backs_up_the_duplicate_guard(self, db_session, user, create_deal):
        deal = await create_deal()
        service = ClaimService(db_session)
        await service.claim_deal(user, deal.id)

        async def no_existing_claim(user_id, deal_id):
            return None

        # Simulate a concurrent request that passed the read-only guard
        service._find_claim = no_existing_claim
        with pytest.raises(ConflictError):
            await service.claim_deal(user, deal.id)

        refreshed = await db_session.get(Deal, deal.id, populate_existing=True)
        assert refreshed.claim_count == 1

    async def test_full_deal_leaves_no_claim_behind(self, db_session, user, create_deal, session_maker):
        user_id = user.id
        deal = await create_deal(max_claims=1)
        service = ClaimService(db_session)

        # The counter fills up between the claimability check and the update
        async def cap_reached(deal_id):
            return False

        service._increment_claim_count = cap_reached
        with pytest.raises(UnclaimableError):
            await service.claim_deal(user, deal.id)

        async with session_maker() as session:
            assert await ClaimService(session)._find_claim(user_id, deal.id) is None


class TestClaimQueries:

    async def test_list_claims_newest_first_with_status_filter(
        self, client, register, create_deal, session_maker
    ):
        user = await register()
        first = await create_deal()
        second = await create_deal()
        await claim(client, user["accessToken"], first.id)
        await claim(client, user["accessToken"], second.id)

        response = await client.get("/api/claims", headers=bearer(user["accessToken"]))

        assert response.status_code == 200
        data = response.json()["data"]
        assert [item["deal"]["id"] for item in data["claims"]] == [second.id, first.id]
        assert data["pagination"] == {"page": 1, "limit": 10, "total": 2, "pages": 1}

        pending = await client.get(
            "/api/claims", params={"status": "pending"}, headers=bearer(user["accessToken"])
        )
        assert pending.json()["data"]["claims"] == []

    async def test_stats(self, client, register, create_deal, session_maker):
        user = await register()
        for _ in range(3):
            deal = await create_deal()
            await claim(client, user["accessToken"], deal.id)

        async with session_maker() as session:
            rejected = await ClaimService(session)._find_claim(user["user"]["id"], deal.id)
            rejected.set_status(ClaimStatus.REJECTED)
            session.add(rejected)
            await session.commit()

        response = await client.get("/api/claims/stats", headers=bearer(user["accessToken"]))

        assert response.status_code == 200
        assert response.json()["data"] == {
            "total": 3,
            "pending": 0,
            "approved": 2,
            "rejected": 1,
            "expired": 0,
        }

    async def test_get_claim_enforces_ownership(self, client, register, create_deal):
        owner = await register()
        stranger = await register()
        deal = await create_deal()
        claim_id = (await claim(client, owner["accessToken"], deal.id)).json()["data"]["claim"]["id"]

        mine = await client.get(f"/api/claims/{claim_id}", headers=bearer(owner["accessToken"]))
        theirs = await client.get(f"/api/claims/{claim_id}", headers=bearer(stranger["accessToken"]))
        missing = await client.get(f"/api/claims/{uuid.uuid4()}", headers=bearer(owner["accessToken"]))

        assert mine.status_code == 200
        assert mine.json()["data"]["claim"]["id"] == claim_id
        assert theirs.status_code == 403
        assert theirs.json()["message"] == "Access denied"
        assert missing.status_code == 404
        assert missing.json()["message"] == "Claim not found"

    async def test_rejected_claim_is_not_active(self, client, register, create_deal, session_maker):
        user = await register()
        deal = await create_deal()
        claim_id = (await claim(client, user["accessToken"], deal.id)).json()["data"]["claim"]["id"]

        async with session_maker() as session:
            stored = await session.get(Claim, claim_id)
            stored.set_status(ClaimStatus.REJECTED)
            session.add(stored)
            await session.commit()

        response = await client.get(f"/api/claims/{claim_id}", headers=bearer(user["accessToken"]))

        assert response.json()["data"]["claim"]["status"] == "rejected"
        assert response.json()["data"]["claim"]["isActive"] is False


class TestClaimModel:

    def test_is_active_respects_status_and_expiry(self):
        now = utcnow()
        claim = Claim(user_id="u", deal_id="d")
        assert claim.is_active(now) is False

        claim.set_status(ClaimStatus.APPROVED, now)
        assert claim.approved_at == now
        assert claim.is_active(now) is True

        claim.expires_at = now - timedelta(seconds=1)
        assert claim.is_active(now) is False

    def test_deal_claimability_reasons_in_order(self):
        now = utcnow()
        deal = Deal(
            title="Ordering",
            description="d",
            category="other",
            partner_name="p",
            discount_type="fixed",
            discount_value="$5",
            is_active=False,
            valid_until=now - timedelta(days=1),
            max_claims=1,
            claim_count=1,
        )
        assert deal.evaluate_claimability(now) == (False, "Deal is no longer active")
        deal.is_active = True
        assert deal.evaluate_claimability(now) == (False, "Deal has expired")
        deal.valid_until = None
        assert deal.evaluate_claimability(now) == (False, "Maximum claims reached")
        deal.max_claims = None
        assert deal.evaluate_claimability(now) == (True, None)
