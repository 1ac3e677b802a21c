"""
Tests for the deal catalog endpoints.
"""
import uuid
from datetime import timedelta

from perks.managers.redis_manager import redis_manager
from perks.models.base import utcnow


class TestDealListing:

    async def test_pagination_over_active_deals(self, client, create_deal):
        for _ in range(15):
            await create_deal()
        await create_deal(is_active=False)

        first = await client.get("/api/deals")
        second = await client.get("/api/deals", params={"limit": 12, "page": 2})

        assert first.status_code == 200
        assert len(first.json()["data"]["deals"]) == 12

        data = second.json()["data"]
        assert len(data["deals"]) == 3
        assert data["pagination"] == {"page": 2, "limit": 12, "total": 15, "pages": 2}

    async def test_newest_first_by_default(self, client, create_deal):
        older = await create_deal(created_at=utcnow() - timedelta(days=2))
        newer = await create_deal(created_at=utcnow() - timedelta(days=1))

        deals = (await client.get("/api/deals")).json()["data"]["deals"]

        assert [deal["id"] for deal in deals] == [newer.id, older.id]

    async def test_sort_by_claim_count(self, client, create_deal):
        await create_deal(claim_count=1)
        top = await create_deal(claim_count=40)
        await create_deal(claim_count=7)

        deals = (await client.get("/api/deals", params={"sort": "-claimCount"})).json()["data"]["deals"]

        assert deals[0]["id"] == top.id
        assert [deal["claimCount"] for deal in deals] == [40, 7, 1]

    async def test_filter_by_category_and_lock(self, client, create_deal):
        await create_deal(category="marketing", is_locked=True)
        open_marketing = await create_deal(category="marketing")
        await create_deal(category="design")

        response = await client.get("/api/deals", params={"category": "marketing", "isLocked": "false"})

        deals = response.json()["data"]["deals"]
        assert [deal["id"] for deal in deals] == [open_marketing.id]

    async def test_search_is_case_insensitive_over_title_and_description(self, client, create_deal):
        by_title = await create_deal(title="Stripe Atlas Discount")
        by_description = await create_deal(description="Payments infrastructure credits from STRIPE for startups.")
        await create_deal(title="Unrelated Offer")

        response = await client.get("/api/deals", params={"search": "stripe"})

        ids = {deal["id"] for deal in response.json()["data"]["deals"]}
        assert ids == {by_title.id, by_description.id}

    async def test_search_wildcards_match_literally(self, client, create_deal):
        await create_deal(title="Plain Title One")
        await create_deal(title="Plain Title Two")
        percent = await create_deal(title="Save 50% On Hosting")

        percent_search = await client.get("/api/deals", params={"search": "%"})
        underscore_search = await client.get("/api/deals", params={"search": "_"})

        assert [deal["id"] for deal in percent_search.json()["data"]["deals"]] == [percent.id]
        assert underscore_search.json()["data"]["pagination"]["total"] == 0

        response = await client.get("/api/deals", params={"search": "50%"})
        assert [deal["id"] for deal in response.json()["data"]["deals"]] == [percent.id]

    async def test_bearer_token_is_optional_on_public_routes(self, client, create_deal):
        deal = await create_deal()
        headers = {"Authorization": "Bearer not.a.jwt"}

        listing = await client.get("/api/deals", headers=headers)
        detail = await client.get(f"/api/deals/{deal.id}", headers=headers)

        assert listing.status_code == 200
        assert detail.status_code == 200

    async def test_invalid_query_is_a_validation_error(self, client):
        response = await client.get("/api/deals", params={"limit": 101})
        assert response.status_code == 400
        assert response.json()["message"] == "Validation failed"

        response = await client.get("/api/deals", params={"category": "gardening"})
        assert response.status_code == 400


class TestDealDetail:

    async def test_get_deal_nests_partner_and_discount(self, client, create_deal):
        deal = await create_deal(discount_original_price="$100")

        response = await client.get(f"/api/deals/{deal.id}")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Deal retrieved successfully"
        data = body["data"]["deal"]
        assert data["partner"]["name"] == "Acme"
        assert data["partner"]["website"] == "https://acme.example.com"
        assert data["discount"] == {"type": "percentage", "value": "50%", "originalPrice": "$100"}
        assert data["features"] == ["Feature one", "Feature two"]
        assert data["isLocked"] is False

    async def test_unknown_and_inactive_deals_are_not_found(self, client, create_deal):
        inactive = await create_deal(is_active=False)

        for deal_id in (str(uuid.uuid4()), inactive.id):
            response = await client.get(f"/api/deals/{deal_id}")
            assert response.status_code == 404
            assert response.json()["message"] == "Deal not found"

    async def test_malformed_id_is_rejected(self, client):
        response = await client.get("/api/deals/not-a-uuid")
        assert response.status_code == 400


class TestDealViews:

    async def test_featured_only_returns_featured_deals(self, client, create_deal):
        featured = await create_deal(featured=True)
        await create_deal()
        await create_deal(featured=True, is_active=False)

        response = await client.get("/api/deals/featured")

        assert response.status_code == 200
        assert [deal["id"] for deal in response.json()["data"]["deals"]] == [featured.id]

    async def test_popular_orders_by_claim_count_and_honours_limit(self, client, create_deal):
        for count in (3, 9, 0, 5):
            await create_deal(claim_count=count)

        response = await client.get("/api/deals/popular", params={"limit": 2})

        assert [deal["claimCount"] for deal in response.json()["data"]["deals"]] == [9, 5]

    async def test_category_counts(self, client, create_deal):
        await create_deal(category="design")
        await create_deal(category="marketing")
        await create_deal(category="marketing")
        await create_deal(category="legal", is_active=False)

        response = await client.get("/api/deals/categories")

        assert response.status_code == 200
        assert response.json()["data"] == [
            {"category": "marketing", "count": 2},
            {"category": "design", "count": 1},
        ]


class TestErrors:

    async def test_unknown_route(self, client):
        response = await client.get("/api/nope")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Route /api/nope not found"}

    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["message"] == "Server is running"

    async def test_redis_probe_reports_unavailable(self, client, monkeypatch):
        async def redis_down():
            return False

        monkeypatch.setattr(redis_manager, "ping", redis_down)
        response = await client.get("/health/redis")

        assert response.status_code == 503
        assert response.json() == {"success": False, "message": "Redis connection failed"}
