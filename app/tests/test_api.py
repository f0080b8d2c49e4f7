import json
import pytest
from decimal import Decimal

from app.core.exceptions import PricingInvariantError


@pytest.mark.integration
class TestQuoteEndpoints:
    @pytest.mark.asyncio
    async def test_calculate_quote_stores_snapshot(self, test_client, fake_redis, valid_quote_data):
        response = await test_client.post("/quotes/calculate", json=valid_quote_data)

        assert response.status_code == 200
        data = response.json()
        assert data["quote_id"]
        assert data["distance"]["source"] == "exact_table"
        assert data["distance"]["distance_miles"] == 126.0
        assert f"quote:{data['quote_id']}" in fake_redis.data
        assert fake_redis.expiry[f"quote:{data['quote_id']}"] == 86400

        breakdown = data["breakdown"]
        assert Decimal(breakdown["driver_share"]) + Decimal(breakdown["platform_fee"]) + Decimal(
            breakdown["vat_amount"]
        ) == Decimal(breakdown["total_with_vat"])
        # Downing Street is inside the congestion zone
        assert Decimal(breakdown["regional_surcharge"]) == Decimal("15.00")

    @pytest.mark.asyncio
    async def test_get_quote_returns_same_price(self, test_client, fake_redis, valid_quote_data):
        created = (await test_client.post("/quotes/calculate", json=valid_quote_data)).json()

        response = await test_client.get(f"/quotes/{created['quote_id']}")

        assert response.status_code == 200
        fetched = response.json()
        assert fetched["breakdown"]["total_with_vat"] == created["breakdown"]["total_with_vat"]
        assert fetched["breakdown"]["items"] == created["breakdown"]["items"]
        assert fetched["explanation"] == created["explanation"]

    @pytest.mark.asyncio
    async def test_get_unknown_quote(self, test_client, fake_redis):
        response = await test_client.get("/quotes/doesnotexist")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_quote_without_redis(self, test_client, no_redis, valid_quote_data):
        response = await test_client.post("/quotes/calculate", json=valid_quote_data)

        assert response.status_code == 200
        assert response.json()["quote_id"] is None

        response = await test_client.get("/quotes/anything")
        assert response.status_code == 503

    @pytest.mark.asyncio
    async def test_simple_quote(self, test_client, fake_redis):
        response = await test_client.post("/quotes/simple", json={
            "pickup_address": "Manchester M1 1AE",
            "delivery_address": "Leeds LS1 4AP",
            "van_size": "not-a-van",
            "move_date": "2024-06-12T10:00:00",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["distance"]["distance_miles"] == 43.0
        assert Decimal(data["breakdown"]["helpers_fee"]) == Decimal("0.00")
        assert data["breakdown"]["van_size_multiplier"] == 1.1

    @pytest.mark.asyncio
    async def test_malformed_input_is_coerced(self, test_client, fake_redis, valid_quote_data):
        valid_quote_data.update({"helpers": 9, "urgency": "asap", "pickup_floor": "attic"})

        response = await test_client.post("/quotes/calculate", json=valid_quote_data)

        assert response.status_code == 200
        breakdown = response.json()["breakdown"]
        assert Decimal(breakdown["urgency_surcharge"]) == Decimal("0.00")
        assert Decimal(breakdown["floor_access_fee"]) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_non_finite_hours_are_recovered(self, test_client, fake_redis, valid_quote_data):
        body = json.dumps(valid_quote_data)[:-1] + ', "estimated_hours": NaN}'

        response = await test_client.post(
            "/quotes/calculate", content=body, headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 200
        # 126 miles -> 5.5 hours for the one helper
        assert Decimal(response.json()["breakdown"]["helpers_fee"]) == Decimal("137.50")

    @pytest.mark.asyncio
    async def test_wrong_json_type_rejected(self, test_client, fake_redis, valid_quote_data):
        valid_quote_data["van_size"] = ["medium"]

        response = await test_client.post("/quotes/calculate", json=valid_quote_data)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_pricing_invariant_maps_to_500(self, test_client, fake_redis, valid_quote_data, monkeypatch):
        def broken(*args, **kwargs):
            raise PricingInvariantError("Computed price is negative")

        monkeypatch.setattr("app.services.quotes.build_breakdown", broken)

        response = await test_client.post("/quotes/calculate", json=valid_quote_data)

        assert response.status_code == 500
        assert response.json()["detail"] == "Unable to price this move"


@pytest.mark.integration
class TestDistanceEndpoint:
    @pytest.mark.asyncio
    async def test_distance(self, test_client):
        response = await test_client.post("/distance", json={
            "from_address": "London",
            "to_address": "Brighton",
        })

        assert response.status_code == 200
        data = response.json()
        assert data == {
            "distance_miles": 54.0,
            "estimated_minutes": data["estimated_minutes"],
            "exact": True,
            "source": "exact_table",
        }

    @pytest.mark.asyncio
    async def test_distance_fallback(self, test_client):
        response = await test_client.post("/distance", json={"from_address": "", "to_address": "x"})

        assert response.status_code == 200
        assert response.json()["source"] == "fallback"


@pytest.mark.integration
class TestMonitoring:
    @pytest.mark.asyncio
    async def test_health(self, test_client, fake_redis):
        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["dependencies"]["redis"] == "connected"

    @pytest.mark.asyncio
    async def test_readiness_without_redis(self, test_client, no_redis):
        response = await test_client.get("/readiness")

        assert response.status_code == 503
        assert response.json()["ready"] is False

    @pytest.mark.asyncio
    async def test_metrics(self, test_client, fake_redis, valid_quote_data):
        await test_client.post("/quotes/calculate", json=valid_quote_data)

        response = await test_client.get("/metrics")

        assert response.status_code == 200
        assert "quotes_calculated_total" in response.text
        assert "distance_estimates_total" in response.text

    @pytest.mark.asyncio
    async def test_root(self, test_client):
        response = await test_client.get("/")

        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"
