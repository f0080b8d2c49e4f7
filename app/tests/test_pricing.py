import pytest
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from app.core.enums import FloorAccess, PeakPeriod, UrgencyLevel, VanSize
from app.core.exceptions import PricingInvariantError
from app.core.pricing_rules import PricingRules
from app.schemas.quote import QuoteRequest
from app.services.pricing import (
    build_breakdown,
    calculate_fuel_cost,
    calculate_floor_access_fee,
    calculate_loading_time,
    estimate_job_hours,
    is_uk_holiday,
    peak_period,
    per_mile_rate,
)

PENNY = Decimal("0.01")

LEEDS_A = "1 Mill Lane, Leeds"
LEEDS_B = "2 Park Road, Leeds"


def _request(move_date, **overrides):
    data = {
        "pickup_address": LEEDS_A,
        "delivery_address": LEEDS_B,
        "van_size": "small",
        "move_date": move_date,
        "estimated_hours": 2,
    }
    data.update(overrides)
    return QuoteRequest(**data)


@pytest.mark.pricing
class TestBreakdown:
    def test_short_local_move(self, weekday_morning, make_distance):
        breakdown = build_breakdown(_request(weekday_morning), make_distance(10.0))

        # 10 mi x (2.00 + 1.50 x 4.54609 / 35) = 21.948
        assert breakdown.distance_charge == Decimal("21.95")
        assert breakdown.return_journey_charge == Decimal("4.39")
        assert breakdown.van_charge == Decimal("0.00")
        assert breakdown.minimum_price_adjustment == Decimal("13.66")
        assert breakdown.subtotal == Decimal("40.00")
        assert breakdown.vat_amount == Decimal("8.00")
        assert breakdown.total_with_vat == Decimal("48.00")
        assert breakdown.platform_fee == Decimal("10.00")
        assert breakdown.driver_share == Decimal("30.00")
        assert breakdown.price_string == "£48.00"
        assert [item.label for item in breakdown.items] == [
            "Distance charge", "Return journey", "Minimum price adjustment",
        ]

    @pytest.mark.parametrize("miles,van,helpers,urgency", [
        (0.5, "small", 0, "standard"),
        (12.3, "medium", 1, "priority"),
        (57.8, "large", 2, "express"),
        (126.0, "luton", 1, "standard"),
        (412.6, "luton", 2, "express"),
    ])
    def test_split_and_items_add_up(self, weekday_morning, make_distance, miles, van, helpers, urgency):
        req = _request(weekday_morning, van_size=van, helpers=helpers, urgency=urgency,
                       pickup_floor="secondFloor", estimated_hours=None)
        breakdown = build_breakdown(req, make_distance(miles))

        assert breakdown.driver_share + breakdown.platform_fee + breakdown.vat_amount == breakdown.total_with_vat
        assert sum(item.amount for item in breakdown.items) == breakdown.subtotal
        assert breakdown.subtotal == breakdown.subtotal.to_integral_value()
        assert breakdown.subtotal >= Decimal("40")
        assert breakdown.total_with_vat == breakdown.subtotal + breakdown.vat_amount

    def test_deterministic(self, weekday_morning, make_distance):
        req = _request(weekday_morning, van_size="large", helpers=2, urgency="express")
        first = build_breakdown(req, make_distance(87.4))
        second = build_breakdown(req, make_distance(87.4))

        assert first.model_dump_json() == second.model_dump_json()

    def test_monotonic_in_distance(self, weekday_morning, make_distance):
        req = _request(weekday_morning, van_size="medium")
        totals = [
            build_breakdown(req, make_distance(miles)).total_with_vat
            for miles in (1, 5, 10, 19.9, 20, 35, 50, 100, 200, 400)
        ]

        assert totals == sorted(totals)

    def test_monotonic_in_van_size(self, weekday_morning, make_distance):
        totals = [
            build_breakdown(_request(weekday_morning, van_size=van), make_distance(150.0)).total_with_vat
            for van in ("small", "medium", "large", "luton")
        ]

        assert totals == sorted(totals)
        assert totals[0] < totals[-1]

    def test_minimum_price_applies(self, weekday_morning, make_distance):
        breakdown = build_breakdown(_request(weekday_morning), make_distance(1.0))

        assert breakdown.subtotal == Decimal("40.00")
        assert breakdown.minimum_price_adjustment > 0
        assert any(item.label == "Minimum price adjustment" for item in breakdown.items)

    def test_negative_price_raises(self, weekday_morning, make_distance):
        rules = PricingRules(rate_per_mile_min=-10.0, rate_per_mile_max=-10.0)

        with pytest.raises(PricingInvariantError):
            build_breakdown(_request(weekday_morning), make_distance(30.0), rules)

    def test_lines_include_vat_and_driver_payment(self, weekday_morning, make_distance):
        breakdown = build_breakdown(_request(weekday_morning), make_distance(80.0))

        assert "VAT (20%): " + f"£{breakdown.vat_amount:.2f}" in breakdown.lines
        assert f"Total (inc. VAT): {breakdown.price_string}" in breakdown.lines
        assert breakdown.lines[-1] == f"Driver payment: £{breakdown.driver_share:,.2f}"

    def test_fuel_cost_is_informational(self, weekday_morning, make_distance):
        breakdown = build_breakdown(_request(weekday_morning), make_distance(35.0))

        assert breakdown.fuel_cost == Decimal("6.82")
        assert all("Fuel" not in item.label for item in breakdown.items)


@pytest.mark.pricing
class TestAccessAndHelpers:
    @pytest.mark.parametrize("pickup,delivery,pickup_lift,delivery_lift,expected", [
        ("ground", "ground", False, False, "0.00"),
        ("firstFloor", "ground", False, False, "10.00"),
        ("ground", "secondFloor", False, False, "20.00"),
        ("thirdFloorPlus", "firstFloor", False, False, "30.00"),
        ("thirdFloorPlus", "thirdFloorPlus", True, True, "15.00"),
        ("thirdFloorPlus", "ground", True, False, "30.00"),
    ])
    def test_floor_access_fee(self, weekday_morning, make_distance,
                              pickup, delivery, pickup_lift, delivery_lift, expected):
        req = _request(weekday_morning, pickup_floor=pickup, delivery_floor=delivery,
                       pickup_lift=pickup_lift, delivery_lift=delivery_lift)
        breakdown = build_breakdown(req, make_distance(20.0))

        assert breakdown.floor_access_fee == Decimal(expected)

    @pytest.mark.parametrize("floor", ["firstFloor", "secondFloor", "thirdFloorPlus"])
    def test_lifts_at_both_ends_halve_fee(self, weekday_morning, make_distance, floor):
        without = build_breakdown(
            _request(weekday_morning, pickup_floor=floor, delivery_floor=floor),
            make_distance(20.0),
        )
        with_lifts = build_breakdown(
            _request(weekday_morning, pickup_floor=floor, delivery_floor=floor,
                     pickup_lift=True, delivery_lift=True),
            make_distance(20.0),
        )

        assert with_lifts.floor_access_fee > 0
        assert with_lifts.floor_access_fee * 2 == without.floor_access_fee
        assert calculate_floor_access_fee(FloorAccess(floor), True) * 2 == \
            calculate_floor_access_fee(FloorAccess(floor), False)

    def test_helpers_fee(self, weekday_morning, make_distance):
        req = _request(weekday_morning, helpers=2, estimated_hours=3.5)
        breakdown = build_breakdown(req, make_distance(20.0))

        assert breakdown.helpers_fee == Decimal("175.00")

    def test_hours_derived_from_distance_when_missing(self, weekday_morning, make_distance):
        req = _request(weekday_morning, helpers=1, estimated_hours=None)
        breakdown = build_breakdown(req, make_distance(70.0))

        assert breakdown.estimated_hours == 4.0
        assert breakdown.helpers_fee == Decimal("100.00")


@pytest.mark.pricing
class TestSurcharges:
    def test_peak_and_urgency_are_additive(self, make_distance):
        christmas = datetime(2024, 12, 25, 9, 0)
        req = _request(christmas, van_size="luton", urgency="express", helpers=2,
                       pickup_floor="thirdFloorPlus")
        breakdown = build_breakdown(req, make_distance(400.0))

        journey = breakdown.distance_charge + breakdown.return_journey_charge
        assert breakdown.peak_time_rate == 0.10
        assert breakdown.urgency_rate == 0.30
        assert breakdown.peak_time_surcharge == (journey * Decimal("0.1")).quantize(PENNY, ROUND_HALF_UP)
        assert breakdown.urgency_surcharge == (journey * Decimal("0.3")).quantize(PENNY, ROUND_HALF_UP)

    def test_regional_surcharge_in_congestion_zone(self, weekday_morning, make_distance):
        req = _request(
            weekday_morning,
            pickup_address="1 Poultry, London EC2R 8AH",
            delivery_address="20 Fenchurch Street, London EC3M 3BY",
        )
        breakdown = build_breakdown(req, make_distance(2.0))

        assert req.in_regional_surcharge_zone
        assert breakdown.regional_surcharge == Decimal("15.00")
        assert any(item.label == "Congestion charge" for item in breakdown.items)
        assert breakdown.subtotal >= Decimal("40.00")

    def test_no_regional_surcharge_outside_zone(self, weekday_morning, make_distance):
        breakdown = build_breakdown(_request(weekday_morning), make_distance(2.0))

        assert breakdown.regional_surcharge == Decimal("0.00")

    @pytest.mark.parametrize("miles", [0.5, 3.0, 47.0, 380.0])
    @pytest.mark.parametrize("van", ["small", "medium", "large", "luton"])
    def test_urgency_never_lowers_price(self, weekday_morning, make_distance, miles, van):
        totals = [
            build_breakdown(_request(weekday_morning, van_size=van, urgency=urgency),
                            make_distance(miles)).total_with_vat
            for urgency in ("standard", "priority", "express")
        ]

        assert totals == sorted(totals)

    @pytest.mark.parametrize("when,expected", [
        (datetime(2024, 6, 12, 10, 0), PeakPeriod.NONE),
        (datetime(2024, 6, 12, 18, 0), PeakPeriod.EVENING),
        (datetime(2024, 6, 12, 6, 59), PeakPeriod.EVENING),
        (datetime(2024, 6, 15, 10, 0), PeakPeriod.WEEKEND),
        (datetime(2024, 6, 15, 20, 0), PeakPeriod.WEEKEND),
        (datetime(2024, 12, 25, 10, 0), PeakPeriod.HOLIDAY),
        (datetime(2022, 1, 1, 10, 0), PeakPeriod.HOLIDAY),
    ])
    def test_peak_period(self, when, expected):
        assert peak_period(when) == expected

    @pytest.mark.parametrize("day,expected", [
        (datetime(2024, 1, 1), True),
        (datetime(2023, 1, 2), True),
        (datetime(2024, 1, 2), False),
        (datetime(2024, 12, 25), True),
        (datetime(2024, 12, 26), True),
        (datetime(2024, 12, 27), False),
    ])
    def test_uk_holidays(self, day, expected):
        assert is_uk_holiday(day.date()) is expected

    def test_move_time_overrides_time_of_day(self, make_distance):
        req = _request(datetime(2024, 6, 12, 10, 0), move_time="19:30")
        breakdown = build_breakdown(req, make_distance(20.0))

        assert req.departure.hour == 19
        assert breakdown.peak_time_rate == 0.05


@pytest.mark.pricing
class TestRateHelpers:
    def test_urban_routes_use_flat_top_rate(self):
        assert per_mile_rate(50.0, urban=True) == 2.0

    @pytest.mark.parametrize("miles,expected", [
        (5.0, 2.0),
        (20.0, 2.0),
        (40.0, 1.875),
        (200.0, 1.775),
    ])
    def test_rate_tapers_with_distance(self, miles, expected):
        assert per_mile_rate(miles, urban=False) == pytest.approx(expected)

    def test_fuel_cost(self):
        assert calculate_fuel_cost(35.0, VanSize.SMALL) == Decimal("6.82")
        assert calculate_fuel_cost(100.0, VanSize.LUTON) > calculate_fuel_cost(100.0, VanSize.SMALL)

    @pytest.mark.parametrize("miles,expected", [
        (0, 2.0),
        (10, 2.0),
        (70, 4.0),
        (150, 6.0),
        (300, 8.0),
    ])
    def test_estimate_job_hours(self, miles, expected):
        assert estimate_job_hours(miles) == expected

    def test_loading_time(self):
        assert calculate_loading_time(VanSize.SMALL, has_stairs=False) == 1.0
        assert calculate_loading_time(VanSize.SMALL, has_stairs=True, items_count=20) == 3.0
        assert calculate_loading_time(VanSize.LUTON, has_stairs=False, items_count=1) == 1.25


@pytest.mark.unit
class TestRequestCoercion:
    def test_unknown_values_fall_back(self, weekday_morning):
        req = _request(weekday_morning, van_size="spaceship", urgency="yesterday",
                       pickup_floor="roof", helpers=7, estimated_hours=-3)

        assert req.van_size == VanSize.MEDIUM
        assert req.urgency == UrgencyLevel.STANDARD
        assert req.pickup_floor == FloorAccess.GROUND
        assert req.helpers == 2
        assert req.estimated_hours == 0.0

    def test_enum_values_are_case_insensitive(self, weekday_morning):
        req = _request(weekday_morning, van_size="LUTON", delivery_floor="FIRSTFLOOR")

        assert req.van_size == VanSize.LUTON
        assert req.delivery_floor == FloorAccess.FIRST_FLOOR

    def test_negative_helpers_clamped(self, weekday_morning):
        assert _request(weekday_morning, helpers=-1).helpers == 0

    def test_wrong_json_type_rejected(self, weekday_morning):
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            _request(weekday_morning, van_size=["small"])

    @pytest.mark.parametrize("hours", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_hours_derived_from_distance(self, weekday_morning, make_distance, hours):
        req = _request(weekday_morning, helpers=1, estimated_hours=hours)
        breakdown = build_breakdown(req, make_distance(70.0))

        assert req.estimated_hours is None
        assert breakdown.estimated_hours == 4.0
        assert breakdown.helpers_fee == Decimal("100.00")

    def test_bad_move_time_ignored(self, weekday_morning):
        req = _request(weekday_morning, move_time="25:99")

        assert req.move_time is None
        assert req.departure == weekday_morning

    def test_more_restrictive_floor_and_both_lifts(self, weekday_morning):
        req = _request(weekday_morning, pickup_floor="firstFloor", delivery_floor="thirdFloorPlus",
                       pickup_lift=True, delivery_lift=False)

        assert req.floor_access == FloorAccess.THIRD_FLOOR_PLUS
        assert req.lift_available is False
