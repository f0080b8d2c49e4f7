"""Pricing rules engine.

Every quote, detailed or simple, is priced by ``build_breakdown``. All
money is ``Decimal`` quantised to pennies so line items add up exactly.
"""
import math
from datetime import date, datetime
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal
from typing import Union

from app.core.enums import FloorAccess, PeakPeriod, UrgencyLevel, VanSize
from app.core.exceptions import PricingInvariantError
from app.core.pricing_rules import DEFAULT_RULES, LITRES_PER_UK_GALLON, PricingRules
from app.schemas.distance import DistanceEstimate
from app.schemas.quote import LineItem, PriceBreakdown, QuoteRequest
from app.utils.formatting import format_duration, format_price, format_rate

PENNY = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(value: Union[int, float, Decimal]) -> Decimal:
    return Decimal(str(value)).quantize(PENNY, rounding=ROUND_HALF_UP)


def _dec(value: float) -> Decimal:
    return Decimal(str(value))


def fuel_cost_per_mile(van_size: VanSize, rules: PricingRules = DEFAULT_RULES) -> float:
    return rules.fuel_price_per_litre * LITRES_PER_UK_GALLON / rules.average_mpg[van_size]


def per_mile_rate(effective_miles: float, urban: bool, rules: PricingRules = DEFAULT_RULES) -> float:
    """Flat top rate in the surcharge zone, otherwise tapering down towards the base rate."""
    if urban:
        return rules.rate_per_mile_max
    taper = min(1.0, rules.rate_taper_miles / effective_miles)
    return rules.rate_per_mile_min + (rules.rate_per_mile_max - rules.rate_per_mile_min) * taper


def calculate_distance_charge(
    distance_miles: float,
    van_size: VanSize,
    urban: bool = False,
    rules: PricingRules = DEFAULT_RULES,
) -> Decimal:
    effective = max(distance_miles, rules.minimum_distance_charge)
    rate = per_mile_rate(effective, urban, rules) + fuel_cost_per_mile(van_size, rules)
    return _money(effective * rate * rules.van_size_multipliers[van_size])


def calculate_return_journey(distance_charge: Decimal, rules: PricingRules = DEFAULT_RULES) -> Decimal:
    return _money(distance_charge * _dec(rules.return_journey_factor))


def calculate_van_charge(
    van_size: VanSize,
    journey_charge: Decimal,
    rules: PricingRules = DEFAULT_RULES,
) -> Decimal:
    """Uplift of the larger vans over the small-van journey price."""
    uplift = _dec(rules.hourly_rate_multipliers[van_size]) - 1
    return _money(journey_charge * uplift)


def calculate_helper_fee(helpers: int, hours: float, rules: PricingRules = DEFAULT_RULES) -> Decimal:
    return _money(_dec(rules.helper_hourly_rate) * helpers * _dec(hours))


def calculate_floor_access_fee(
    floor: FloorAccess,
    lift_available: bool,
    rules: PricingRules = DEFAULT_RULES,
) -> Decimal:
    fee = _dec(rules.floor_access_fees[floor])
    if lift_available:
        fee *= _dec(rules.lift_discount)
    return _money(fee)


def is_uk_holiday(day: date) -> bool:
    if (day.month, day.day) in ((1, 1), (12, 25), (12, 26)):
        return True
    # New Year substitute day
    return (day.month, day.day) == (1, 2) and day.weekday() == 0


def peak_period(when: datetime, rules: PricingRules = DEFAULT_RULES) -> PeakPeriod:
    if is_uk_holiday(when.date()):
        return PeakPeriod.HOLIDAY
    if when.weekday() >= 5:
        return PeakPeriod.WEEKEND
    if when.hour >= rules.evening_start_hour or when.hour < rules.morning_end_hour:
        return PeakPeriod.EVENING
    return PeakPeriod.NONE


def calculate_peak_time_rate(when: datetime, rules: PricingRules = DEFAULT_RULES) -> float:
    return rules.peak_time_surcharges[peak_period(when, rules)]


def calculate_urgency_rate(urgency: UrgencyLevel, rules: PricingRules = DEFAULT_RULES) -> float:
    return rules.urgency_surcharges.get(urgency, 0.0)


def calculate_fuel_cost(distance_miles: float, van_size: VanSize, rules: PricingRules = DEFAULT_RULES) -> Decimal:
    """Fuel for the outbound run. Informational only, the per-mile rate already covers it."""
    gallons = max(distance_miles, 0.0) / rules.average_mpg[van_size]
    return _money(gallons * LITRES_PER_UK_GALLON * rules.fuel_price_per_litre)


def calculate_loading_time(
    van_size: VanSize,
    has_stairs: bool,
    items_count: int = 10,
    rules: PricingRules = DEFAULT_RULES,
) -> float:
    """Hours to load and unload, scaled by access and by volume around a ten-item move."""
    access = 1.5 if has_stairs else 1.0
    volume = max(0.5, min(2.0, items_count / 10))
    return rules.base_loading_hours[van_size] * access * volume * 2


def estimate_job_hours(distance_miles: float) -> float:
    miles = max(distance_miles, 0.0)
    if miles < 20:
        hours = 2.0
    elif miles < 100:
        hours = 2 + (miles - 20) / 25
    elif miles < 200:
        hours = 5 + (miles - 100) / 50
    else:
        hours = 7 + (miles - 200) / 100
    return math.floor(hours * 2 + 0.5) / 2


def split_commission(
    subtotal: Decimal,
    vat_amount: Decimal,
    total_with_vat: Decimal,
    rules: PricingRules = DEFAULT_RULES,
) -> tuple[Decimal, Decimal]:
    """(platform_fee, driver_share); VAT is passed through, never shared."""
    platform_fee = _money(subtotal * _dec(rules.platform_fee_rate))
    driver_share = total_with_vat - platform_fee - vat_amount
    if driver_share < 0:
        raise PricingInvariantError(
            "Driver share is negative",
            details={"subtotal": str(subtotal), "platform_fee": str(platform_fee)},
        )
    return platform_fee, driver_share


def build_breakdown(
    req: QuoteRequest,
    distance: DistanceEstimate,
    rules: PricingRules = DEFAULT_RULES,
) -> PriceBreakdown:
    miles = distance.distance_miles
    urban = req.in_regional_surcharge_zone
    hours = req.estimated_hours if req.estimated_hours is not None else estimate_job_hours(miles)

    distance_charge = calculate_distance_charge(miles, req.van_size, urban, rules)
    return_charge = calculate_return_journey(distance_charge, rules)
    journey = distance_charge + return_charge

    van_charge = calculate_van_charge(req.van_size, journey, rules)
    helpers_fee = calculate_helper_fee(req.helpers, hours, rules)
    floor_fee = calculate_floor_access_fee(req.floor_access, req.lift_available, rules)

    # Peak and urgency are additive on the same journey base
    peak_rate = calculate_peak_time_rate(req.departure, rules)
    peak_surcharge = _money(journey * _dec(peak_rate))
    urgency_rate = calculate_urgency_rate(req.urgency, rules)
    urgency_surcharge = _money(journey * _dec(urgency_rate))

    regional = _money(rules.regional_surcharge) if urban else ZERO

    items = [
        LineItem(label="Distance charge", amount=distance_charge),
        LineItem(label="Return journey", amount=return_charge),
    ]
    optional_items = [
        (f"Van size ({req.van_size})", van_charge),
        (f"Helpers ({req.helpers} x {hours:g}h)", helpers_fee),
        (f"Floor access ({req.floor_access})", floor_fee),
        (f"Peak time surcharge ({format_rate(peak_rate)})", peak_surcharge),
        (f"Urgency surcharge ({format_rate(urgency_rate)})", urgency_surcharge),
        (rules.regional_surcharge_label, regional),
    ]

    running = journey + van_charge + helpers_fee + floor_fee + peak_surcharge + urgency_surcharge + regional
    if running < 0:
        raise PricingInvariantError(
            "Computed price is negative",
            details={"running_total": str(running), "distance_miles": miles},
        )

    minimum_adjustment = max(_money(rules.minimum_price) - running, ZERO)
    floored = running + minimum_adjustment
    subtotal = floored.to_integral_value(rounding=ROUND_CEILING).quantize(PENNY)
    rounding = subtotal - floored
    optional_items.append(("Minimum price adjustment", minimum_adjustment))
    optional_items.append(("Rounding", rounding))

    items.extend(LineItem(label=label, amount=amount) for label, amount in optional_items if amount != 0)
    if sum((item.amount for item in items), ZERO) != subtotal:
        raise PricingInvariantError(
            "Line items do not add up to the subtotal",
            details={"subtotal": str(subtotal)},
        )

    vat_amount = _money(subtotal * _dec(rules.vat_rate))
    total_with_vat = subtotal + vat_amount
    platform_fee, driver_share = split_commission(subtotal, vat_amount, total_with_vat, rules)

    currency = rules.currency
    lines = [f"{item.label}: {format_price(item.amount, currency)}" for item in items]
    lines += [
        f"Subtotal: {format_price(subtotal, currency)}",
        f"VAT ({format_rate(rules.vat_rate)}): {format_price(vat_amount, currency)}",
        f"Total (inc. VAT): {format_price(total_with_vat, currency)}",
        f"Platform fee ({format_rate(rules.platform_fee_rate)}): {format_price(platform_fee, currency)}",
        f"Driver payment: {format_price(driver_share, currency)}",
    ]

    return PriceBreakdown(
        distance_miles=miles,
        distance_charge=distance_charge,
        return_journey_charge=return_charge,
        van_charge=van_charge,
        helpers_fee=helpers_fee,
        floor_access_fee=floor_fee,
        peak_time_surcharge=peak_surcharge,
        peak_time_rate=peak_rate,
        urgency_surcharge=urgency_surcharge,
        urgency_rate=urgency_rate,
        fuel_cost=calculate_fuel_cost(miles, req.van_size, rules),
        regional_surcharge=regional,
        van_size_multiplier=rules.van_size_multipliers[req.van_size],
        minimum_price_adjustment=minimum_adjustment,
        subtotal=subtotal,
        vat_amount=vat_amount,
        total_with_vat=total_with_vat,
        platform_fee=platform_fee,
        driver_share=driver_share,
        currency=currency,
        price_string=format_price(total_with_vat, currency),
        estimated_hours=hours,
        estimated_time=format_duration(distance.estimated_minutes),
        items=items,
        lines=lines,
    )
