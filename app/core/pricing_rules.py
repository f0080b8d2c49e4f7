"""Commercial pricing constants.

Loaded once at import and passed into the pricing engine; tables are
read-only mappings so a running process can never reprice by mutation.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from app.core.enums import FloorAccess, PeakPeriod, UrgencyLevel, VanSize

LITRES_PER_UK_GALLON = 4.54609


def _frozen(table: dict) -> Mapping:
    return MappingProxyType(dict(table))


@dataclass(frozen=True)
class PricingRules:
    rate_per_mile_min: float = 1.75
    rate_per_mile_max: float = 2.00
    # Below this effective distance the standard rate tapers up to the max
    rate_taper_miles: float = 20.0
    minimum_distance_charge: float = 5.0

    van_size_multipliers: Mapping[VanSize, float] = field(default_factory=lambda: _frozen({
        VanSize.SMALL: 1.0,
        VanSize.MEDIUM: 1.1,
        VanSize.LARGE: 1.2,
        VanSize.LUTON: 1.3,
    }))
    hourly_rate_multipliers: Mapping[VanSize, float] = field(default_factory=lambda: _frozen({
        VanSize.SMALL: 1.0,
        VanSize.MEDIUM: 1.1,
        VanSize.LARGE: 1.2,
        VanSize.LUTON: 1.3,
    }))
    average_mpg: Mapping[VanSize, float] = field(default_factory=lambda: _frozen({
        VanSize.SMALL: 35.0,
        VanSize.MEDIUM: 32.0,
        VanSize.LARGE: 28.0,
        VanSize.LUTON: 24.0,
    }))
    base_loading_hours: Mapping[VanSize, float] = field(default_factory=lambda: _frozen({
        VanSize.SMALL: 0.5,
        VanSize.MEDIUM: 0.75,
        VanSize.LARGE: 1.0,
        VanSize.LUTON: 1.25,
    }))
    fuel_price_per_litre: float = 1.50
    return_journey_factor: float = 0.2

    helper_hourly_rate: float = 25.0
    max_helpers: int = 2

    floor_access_fees: Mapping[FloorAccess, float] = field(default_factory=lambda: _frozen({
        FloorAccess.GROUND: 0.0,
        FloorAccess.FIRST_FLOOR: 10.0,
        FloorAccess.SECOND_FLOOR: 20.0,
        FloorAccess.THIRD_FLOOR_PLUS: 30.0,
    }))
    lift_discount: float = 0.5

    regional_surcharge: float = 15.0
    regional_surcharge_label: str = "Congestion charge"

    peak_time_surcharges: Mapping[PeakPeriod, float] = field(default_factory=lambda: _frozen({
        PeakPeriod.NONE: 0.0,
        PeakPeriod.EVENING: 0.05,
        PeakPeriod.WEEKEND: 0.08,
        PeakPeriod.HOLIDAY: 0.10,
    }))
    evening_start_hour: int = 18
    morning_end_hour: int = 7

    urgency_surcharges: Mapping[UrgencyLevel, float] = field(default_factory=lambda: _frozen({
        UrgencyLevel.STANDARD: 0.0,
        UrgencyLevel.PRIORITY: 0.15,
        UrgencyLevel.EXPRESS: 0.30,
    }))

    minimum_price: float = 40.0
    platform_fee_rate: float = 0.25
    vat_rate: float = 0.20
    currency: str = "£"


DEFAULT_RULES = PricingRules()
