import math
import re
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from app.core.enums import FloorAccess, UrgencyLevel, VanSize
from app.core.pricing_rules import DEFAULT_RULES
from app.schemas.distance import DistanceEstimate
from app.services.geo import in_surcharge_zone

MOVE_TIME_RE = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


def _coerce_enum(enum_cls: Type[Enum], value: Any, default: Enum) -> Any:
    """Unknown strings fall back to the default; wrong JSON types are left for validation to reject."""
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        wanted = value.strip().lower()
        for member in enum_cls:
            if member.value.lower() == wanted:
                return member
        return default
    return value


class QuoteRequest(BaseModel):
    pickup_address: str
    delivery_address: str
    van_size: VanSize = VanSize.MEDIUM
    move_date: datetime
    move_time: Optional[str] = None
    estimated_hours: Optional[float] = None
    helpers: int = 0
    pickup_floor: FloorAccess = FloorAccess.GROUND
    delivery_floor: FloorAccess = FloorAccess.GROUND
    pickup_lift: bool = False
    delivery_lift: bool = False
    urgency: UrgencyLevel = UrgencyLevel.STANDARD

    @field_validator("van_size", mode="before")
    @classmethod
    def coerce_van_size(cls, v):
        return _coerce_enum(VanSize, v, VanSize.MEDIUM)

    @field_validator("pickup_floor", "delivery_floor", mode="before")
    @classmethod
    def coerce_floor(cls, v):
        return _coerce_enum(FloorAccess, v, FloorAccess.GROUND)

    @field_validator("urgency", mode="before")
    @classmethod
    def coerce_urgency(cls, v):
        return _coerce_enum(UrgencyLevel, v, UrgencyLevel.STANDARD)

    @field_validator("helpers")
    @classmethod
    def clamp_helpers(cls, v: int) -> int:
        return min(max(v, 0), DEFAULT_RULES.max_helpers)

    @field_validator("estimated_hours")
    @classmethod
    def clamp_hours(cls, v: Optional[float]) -> Optional[float]:
        # NaN and infinity are treated as missing; hours then come from distance
        if v is None or not math.isfinite(v):
            return None
        return max(v, 0.0)

    @field_validator("move_time")
    @classmethod
    def check_move_time(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not MOVE_TIME_RE.match(v.strip()):
            return None
        return v.strip()

    @computed_field
    @property
    def in_regional_surcharge_zone(self) -> bool:
        return in_surcharge_zone(self.pickup_address) or in_surcharge_zone(self.delivery_address)

    @property
    def departure(self) -> datetime:
        """Move date with the explicit move time applied, if one was given."""
        if not self.move_time:
            return self.move_date
        hour, minute = MOVE_TIME_RE.match(self.move_time).groups()
        return self.move_date.replace(hour=int(hour), minute=int(minute), second=0, microsecond=0)

    @property
    def floor_access(self) -> FloorAccess:
        return max(self.pickup_floor, self.delivery_floor, key=lambda floor: floor.level)

    @property
    def lift_available(self) -> bool:
        return self.pickup_lift and self.delivery_lift


class SimpleQuoteRequest(BaseModel):
    pickup_address: str
    delivery_address: str
    van_size: VanSize = VanSize.MEDIUM
    move_date: datetime

    @field_validator("van_size", mode="before")
    @classmethod
    def coerce_van_size(cls, v):
        return _coerce_enum(VanSize, v, VanSize.MEDIUM)


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    amount: Decimal


class PriceBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    distance_miles: float = Field(ge=0)
    distance_charge: Decimal
    return_journey_charge: Decimal
    van_charge: Decimal
    helpers_fee: Decimal
    floor_access_fee: Decimal
    peak_time_surcharge: Decimal
    peak_time_rate: float
    urgency_surcharge: Decimal
    urgency_rate: float
    fuel_cost: Decimal
    regional_surcharge: Decimal
    van_size_multiplier: float
    minimum_price_adjustment: Decimal
    subtotal: Decimal
    vat_amount: Decimal
    total_with_vat: Decimal
    platform_fee: Decimal
    driver_share: Decimal
    currency: str
    price_string: str
    estimated_hours: float
    estimated_time: str
    items: list[LineItem]
    lines: list[str]


class QuoteResponse(BaseModel):
    quote_id: Optional[str] = None
    distance: DistanceEstimate
    breakdown: PriceBreakdown
    explanation: str
