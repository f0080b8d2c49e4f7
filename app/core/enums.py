from enum import Enum


class VanSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    LUTON = "luton"

    def __str__(self):
        return self.value


class FloorAccess(str, Enum):
    GROUND = "ground"
    FIRST_FLOOR = "firstFloor"
    SECOND_FLOOR = "secondFloor"
    THIRD_FLOOR_PLUS = "thirdFloorPlus"

    def __str__(self):
        return self.value

    @property
    def level(self) -> int:
        return FLOOR_ORDER.index(self)


FLOOR_ORDER = [
    FloorAccess.GROUND,
    FloorAccess.FIRST_FLOOR,
    FloorAccess.SECOND_FLOOR,
    FloorAccess.THIRD_FLOOR_PLUS,
]


class UrgencyLevel(str, Enum):
    STANDARD = "standard"
    PRIORITY = "priority"
    EXPRESS = "express"

    def __str__(self):
        return self.value


class DistanceSource(str, Enum):
    EXACT_TABLE = "exact_table"
    GEODESIC_APPROX = "geodesic_approx"
    EXTERNAL_ROUTING = "external_routing"
    FALLBACK = "fallback"

    def __str__(self):
        return self.value


class PeakPeriod(str, Enum):
    NONE = "none"
    EVENING = "evening"
    WEEKEND = "weekend"
    HOLIDAY = "holiday"

    def __str__(self):
        return self.value
