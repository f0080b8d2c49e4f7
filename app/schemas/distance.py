from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import DistanceSource


class DistanceRequest(BaseModel):
    from_address: str
    to_address: str


class DistanceEstimate(BaseModel):
    model_config = ConfigDict(frozen=True)

    distance_miles: float = Field(ge=0)
    estimated_minutes: int = Field(ge=0)
    exact: bool
    source: DistanceSource
