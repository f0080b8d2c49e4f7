from fastapi import APIRouter, Depends

from app.schemas.distance import DistanceEstimate, DistanceRequest
from app.services.distance import DistanceEstimator, get_estimator

router = APIRouter(prefix="/distance", tags=["distance"])


@router.post("", response_model=DistanceEstimate)
async def estimate_distance(req: DistanceRequest, estimator: DistanceEstimator = Depends(get_estimator)):
    return await estimator.estimate(req.from_address, req.to_address)
