from pydantic import BaseModel, Field
from typing import List, Optional

from flightterrain.constants import DEFAULT_BUFFER_DISTANCE, DEFAULT_RESOLUTION


class TrackPointModel(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    altitude: float = 0.0


class BuildTerrainRequest(BaseModel):
    track: List[TrackPointModel] = Field(..., min_length=1)
    buffer_distance: float = Field(DEFAULT_BUFFER_DISTANCE, gt=0)  # metres
    resolution: float = Field(DEFAULT_RESOLUTION, gt=0)            # metres
    snap: Optional[bool] = None
    scene: str = "default"  # builds for the same scene supersede each other


class JobResponse(BaseModel):
    job_id: str
    scene: str
    status: str
    message: str
    notice: Optional[str] = None
    result: Optional[dict] = None


class SampleTrackResponse(BaseModel):
    track: List[TrackPointModel]
