import asyncio
import logging

from fastapi import APIRouter, HTTPException

from flightterrain.constants import SAMPLE_TRACK
from flightterrain.models import TrackPoint

from backend.jobs import job_manager
from backend.models import BuildTerrainRequest, JobResponse, SampleTrackResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/terrain", tags=["terrain"])


def _job_response(job) -> JobResponse:
    return JobResponse(
        job_id=job.id,
        scene=job.scene,
        status=job.status.value,
        message=job.message,
        notice=job.notice,
        result=job.result,
    )


@router.post("", response_model=JobResponse)
async def build_terrain(request: BuildTerrainRequest):
    """Start a terrain build for a flight track.

    The pipeline runs as a background task; the caller receives a job ID
    immediately and can poll ``/status/{job_id}``.  A later build for the
    same ``scene`` supersedes an earlier one that has not finished.
    """
    track = [TrackPoint(p.latitude, p.longitude, p.altitude) for p in request.track]

    job = job_manager.create_job(request.scene)
    asyncio.create_task(job_manager.run_build(
        job, track,
        buffer_distance=request.buffer_distance,
        resolution=request.resolution,
        snap=request.snap))

    return _job_response(job)


@router.get("/status/{job_id}", response_model=JobResponse)
async def get_build_status(job_id: str):
    """Poll the status of a running or completed build job."""
    job = job_manager.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return _job_response(job)


@router.get("/sample", response_model=SampleTrackResponse)
async def sample_track():
    """The built-in sample flight track."""
    return SampleTrackResponse(track=[
        {"latitude": lat, "longitude": lon, "altitude": alt}
        for lat, lon, alt in SAMPLE_TRACK
    ])
