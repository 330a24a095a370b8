import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional

from flightterrain.builder import TerrainBuilder
from flightterrain.models import TrackPoint

from backend import config

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    queued = "queued"
    running = "running"
    completed = "completed"
    superseded = "superseded"
    failed = "failed"


@dataclass
class Job:
    id: str
    scene: str = "default"
    status: JobStatus = JobStatus.queued
    message: str = "Queued"
    notice: Optional[str] = None
    result: Optional[dict] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class JobManager:
    """In-memory job registry.

    Every scene name owns one ``TerrainBuilder``; a job started later for
    the same scene supersedes any earlier one still fetching elevations.
    """

    def __init__(self, builder_factory: Optional[Callable[[], TerrainBuilder]] = None) -> None:
        self.jobs: Dict[str, Job] = {}
        self.builders: Dict[str, TerrainBuilder] = {}
        self._builder_factory = builder_factory or TerrainBuilder

    def create_job(self, scene: str = "default") -> Job:
        job = Job(id=str(uuid.uuid4()), scene=scene)
        self.jobs[job.id] = job
        return job

    def get_job(self, job_id: str) -> Optional[Job]:
        return self.jobs.get(job_id)

    def builder_for(self, scene: str) -> TerrainBuilder:
        if scene not in self.builders:
            self.builders[scene] = self._builder_factory()
        return self.builders[scene]

    async def run_build(self, job: Job, track: List[TrackPoint],
                        buffer_distance: float, resolution: float,
                        snap: Optional[bool] = None) -> None:
        """Execute the terrain pipeline, updating *job* as it goes."""
        try:
            job.status = JobStatus.running
            job.message = "Fetching terrain data..."

            builder = self.builder_for(job.scene)
            builder.snap = config.SNAP_DEFAULT if snap is None else snap
            scene = await builder.build(track, buffer_distance=buffer_distance,
                                        resolution=resolution)

            if scene is not None and not builder.is_current(scene.token):
                job.status = JobStatus.superseded
                job.message = "Superseded by a newer build"
                return

            job.result = scene.to_dict() if scene is not None else None
            job.notice = scene.notice if scene is not None else None
            job.message = "Build complete"
            job.status = JobStatus.completed

        except Exception as exc:
            logger.exception("Build failed for job %s", job.id)
            job.status = JobStatus.failed
            job.message = f"Build failed: {exc}"


# Singleton instance used across the application
job_manager = JobManager()
