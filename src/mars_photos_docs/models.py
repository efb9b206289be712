"""Data models for the Mars Rover Photos API responses.

The shapes are defined by NASA's API; these models only mirror them so the
client can hand back typed objects. Unknown fields are kept, missing
optional fields default to None.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _ApiModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class Camera(_ApiModel):
    """A rover camera.

    Photos carry the full camera record; the rover listing carries only
    ``name`` and ``full_name``.
    """

    id: Optional[int] = None
    name: str
    rover_id: Optional[int] = None
    full_name: Optional[str] = None


class Rover(_ApiModel):
    """Mission details for one rover."""

    id: Optional[int] = None
    name: str
    status: Optional[str] = None
    landing_date: Optional[date] = None
    launch_date: Optional[date] = None
    max_sol: Optional[int] = None
    max_date: Optional[date] = None
    total_photos: Optional[int] = None
    cameras: List[Camera] = Field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return (self.status or "").lower() == "active"


class Photo(_ApiModel):
    """A single rover photo."""

    id: int
    sol: int
    camera: Camera
    img_src: str
    earth_date: date
    rover: Rover


class ManifestSol(_ApiModel):
    """Photo count and cameras used on one sol."""

    sol: int
    earth_date: Optional[date] = None
    total_photos: int = 0
    cameras: List[str] = Field(default_factory=list)


class Manifest(_ApiModel):
    """Per-rover aggregate of photos by sol."""

    name: str
    status: Optional[str] = None
    landing_date: Optional[date] = None
    launch_date: Optional[date] = None
    max_sol: Optional[int] = None
    max_date: Optional[date] = None
    total_photos: Optional[int] = None
    photos: List[ManifestSol] = Field(default_factory=list)

    def get_sol(self, sol: int) -> Optional[ManifestSol]:
        """Return the entry for a sol, or None when no photos were taken."""
        for entry in self.photos:
            if entry.sol == sol:
                return entry
        return None

    def cameras_used(self) -> List[str]:
        """All camera names that appear anywhere in the mission, sorted."""
        names = set()
        for entry in self.photos:
            names.update(entry.cameras)
        return sorted(names)
