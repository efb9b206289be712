"""Response formatting for terminal output using YAML serialization."""

import json
import logging
from typing import Any, List, Sequence

import yaml
from pydantic import BaseModel

from .models import Manifest, Photo

logger = logging.getLogger(__name__)


class ResponseFormatter:
    """Serializes API models as YAML, optionally condensed for reading."""

    def __init__(self, summary: bool = False):
        self.summary = summary

    def _to_data(self, data: Any) -> Any:
        if isinstance(data, BaseModel):
            return data.model_dump(mode="json", exclude_none=True)
        if isinstance(data, (list, tuple)):
            return [self._to_data(item) for item in data]
        return data

    def summarize_photos(self, photos: Sequence[Photo]) -> List[dict]:
        """One line of detail per photo."""
        return [
            {
                "id": photo.id,
                "sol": photo.sol,
                "earth_date": photo.earth_date.isoformat(),
                "camera": photo.camera.name,
                "img_src": photo.img_src,
            }
            for photo in photos
        ]

    def summarize_manifest(self, manifest: Manifest) -> dict:
        """Mission totals without the per-sol list."""
        return {
            "name": manifest.name,
            "status": manifest.status,
            "max_sol": manifest.max_sol,
            "total_photos": manifest.total_photos,
            "sols_with_photos": len(manifest.photos),
            "cameras": manifest.cameras_used(),
        }

    def format(self, data: Any) -> Any:
        if self.summary:
            if isinstance(data, Manifest):
                return self.summarize_manifest(data)
            if isinstance(data, Photo):
                return self.summarize_photos([data])[0]
            if isinstance(data, list) and data and all(isinstance(p, Photo) for p in data):
                return self.summarize_photos(data)
        return self._to_data(data)

    def __call__(self, data: Any) -> str:
        """Format and serialize response data."""
        data = self.format(data)
        try:
            return yaml.safe_dump(
                data, sort_keys=False, default_flow_style=False, allow_unicode=True
            )
        except yaml.YAMLError as e:
            logger.error(f"YAML serialization failed, falling back to JSON: {e}")
            return json.dumps(data, indent=2, ensure_ascii=False, default=str)
