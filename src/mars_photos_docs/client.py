"""Async client for the documented Mars Rover Photos endpoints."""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Union

import httpx

from .auth import ApiKeyManager
from .config import Config
from .models import Manifest, Photo, Rover

logger = logging.getLogger(__name__)


class MarsPhotosClient:
    """HTTP client wrapper that adds the api_key and unwraps response envelopes."""

    def __init__(
        self,
        config: Config,
        auth_manager: Optional[ApiKeyManager] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.auth_manager = auth_manager or ApiKeyManager(config)
        self.base_url = config.api.base_url.rstrip("/")
        self.rate_limit_remaining: Optional[int] = None
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=config.api.timeout,
            transport=transport,
            headers={"User-Agent": "mars-photos-docs/0.1.0"},
        )

    async def request(
        self, path: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """GET a path with the api_key added and return the JSON body."""
        query = {k: v for k, v in (params or {}).items() if v is not None}
        query.update(self.auth_manager.get_auth_params())

        logger.debug(f"GET {path} params={sorted(k for k in query if k != 'api_key')}")
        response = await self._client.get(path, params=query)
        logger.debug(f"Response status: {response.status_code}")

        remaining = response.headers.get("X-RateLimit-Remaining")
        if remaining is not None and remaining.isdigit():
            self.rate_limit_remaining = int(remaining)
            logger.debug(
                f"Rate limit remaining: {remaining}/{self.auth_manager.hourly_limit}"
            )

        if response.status_code >= 400:
            logger.error(f"Request failed with status {response.status_code}")
            logger.error(f"Response body: {response.text}")
        response.raise_for_status()
        return response.json()

    async def get_rovers(self) -> List[Rover]:
        """GET /rovers"""
        data = await self.request("/rovers")
        return [Rover.model_validate(item) for item in data.get("rovers", [])]

    async def get_photos(
        self,
        rover: str,
        sol: Optional[int] = None,
        earth_date: Optional[Union[date, str]] = None,
        camera: Optional[str] = None,
        page: Optional[int] = None,
    ) -> List[Photo]:
        """GET /rovers/{rover}/photos by sol or Earth date.

        A sol or date without photos gives an empty list.
        """
        if sol is not None and earth_date is not None:
            raise ValueError("Query by sol or by earth_date, not both")
        if isinstance(earth_date, date):
            earth_date = earth_date.isoformat()

        params = {
            "sol": sol,
            "earth_date": earth_date,
            "camera": camera.lower() if camera else None,
            "page": page,
        }
        data = await self.request(f"/rovers/{rover.lower()}/photos", params)
        return [Photo.model_validate(item) for item in data.get("photos", [])]

    async def get_latest_photos(
        self, rover: str, camera: Optional[str] = None
    ) -> List[Photo]:
        """GET /rovers/{rover}/latest_photos"""
        params = {"camera": camera.lower() if camera else None}
        data = await self.request(f"/rovers/{rover.lower()}/latest_photos", params)
        return [Photo.model_validate(item) for item in data.get("latest_photos", [])]

    async def get_manifest(self, rover: str) -> Manifest:
        """GET /manifests/{rover}"""
        data = await self.request(f"/manifests/{rover.lower()}")
        return Manifest.model_validate(data["photo_manifest"])

    async def get_photo(self, photo_id: int) -> Photo:
        """GET /photos/{id}"""
        data = await self.request(f"/photos/{int(photo_id)}")
        return Photo.model_validate(data["photo"])

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "MarsPhotosClient":
        await self._client.__aenter__()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self._client.__aexit__(*args)
