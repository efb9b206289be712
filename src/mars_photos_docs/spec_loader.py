"""Loads the OpenAPI description that the site is built from.

This module is responsible for reading the specification from disk or
fetching it over HTTP, caching remote copies, applying the configured
overlay and validating the result before any renderer sees it.
"""

import hashlib
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

import aiofiles
import httpx
import yaml
from openapi_spec_validator import validate as validate_openapi
from openapi_spec_validator.validation.exceptions import OpenAPIValidationError

from .config import Config, is_url
from .openapi_overlays import OverlayManager

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


class SpecValidationError(ValueError):
    """Raised when the loaded document is not a valid OpenAPI description."""


def parse_spec(content: str, source: str) -> Dict[str, Any]:
    """Parse YAML or JSON text into an OpenAPI 3.x document."""
    try:
        spec = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Could not parse spec from {source}: {e}") from e

    if not isinstance(spec, dict):
        raise ValueError(f"Spec from {source} is not a mapping")
    if spec.get("swagger"):
        raise ValueError(
            f"Swagger {spec['swagger']} document at {source} is not supported, "
            "convert it to OpenAPI 3.x first"
        )
    version = str(spec.get("openapi", ""))
    if not version.startswith("3."):
        raise ValueError(f"Spec from {source} has no OpenAPI 3.x version: {version!r}")
    return spec


def iter_operations(spec: Dict[str, Any]) -> Iterator[Tuple[str, str, Dict[str, Any]]]:
    """Yield (path, method, operation) for every operation in document order."""
    for path, path_item in (spec.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        for method, operation in path_item.items():
            if method.lower() in HTTP_METHODS and isinstance(operation, dict):
                yield path, method.lower(), operation


def resolve_ref(spec: Dict[str, Any], obj: Any) -> Any:
    """Follow a local '$ref' (e.g. '#/components/parameters/Rover') if present."""
    seen = set()
    while isinstance(obj, dict) and isinstance(obj.get("$ref"), str):
        ref = obj["$ref"]
        if not ref.startswith("#/") or ref in seen:
            return obj
        seen.add(ref)
        node: Any = spec
        for part in ref[2:].split("/"):
            part = part.replace("~1", "/").replace("~0", "~")
            if not isinstance(node, dict) or part not in node:
                logger.warning(f"Unresolvable reference {ref}")
                return obj
            node = node[part]
        obj = node
    return obj


def operation_parameters(
    spec: Dict[str, Any], path: str, operation: Dict[str, Any]
) -> list:
    """Return the resolved parameters of an operation, path-level ones included."""
    path_item = (spec.get("paths") or {}).get(path) or {}
    merged: Dict[Tuple[str, str], Dict[str, Any]] = {}
    for raw in list(path_item.get("parameters") or []) + list(
        operation.get("parameters") or []
    ):
        param = resolve_ref(spec, raw)
        if isinstance(param, dict) and "name" in param:
            merged[(param["name"], param.get("in", ""))] = param
    return list(merged.values())


class SpecLoader:
    """Reads, caches, overlays and validates the OpenAPI description."""

    def __init__(self, config: Config, cache_dir: Optional[str] = None):
        self.config = config
        self.cache_dir = Path(cache_dir or config.cache_dir)
        self.overlay_manager = OverlayManager()

    async def load(self) -> Dict[str, Any]:
        """Load the configured spec, apply its overlay and validate it."""
        source = self.config.spec.source
        logger.info(f"Loading spec from {source}")

        if is_url(source):
            spec = await self._fetch_and_cache_spec(source)
        else:
            spec = await self._read_spec_file(source)

        if self.config.spec.overlay:
            overlay = await self.overlay_manager.load_overlay(self.config.spec.overlay)
            if overlay is None:
                raise FileNotFoundError(
                    f"Overlay file not found: {self.config.spec.overlay}"
                )
            spec = self.overlay_manager.apply(spec, source, overlay)
            logger.info(f"Applied overlay {self.config.spec.overlay}")

        if self.config.spec.validate_spec:
            self.validate(spec, source)

        return spec

    def validate(self, spec: Dict[str, Any], source: str = "spec") -> None:
        """Validate a document with openapi-spec-validator."""
        try:
            validate_openapi(spec)
        except OpenAPIValidationError as e:
            logger.error(f"Spec from {source} failed validation: {e.message}")
            raise SpecValidationError(
                f"Invalid OpenAPI document {source}: {e.message}"
            ) from e
        logger.info(f"Spec from {source} is a valid OpenAPI {spec.get('openapi')} document")

    async def _read_spec_file(self, source: str) -> Dict[str, Any]:
        path = Path(source)
        if not path.is_file():
            raise FileNotFoundError(f"Spec file not found: {source}")

        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            content = await f.read()
        return parse_spec(content, source)

    async def _fetch_and_cache_spec(self, url: str) -> Dict[str, Any]:
        """Fetch a spec from a URL and cache it, falling back to the cache."""
        spec_key = self._spec_key(url)
        try:
            async with httpx.AsyncClient(
                timeout=self.config.api.timeout, follow_redirects=True
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch spec from {url}: {e}")
            cached = self.load_cached_spec(spec_key)
            if cached is None:
                raise
            return cached

        spec = parse_spec(response.text, url)
        self.save_cached_spec(spec_key, spec)
        logger.info(f"Fetched spec from {url}")
        return spec

    @staticmethod
    def _spec_key(url: str) -> str:
        digest = hashlib.sha256(url.encode("utf-8")).hexdigest()[:12]
        return f"spec-{digest}"

    def get_cached_spec_path(self, spec_key: str) -> Path:
        """Get the path to a cached specification file."""
        return self.cache_dir / f"{spec_key}.yaml"

    def save_cached_spec(self, spec_key: str, spec: Dict[str, Any]) -> None:
        """Save a fetched specification to the cache."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = self.get_cached_spec_path(spec_key)
        with open(path, "w") as f:
            yaml.dump(spec, f, sort_keys=False)
        logger.info(f"Cached spec {spec_key} to {path}")

    def load_cached_spec(self, spec_key: str) -> Optional[Dict[str, Any]]:
        """Load a cached specification."""
        path = self.get_cached_spec_path(spec_key)
        if path.exists():
            logger.warning(f"Using cached spec for {spec_key} from {path}")
            with open(path, "r") as f:
                return yaml.safe_load(f)
        logger.error(f"No cached spec found for {spec_key}")
        return None
