"""Configuration management for the Mars Rover Photos docs builder.

This module handles loading and validating the build configuration, which
names the OpenAPI description to publish, the renderers to run against it,
the supplementary markdown pages to copy, and where the static site is
written. Relative paths are resolved against the directory holding the
configuration file.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

RENDERER_NAMES = ("redoc", "swagger-ui", "rapidoc")
SNIPPET_LANGUAGES = ("curl", "javascript", "python")


def is_url(location: str) -> bool:
    """Return True when a spec/page location is an http(s) URL."""
    return location.startswith("http://") or location.startswith("https://")


class SpecSource(BaseModel):
    """Where the OpenAPI description comes from (path or URL + optional overlay)."""

    source: str = Field(..., description="Path or URL of the OpenAPI document")
    overlay: Optional[str] = Field(
        default=None, description="Optional path to an overlay file"
    )
    validate_spec: bool = Field(
        default=True,
        alias="validate",
        description="Validate the document with openapi-spec-validator",
    )

    model_config = {"populate_by_name": True}


class RendererConfig(BaseModel):
    """Configuration for a single documentation renderer."""

    name: str = Field(..., description="Renderer name: redoc, swagger-ui or rapidoc")
    enabled: bool = Field(default=True)
    filename: Optional[str] = Field(
        default=None, description="Output page name (defaults to <name>.html)"
    )
    title: Optional[str] = Field(default=None, description="Page title override")
    script_url: Optional[str] = Field(
        default=None, description="Override for the renderer bundle URL"
    )
    embed_spec: bool = Field(
        default=False, description="Inline the spec into the page"
    )
    self_host: bool = Field(
        default=False, description="Download the renderer bundle into the site"
    )
    options: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def _known_renderer(cls, value: str) -> str:
        name = value.strip().lower()
        if name not in RENDERER_NAMES:
            raise ValueError(
                f"Unknown renderer '{value}', expected one of {', '.join(RENDERER_NAMES)}"
            )
        return name

    @property
    def output_filename(self) -> str:
        return self.filename or f"{self.name}.html"


class PageSource(BaseModel):
    """A supplementary markdown page copied into the site."""

    path: str = Field(..., description="Path to the markdown file")
    title: Optional[str] = Field(default=None)
    target: Optional[str] = Field(
        default=None, description="File name inside the output directory"
    )

    @property
    def output_filename(self) -> str:
        return self.target or Path(self.path).name


class ExamplesConfig(BaseModel):
    """Usage example generation."""

    enabled: bool = Field(default=True)
    languages: List[str] = Field(default_factory=lambda: list(SNIPPET_LANGUAGES))
    filename: str = Field(default="examples.md")
    api_key: str = Field(default="DEMO_KEY", description="Key shown in snippets")

    @field_validator("languages")
    @classmethod
    def _known_languages(cls, value: List[str]) -> List[str]:
        languages = [lang.strip().lower() for lang in value]
        for lang in languages:
            if lang not in SNIPPET_LANGUAGES:
                raise ValueError(
                    f"Unknown snippet language '{lang}', expected one of "
                    f"{', '.join(SNIPPET_LANGUAGES)}"
                )
        return languages


class OutputConfig(BaseModel):
    """Output configuration."""

    directory: str = Field(default="site")
    spec_filename: str = Field(default="openapi.yaml")
    write_json: bool = Field(default=True)
    clean: bool = Field(default=True)

    @model_validator(mode="after")
    def _distinct_spec_files(self) -> "OutputConfig":
        if self.write_json and Path(self.spec_filename).suffix.lower() == ".json":
            raise ValueError(
                f"spec_filename {self.spec_filename!r} would be overwritten by the "
                "JSON copy, use a .yaml name or set write_json: false"
            )
        return self


class SiteConfig(BaseModel):
    """Landing page and sitemap settings."""

    title: str = Field(default="Mars Rover Photos API")
    description: str = Field(
        default="Image data gathered by NASA's Curiosity, Opportunity, "
        "Spirit and Perseverance rovers on Mars."
    )
    base_url: Optional[str] = Field(
        default=None, description="Public URL of the site; enables sitemap.xml"
    )


class ApiConfig(BaseModel):
    """Settings for calling the documented API."""

    base_url: str = Field(default="https://api.nasa.gov/mars-photos/api/v1")
    api_key_env: str = Field(default="NASA_API_KEY")
    timeout: float = Field(default=30.0)


class Config(BaseModel):
    """Main configuration class."""

    config_path: Optional[str] = Field(
        default=None, description="Path to the loaded config file"
    )
    spec: SpecSource
    renderers: List[RendererConfig] = Field(
        default_factory=lambda: [RendererConfig(name=name) for name in RENDERER_NAMES]
    )
    pages: List[PageSource] = Field(default_factory=list)
    examples: ExamplesConfig = Field(default_factory=ExamplesConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    site: SiteConfig = Field(default_factory=SiteConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    cache_dir: str = Field(default="cache/specs")

    @classmethod
    def load(cls, config_path: str) -> "Config":
        """Load configuration from a YAML file."""
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path, "r") as f:
            config_data = yaml.safe_load(f) or {}

        if not isinstance(config_data, dict):
            raise ValueError(f"Invalid configuration in {config_path}")

        spec_data = config_data.get("spec")
        # Allow the short form `spec: openapi/mars-photos.yaml`
        if isinstance(spec_data, str):
            config_data["spec"] = {"source": spec_data}
        elif not isinstance(spec_data, dict) or "source" not in spec_data:
            raise ValueError(f"Invalid spec entry in {config_path}: {spec_data}")

        renderers = config_data.get("renderers")
        if renderers is not None:
            if not isinstance(renderers, list):
                raise ValueError(f"Invalid renderers list: {renderers}")
            # Bare names are shorthand for an enabled renderer with defaults
            config_data["renderers"] = [
                {"name": item} if isinstance(item, str) else item
                for item in renderers
            ]

        pages = config_data.get("pages")
        if pages is not None:
            if not isinstance(pages, list):
                raise ValueError(f"Invalid pages list: {pages}")
            config_data["pages"] = [
                {"path": item} if isinstance(item, str) else item for item in pages
            ]

        config = cls(**config_data)
        config.config_path = config_path
        config._resolve_paths(path.parent.resolve())
        return config

    def _resolve_paths(self, base_dir: Path) -> None:
        """Make config-relative paths usable from any working directory."""

        def resolve(location: str) -> str:
            if is_url(location) or Path(location).is_absolute():
                return location
            return os.path.normpath(base_dir / location)

        self.spec.source = resolve(self.spec.source)
        if self.spec.overlay:
            self.spec.overlay = resolve(self.spec.overlay)
        for page in self.pages:
            page.path = resolve(page.path)
        self.output.directory = resolve(self.output.directory)
        self.cache_dir = resolve(self.cache_dir)

    def save(self, config_path: str) -> None:
        """Save configuration to a YAML file."""
        path = Path(config_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(by_alias=True, exclude={"config_path"})

        with open(path, "w") as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)

    def get_enabled_renderers(self) -> List[RendererConfig]:
        """Get the renderers that take part in the build."""
        return [renderer for renderer in self.renderers if renderer.enabled]

    def get_renderer_config(self, name: str) -> Optional[RendererConfig]:
        """Get configuration for a specific renderer."""
        for renderer in self.renderers:
            if renderer.name == name:
                return renderer
        return None
