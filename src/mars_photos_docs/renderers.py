"""Renderer adapters that turn the OpenAPI description into HTML pages.

Each adapter targets one third-party renderer (Redoc, Swagger UI, RapiDoc).
The generated page loads the renderer bundle from its CDN, or from a copy
downloaded into the site when ``self_host`` is set, and points it at the
published spec file or at an inline copy of the spec.
"""

import html
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

import aiofiles
import httpx

from .config import RendererConfig

logger = logging.getLogger(__name__)


class RendererError(RuntimeError):
    """Raised when a renderer's bundle cannot be produced."""


@dataclass
class RenderedPage:
    """A renderer's output: one HTML page plus the assets it references."""

    renderer: str
    filename: str
    html: str
    # url -> path relative to the output directory
    assets: Dict[str, str] = field(default_factory=dict)


def _script_json(value: Any) -> str:
    """Serialize a value for inclusion inside a <script> element."""
    return json.dumps(value, ensure_ascii=False).replace("</", "<\\/")


class Renderer:
    """Base class for documentation renderer adapters."""

    name = ""
    display_name = ""
    script_url = ""
    stylesheet_url: Optional[str] = None

    def __init__(self, config: RendererConfig):
        self.config = config

    @property
    def filename(self) -> str:
        return self.config.output_filename

    def bundle_urls(self) -> List[str]:
        """URLs of the files the page needs from the renderer's distribution."""
        urls = [self.config.script_url or self.script_url]
        if self.stylesheet_url:
            urls.append(self.stylesheet_url)
        return urls

    def asset_path(self, url: str) -> str:
        """Location of a self-hosted bundle file, relative to the output directory."""
        return f"assets/{self.name}/{url.rstrip('/').rsplit('/', 1)[-1]}"

    def _asset_href(self, url: str) -> str:
        return self.asset_path(url) if self.config.self_host else url

    def render(
        self, spec: Dict[str, Any], spec_url: str, site_title: str
    ) -> RenderedPage:
        """Render the page for a spec published at spec_url."""
        title = self.config.title or f"{site_title} ({self.display_name})"
        page = self._render_html(spec, spec_url, html.escape(title))
        assets = {}
        if self.config.self_host:
            assets = {url: self.asset_path(url) for url in self.bundle_urls()}
        logger.debug(f"Rendered {self.name} page {self.filename}")
        return RenderedPage(
            renderer=self.name, filename=self.filename, html=page, assets=assets
        )

    def _render_html(self, spec: Dict[str, Any], spec_url: str, title: str) -> str:
        raise NotImplementedError

    async def fetch_assets(
        self, page: RenderedPage, output_dir: Path, client: httpx.AsyncClient
    ) -> List[str]:
        """Download the page's self-hosted bundle files into output_dir."""
        written = []
        for url, relative in page.assets.items():
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.error(f"Failed to download {self.name} bundle {url}: {e}")
                raise RendererError(
                    f"Could not download {self.name} bundle from {url}: {e}"
                ) from e

            target = output_dir / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(target, "wb") as f:
                await f.write(response.content)
            logger.info(f"Downloaded {url} to {target}")
            written.append(relative)
        return written


class RedocRenderer(Renderer):
    name = "redoc"
    display_name = "Redoc"
    script_url = "https://cdn.redoc.ly/redoc/latest/bundles/redoc.standalone.js"

    def _render_html(self, spec: Dict[str, Any], spec_url: str, title: str) -> str:
        spec_arg = _script_json(spec if self.config.embed_spec else spec_url)
        options = _script_json(self.config.options)
        script = html.escape(self._asset_href(self.bundle_urls()[0]))
        return f"""<!DOCTYPE html>
<html>
  <head>
    <title>{title}</title>
    <meta charset="utf-8"/>
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <style>
      body {{ margin: 0; padding: 0; }}
    </style>
  </head>
  <body>
    <div id="redoc-container"></div>
    <script src="{script}"></script>
    <script>
      Redoc.init({spec_arg}, {options}, document.getElementById("redoc-container"));
    </script>
  </body>
</html>
"""


class SwaggerUIRenderer(Renderer):
    name = "swagger-ui"
    display_name = "Swagger UI"
    script_url = "https://unpkg.com/swagger-ui-dist@5/swagger-ui-bundle.js"
    stylesheet_url = "https://unpkg.com/swagger-ui-dist@5/swagger-ui.css"

    def _render_html(self, spec: Dict[str, Any], spec_url: str, title: str) -> str:
        ui_config: Dict[str, Any] = {"dom_id": "#swagger-ui"}
        if self.config.embed_spec:
            ui_config["spec"] = spec
        else:
            ui_config["url"] = spec_url
        ui_config.update(self.config.options)

        script_src, stylesheet = self.bundle_urls()[:2]
        return f"""<!DOCTYPE html>
<html lang="en">
  <head>
    <title>{title}</title>
    <meta charset="utf-8"/>
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <link rel="stylesheet" href="{html.escape(self._asset_href(stylesheet))}">
  </head>
  <body>
    <div id="swagger-ui"></div>
    <script src="{html.escape(self._asset_href(script_src))}"></script>
    <script>
      window.ui = SwaggerUIBundle({_script_json(ui_config)});
    </script>
  </body>
</html>
"""


class RapiDocRenderer(Renderer):
    name = "rapidoc"
    display_name = "RapiDoc"
    script_url = "https://unpkg.com/rapidoc/dist/rapidoc-min.js"

    def _render_html(self, spec: Dict[str, Any], spec_url: str, title: str) -> str:
        attributes = {"id": "rapidoc"}
        if not self.config.embed_spec:
            attributes["spec-url"] = spec_url
        for key, value in self.config.options.items():
            # RapiDoc options are element attributes, booleans as "true"/"false"
            if isinstance(value, bool):
                value = "true" if value else "false"
            attributes[key.replace("_", "-")] = str(value)
        attrs = " ".join(
            f'{key}="{html.escape(value)}"' for key, value in attributes.items()
        )

        loader = ""
        if self.config.embed_spec:
            loader = f"""
    <script>
      window.addEventListener("DOMContentLoaded", () => {{
        document.getElementById("rapidoc").loadSpec({_script_json(spec)});
      }});
    </script>"""

        script = html.escape(self._asset_href(self.bundle_urls()[0]))
        return f"""<!DOCTYPE html>
<html>
  <head>
    <title>{title}</title>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <script type="module" src="{script}"></script>
  </head>
  <body>
    <rapi-doc {attrs}></rapi-doc>{loader}
  </body>
</html>
"""


RENDERERS: Dict[str, Type[Renderer]] = {
    RedocRenderer.name: RedocRenderer,
    SwaggerUIRenderer.name: SwaggerUIRenderer,
    RapiDocRenderer.name: RapiDocRenderer,
}


def get_renderer(config: RendererConfig) -> Renderer:
    """Create the adapter for a configured renderer."""
    try:
        renderer_cls = RENDERERS[config.name]
    except KeyError:
        raise ValueError(f"Unknown renderer: {config.name}") from None
    return renderer_cls(config)
