"""Static publishing of the documentation site.

The publisher lays out the deployable tree: the spec in YAML and JSON, the
renderer pages and any self-hosted renderer bundles, the generated usage
examples, the supplementary markdown pages, a landing page and, when the
site has a public URL, a sitemap.
"""

import html
import json
import logging
import shutil
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import aiofiles
import httpx
import yaml

from .config import Config, PageSource, is_url
from .renderers import RenderedPage, Renderer
from .spec_loader import iter_operations

logger = logging.getLogger(__name__)

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


@dataclass
class BuildResult:
    """Files produced by a build, relative to the output directory."""

    output_dir: Path
    files: List[str] = field(default_factory=list)

    def add(self, relative: str) -> None:
        if relative not in self.files:
            self.files.append(relative)

    def __contains__(self, relative: str) -> bool:
        return relative in self.files


def extract_title(content: str, filename: str) -> str:
    """Title of a markdown page: its first '# ' heading, else the file name."""
    for line in content.splitlines():
        if line.startswith("# "):
            return line[2:].strip()

    stem = Path(filename).stem
    if stem.lower() == "readme":
        return "Overview"
    title = stem.replace("-", " ").replace("_", " ")
    return " ".join(word.capitalize() for word in title.split())


class Publisher:
    """Writes the static documentation tree."""

    def __init__(self, config: Config, output_dir: Optional[str] = None):
        self.config = config
        self.output_dir = Path(output_dir or config.output.directory)

    async def publish(
        self,
        spec: Dict[str, Any],
        rendered: Sequence[Tuple[Renderer, RenderedPage]],
        examples_markdown: Optional[str] = None,
    ) -> BuildResult:
        """Write the whole site and return the list of produced files."""
        self._prepare_output_dir()
        result = BuildResult(output_dir=self.output_dir)

        await self.write_spec(spec, result)

        if rendered:
            async with httpx.AsyncClient(
                timeout=self.config.api.timeout, follow_redirects=True
            ) as client:
                for renderer, page in rendered:
                    await self._write_text(page.filename, page.html, result)
                    if page.assets:
                        for relative in await renderer.fetch_assets(
                            page, self.output_dir, client
                        ):
                            result.add(relative)

        if examples_markdown is not None:
            await self._write_text(
                self.config.examples.filename, examples_markdown, result
            )

        page_links = []
        for page in self.config.pages:
            title = await self.copy_page(page, result)
            page_links.append((page.output_filename, title))

        index = self.render_index(spec, rendered, page_links, examples_markdown is not None)
        await self._write_text("index.html", index, result)

        if self.config.site.base_url:
            await self._write_text("sitemap.xml", self.render_sitemap(result.files), result)

        logger.info(f"Published {len(result.files)} files to {self.output_dir}")
        return result

    def _input_paths(self) -> List[Path]:
        """Local files the build reads from."""
        locations = [self.config.spec.source, self.config.spec.overlay]
        locations += [page.path for page in self.config.pages]
        locations.append(self.config.config_path)
        return [
            Path(location).resolve()
            for location in locations
            if location and not is_url(location)
        ]

    def _prepare_output_dir(self) -> None:
        target = self.output_dir.resolve()
        if self.config.output.clean and target.exists():
            cwd = Path.cwd().resolve()
            if target == cwd or target in cwd.parents:
                raise ValueError(
                    f"Refusing to clean {target}: it contains the working directory"
                )
            for source in self._input_paths():
                if source == target or target in source.parents:
                    raise ValueError(
                        f"Refusing to clean {target}: it contains build input {source}"
                    )
            logger.info(f"Cleaning output directory {target}")
            shutil.rmtree(target)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    async def _write_text(self, relative: str, content: str, result: BuildResult) -> None:
        path = self.output_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(content)
        logger.debug(f"Wrote {path}")
        result.add(relative)

    async def write_spec(self, spec: Dict[str, Any], result: BuildResult) -> None:
        """Write the spec as YAML and, if enabled, JSON."""
        spec_filename = self.config.output.spec_filename
        await self._write_text(
            spec_filename,
            yaml.safe_dump(spec, sort_keys=False, allow_unicode=True),
            result,
        )
        if self.config.output.write_json:
            json_name = str(Path(spec_filename).with_suffix(".json"))
            await self._write_text(
                json_name,
                json.dumps(spec, indent=2, ensure_ascii=False, default=str) + "\n",
                result,
            )

    async def copy_page(self, page: PageSource, result: BuildResult) -> str:
        """Copy a markdown page into the site and return its title."""
        source = Path(page.path)
        if not source.is_file():
            raise FileNotFoundError(f"Page not found: {page.path}")

        async with aiofiles.open(source, "r", encoding="utf-8") as f:
            content = await f.read()
        await self._write_text(page.output_filename, content, result)
        return page.title or extract_title(content, page.output_filename)

    def render_index(
        self,
        spec: Dict[str, Any],
        rendered: Sequence[Tuple[Renderer, RenderedPage]],
        page_links: List[Tuple[str, str]],
        has_examples: bool,
    ) -> str:
        """Render the landing page."""
        site = self.config.site
        info = spec.get("info") or {}
        esc = html.escape

        renderer_items = "\n".join(
            f'      <li><a href="{esc(page.filename)}">{esc(renderer.display_name)}</a></li>'
            for renderer, page in rendered
        )

        spec_filename = self.config.output.spec_filename
        spec_items = [f'      <li><a href="{esc(spec_filename)}">OpenAPI (YAML)</a></li>']
        if self.config.output.write_json:
            json_name = str(Path(spec_filename).with_suffix(".json"))
            spec_items.append(f'      <li><a href="{esc(json_name)}">OpenAPI (JSON)</a></li>')

        guide_items = []
        if has_examples:
            guide_items.append(
                f'      <li><a href="{esc(self.config.examples.filename)}">Usage examples</a></li>'
            )
        for filename, title in page_links:
            guide_items.append(f'      <li><a href="{esc(filename)}">{esc(title)}</a></li>')

        operation_rows = "\n".join(
            "        <tr>"
            f"<td><code>{esc(method.upper())}</code></td>"
            f"<td><code>{esc(path)}</code></td>"
            f"<td>{esc(operation.get('summary') or '')}</td>"
            "</tr>"
            for path, method, operation in iter_operations(spec)
        )

        return f"""<!DOCTYPE html>
<html lang="en">
  <head>
    <title>{esc(site.title)}</title>
    <meta charset="utf-8"/>
    <meta name="viewport" content="width=device-width, initial-scale=1">
  </head>
  <body>
    <h1>{esc(site.title)}</h1>
    <p>{esc(site.description)}</p>
    <p>API version {esc(str(info.get('version', '')))}</p>
    <h2>Reference</h2>
    <ul>
{renderer_items}
    </ul>
    <h2>Specification</h2>
    <ul>
{chr(10).join(spec_items)}
    </ul>
    <h2>Guides</h2>
    <ul>
{chr(10).join(guide_items)}
    </ul>
    <h2>Endpoints</h2>
    <table>
      <thead>
        <tr><th>Method</th><th>Path</th><th>Summary</th></tr>
      </thead>
      <tbody>
{operation_rows}
      </tbody>
    </table>
  </body>
</html>
"""

    def render_sitemap(self, files: List[str]) -> str:
        """Render sitemap.xml for the HTML and markdown pages."""
        base_url = (self.config.site.base_url or "").rstrip("/")
        ET.register_namespace("", SITEMAP_NS)
        urlset = ET.Element(f"{{{SITEMAP_NS}}}urlset")
        for relative in files:
            if not relative.endswith((".html", ".md")):
                continue
            url = ET.SubElement(urlset, f"{{{SITEMAP_NS}}}url")
            loc = ET.SubElement(url, f"{{{SITEMAP_NS}}}loc")
            loc.text = f"{base_url}/{'' if relative == 'index.html' else relative}"
        return ET.tostring(urlset, encoding="unicode", xml_declaration=True) + "\n"
