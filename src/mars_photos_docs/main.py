"""Main entry point for the Mars Rover Photos docs builder."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import click

from .client import MarsPhotosClient
from .config import Config
from .publisher import BuildResult, Publisher
from .renderers import get_renderer
from .response_formatter import ResponseFormatter
from .snippets import SnippetGenerator
from .spec_loader import SpecLoader

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "config/site.yaml"


class DocsSiteBuilder:
    """Runs the spec loader, the renderers and the publisher, in that order."""

    def __init__(self, config: Config, output_dir: Optional[str] = None):
        """Initialize the builder with configuration."""
        self.config = config
        self.spec_loader = SpecLoader(config)
        self.publisher = Publisher(config, output_dir)

    async def build(self) -> BuildResult:
        """Build the static site once."""
        spec = await self.spec_loader.load()

        spec_url = self.config.output.spec_filename
        rendered = []
        for renderer_config in self.config.get_enabled_renderers():
            renderer = get_renderer(renderer_config)
            rendered.append((renderer, renderer.render(spec, spec_url, self.config.site.title)))
        logger.info(f"Rendered {len(rendered)} documentation pages")

        examples = None
        if self.config.examples.enabled:
            examples = SnippetGenerator(spec, self.config.examples).render_markdown()

        return await self.publisher.publish(spec, rendered, examples)


def _run_api_call(
    ctx: click.Context,
    call: Callable[[MarsPhotosClient], Awaitable[Any]],
    summary: bool,
) -> None:
    config = Config.load(ctx.obj["config_path"])
    formatter = ResponseFormatter(summary=summary)

    async def _main() -> Any:
        async with MarsPhotosClient(config) as client:
            return await call(client)

    click.echo(formatter(asyncio.run(_main())), nl=False)


@click.group()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Configuration file path")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config: str, verbose: bool) -> None:
    """Build and browse the Mars Rover Photos API documentation."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config


@main.command()
@click.option("--output", "-o", default=None, help="Output directory override")
@click.pass_context
def build(ctx: click.Context, output: Optional[str]) -> None:
    """Build the static documentation site."""
    config = Config.load(ctx.obj["config_path"])
    builder = DocsSiteBuilder(config, output)
    result = asyncio.run(builder.build())
    for relative in result.files:
        click.echo(f"  {relative}")
    click.echo(f"Built {len(result.files)} files in {result.output_dir}")


@main.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Load and validate the OpenAPI description without building."""
    config = Config.load(ctx.obj["config_path"])
    spec = asyncio.run(SpecLoader(config).load())
    info = spec.get("info") or {}
    click.echo(
        f"{info.get('title', 'Spec')} {info.get('version', '')} is a valid "
        f"OpenAPI {spec.get('openapi')} document"
    )


@main.command()
@click.argument("path")
@click.option("--title", default="Mars Rover Photos API", help="Documentation title")
@click.option(
    "--server-url",
    default="https://api.nasa.gov/mars-photos/api/v1",
    help="Server URL shown in the rendered pages",
)
def template(path: str, title: str, server_url: str) -> None:
    """Write a starter overlay file."""
    from .openapi_overlays import OverlayManager

    asyncio.run(OverlayManager().create_overlay_template(path, title, server_url))
    click.echo(f"Wrote overlay template to {path}")


@main.command()
@click.pass_context
def rovers(ctx: click.Context) -> None:
    """List rovers."""
    _run_api_call(ctx, lambda client: client.get_rovers(), summary=False)


@main.command()
@click.argument("rover")
@click.option("--sol", type=int, default=None, help="Martian sol")
@click.option("--earth-date", default=None, help="Earth date (YYYY-MM-DD)")
@click.option("--camera", default=None, help="Camera abbreviation, e.g. NAVCAM")
@click.option("--page", type=int, default=None, help="Result page (25 per page)")
@click.option("--full", is_flag=True, help="Print complete photo records")
@click.pass_context
def photos(
    ctx: click.Context,
    rover: str,
    sol: Optional[int],
    earth_date: Optional[str],
    camera: Optional[str],
    page: Optional[int],
    full: bool,
) -> None:
    """Query a rover's photos by sol or Earth date."""
    if (sol is None) == (earth_date is None):
        raise click.UsageError("Pass exactly one of --sol or --earth-date")
    _run_api_call(
        ctx,
        lambda client: client.get_photos(
            rover, sol=sol, earth_date=earth_date, camera=camera, page=page
        ),
        summary=not full,
    )


@main.command()
@click.argument("rover")
@click.option("--camera", default=None, help="Camera abbreviation, e.g. NAVCAM")
@click.option("--full", is_flag=True, help="Print complete photo records")
@click.pass_context
def latest(ctx: click.Context, rover: str, camera: Optional[str], full: bool) -> None:
    """Photos from a rover's most recent sol."""
    _run_api_call(
        ctx, lambda client: client.get_latest_photos(rover, camera=camera), summary=not full
    )


@main.command()
@click.argument("rover")
@click.option("--full", is_flag=True, help="Include the per-sol entries")
@click.pass_context
def manifest(ctx: click.Context, rover: str, full: bool) -> None:
    """Mission manifest of a rover."""
    _run_api_call(ctx, lambda client: client.get_manifest(rover), summary=not full)


@main.command()
@click.argument("photo_id", type=int)
@click.pass_context
def photo(ctx: click.Context, photo_id: int) -> None:
    """A single photo by id."""
    _run_api_call(ctx, lambda client: client.get_photo(photo_id), summary=False)


if __name__ == "__main__":
    main()
