#!/usr/bin/env python3
"""
Example script demonstrating the Mars Rover Photos docs builder.

This script shows how to:
1. Load configuration
2. Load the OpenAPI description with its overlay
3. Render usage examples
4. Build the static site
5. Query the documented API (needs network access)
"""

import asyncio
import sys

import httpx

from mars_photos_docs.client import MarsPhotosClient
from mars_photos_docs.config import Config
from mars_photos_docs.main import DocsSiteBuilder
from mars_photos_docs.snippets import SnippetGenerator
from mars_photos_docs.spec_loader import SpecLoader, iter_operations


async def main() -> None:
    """Run the example."""
    print("Mars Rover Photos docs example")
    print("=" * 40)

    config = Config.load("config/site.yaml")
    print(f"\nSpec source: {config.spec.source}")
    print(f"Renderers:   {', '.join(r.name for r in config.get_enabled_renderers())}")

    spec = await SpecLoader(config).load()
    print(f"\n{spec['info']['title']} {spec['info']['version']}")
    for path, method, operation in iter_operations(spec):
        print(f"   {method.upper():6} {path:32} {operation.get('summary', '')}")

    generator = SnippetGenerator(spec, config.examples)
    path = "/rovers/{rover}/photos"
    print("\ncurl example:")
    print(generator.snippet("curl", "get", path, spec["paths"][path]["get"]))

    result = await DocsSiteBuilder(config, "site-demo").build()
    print(f"\nBuilt {len(result.files)} files in {result.output_dir}")

    if "--online" not in sys.argv:
        print("\nPass --online to query the API as well.")
        return

    async with MarsPhotosClient(config) as client:
        try:
            manifest = await client.get_manifest("curiosity")
            photos = await client.get_photos("curiosity", sol=1000, camera="fhaz")
        except httpx.HTTPError as e:
            print(f"API request failed: {e}")
            return
    print(f"\n{manifest.name}: {manifest.total_photos} photos up to sol {manifest.max_sol}")
    print(f"Sol 1000 FHAZ photos: {len(photos)}")


if __name__ == "__main__":
    asyncio.run(main())
