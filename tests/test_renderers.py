"""Test the documentation renderer adapters."""

import json

import httpx
import pytest

from mars_photos_docs.config import RendererConfig
from mars_photos_docs.renderers import (
    RapiDocRenderer,
    RedocRenderer,
    RendererError,
    SwaggerUIRenderer,
    get_renderer,
)

SPEC = {
    "openapi": "3.0.3",
    "info": {"title": "Mars Rover Photos API", "version": "1.0.0"},
    "paths": {"/rovers": {"get": {"summary": "List </script> rovers"}}},
}


def test_get_renderer():
    """Adapters are resolved by configured name."""
    assert isinstance(get_renderer(RendererConfig(name="redoc")), RedocRenderer)
    assert isinstance(get_renderer(RendererConfig(name="Swagger-UI")), SwaggerUIRenderer)
    assert isinstance(get_renderer(RendererConfig(name="rapidoc")), RapiDocRenderer)


def test_get_renderer_unknown():
    """Test an unknown renderer name."""
    with pytest.raises(ValueError, match="Unknown renderer"):
        get_renderer(RendererConfig.model_construct(name="mkdocs"))


def test_redoc_references_spec_url():
    """Test Redoc page pointing at the published spec."""
    renderer = get_renderer(RendererConfig(name="redoc", options={"hideDownloadButton": True}))

    page = renderer.render(SPEC, "openapi.yaml", "Mars Rover Photos API")

    assert page.filename == "redoc.html"
    assert page.assets == {}
    assert "<title>Mars Rover Photos API (Redoc)</title>" in page.html
    assert RedocRenderer.script_url in page.html
    assert 'Redoc.init("openapi.yaml", {"hideDownloadButton": true}' in page.html


def test_redoc_embedded_spec_is_escaped():
    """An inline spec cannot close the script element early."""
    renderer = get_renderer(RendererConfig(name="redoc", embed_spec=True))

    page = renderer.render(SPEC, "openapi.yaml", "Docs")

    assert "List <\\/script> rovers" in page.html
    assert "List </script> rovers" not in page.html
    assert '"openapi.yaml"' not in page.html


def test_swagger_ui_page():
    """Test the Swagger UI page and its options."""
    renderer = get_renderer(
        RendererConfig(name="swagger-ui", title="API <explorer>", options={"deepLinking": True})
    )

    page = renderer.render(SPEC, "openapi.yaml", "Docs")

    assert page.filename == "swagger-ui.html"
    assert "<title>API &lt;explorer&gt;</title>" in page.html
    assert SwaggerUIRenderer.stylesheet_url in page.html
    assert SwaggerUIRenderer.script_url in page.html
    config = {"dom_id": "#swagger-ui", "url": "openapi.yaml", "deepLinking": True}
    assert f"SwaggerUIBundle({json.dumps(config)})" in page.html


def test_rapidoc_attributes():
    """RapiDoc options become element attributes."""
    renderer = get_renderer(
        RendererConfig(
            name="rapidoc",
            filename="reference.html",
            options={"theme": "dark", "allow_try": False},
        )
    )

    page = renderer.render(SPEC, "openapi.yaml", "Docs")

    assert page.filename == "reference.html"
    assert (
        '<rapi-doc id="rapidoc" spec-url="openapi.yaml" theme="dark" allow-try="false">'
        in page.html
    )
    assert "loadSpec" not in page.html


def test_rapidoc_embedded_spec():
    """Test RapiDoc loading an inline spec."""
    renderer = get_renderer(RendererConfig(name="rapidoc", embed_spec=True))

    page = renderer.render(SPEC, "openapi.yaml", "Docs")

    assert "spec-url" not in page.html
    assert 'document.getElementById("rapidoc").loadSpec(' in page.html


def test_render_is_deterministic():
    """Same spec and config give the same page."""
    renderer = get_renderer(RendererConfig(name="swagger-ui", embed_spec=True))

    first = renderer.render(SPEC, "openapi.yaml", "Docs")
    second = renderer.render(SPEC, "openapi.yaml", "Docs")

    assert first.html == second.html


def test_self_host_uses_local_assets():
    """Self-hosted pages reference bundles inside the site."""
    renderer = get_renderer(RendererConfig(name="swagger-ui", self_host=True))

    page = renderer.render(SPEC, "openapi.yaml", "Docs")

    assert page.assets == {
        SwaggerUIRenderer.script_url: "assets/swagger-ui/swagger-ui-bundle.js",
        SwaggerUIRenderer.stylesheet_url: "assets/swagger-ui/swagger-ui.css",
    }
    assert 'src="assets/swagger-ui/swagger-ui-bundle.js"' in page.html
    assert 'href="assets/swagger-ui/swagger-ui.css"' in page.html
    assert "unpkg.com" not in page.html


def test_script_url_override():
    """Test overriding the bundle URL."""
    renderer = get_renderer(
        RendererConfig(name="redoc", script_url="https://cdn.example.test/redoc.js")
    )

    page = renderer.render(SPEC, "openapi.yaml", "Docs")

    assert 'src="https://cdn.example.test/redoc.js"' in page.html


@pytest.mark.asyncio
async def test_fetch_assets(tmp_path):
    """Bundles are downloaded into the output directory."""
    renderer = get_renderer(RendererConfig(name="redoc", self_host=True))
    page = renderer.render(SPEC, "openapi.yaml", "Docs")

    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"// redoc"))
    async with httpx.AsyncClient(transport=transport) as client:
        written = await renderer.fetch_assets(page, tmp_path, client)

    assert written == ["assets/redoc/redoc.standalone.js"]
    assert (tmp_path / "assets/redoc/redoc.standalone.js").read_bytes() == b"// redoc"


@pytest.mark.asyncio
async def test_fetch_assets_failure(tmp_path):
    """A failed bundle download raises RendererError."""
    renderer = get_renderer(RendererConfig(name="rapidoc", self_host=True))
    page = renderer.render(SPEC, "openapi.yaml", "Docs")

    transport = httpx.MockTransport(lambda request: httpx.Response(404))
    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(RendererError, match="rapidoc"):
            await renderer.fetch_assets(page, tmp_path, client)
