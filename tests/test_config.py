"""Test configuration loading and validation."""

from pathlib import Path

import pytest

from mars_photos_docs.config import Config, RendererConfig


def test_config_loading():
    """Test loading configuration from YAML file."""
    config = Config.load("config/site.yaml")

    assert config is not None
    assert config.spec.validate_spec is True
    assert [r.name for r in config.renderers] == ["redoc", "swagger-ui", "rapidoc"]
    assert config.api.api_key_env == "NASA_API_KEY"


def test_paths_resolved_against_config_dir():
    """Spec, overlay and page paths are relative to the config file."""
    config = Config.load("config/site.yaml")

    assert Path(config.spec.source).is_absolute()
    assert Path(config.spec.source).exists()
    assert Path(config.spec.overlay).exists()
    assert Path(config.pages[0].path).name == "README.md"
    assert config.output.directory == str(Path("site").resolve())
    assert config.cache_dir == str(Path("cache/specs").resolve())


def test_output_dirs_follow_config_file(tmp_path, monkeypatch):
    """Output and cache directories do not depend on the working directory."""
    project = tmp_path / "project"
    (project / "config").mkdir(parents=True)
    (project / "config" / "site.yaml").write_text(
        "spec: ../api.yaml\noutput:\n  directory: site\n"
    )
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)

    config = Config.load(str(project / "config" / "site.yaml"))

    assert Path(config.output.directory).is_absolute()
    assert config.output.directory == str(project.resolve() / "config" / "site")
    assert config.cache_dir == str(project.resolve() / "config" / "cache" / "specs")
    assert config.spec.source == str(project.resolve() / "api.yaml")


def test_config_missing_file():
    """Test loading a configuration that does not exist."""
    with pytest.raises(FileNotFoundError):
        Config.load("config/does-not-exist.yaml")


def test_config_short_forms(tmp_path):
    """Bare strings are accepted for spec, renderers and pages."""
    config_path = tmp_path / "site.yaml"
    config_path.write_text("spec: api.yaml\nrenderers: [redoc]\npages: [guide.md]\n")

    config = Config.load(str(config_path))

    assert config.spec.source == str(tmp_path.resolve() / "api.yaml")
    assert len(config.renderers) == 1
    assert config.renderers[0].output_filename == "redoc.html"
    assert config.pages[0].output_filename == "guide.md"


def test_config_keeps_spec_urls(tmp_path):
    """URL sources are not treated as paths."""
    config_path = tmp_path / "site.yaml"
    config_path.write_text("spec:\n  source: https://example.test/openapi.yaml\n")

    config = Config.load(str(config_path))

    assert config.spec.source == "https://example.test/openapi.yaml"


def test_config_unknown_renderer(tmp_path):
    """Test an unknown renderer name is rejected."""
    config_path = tmp_path / "site.yaml"
    config_path.write_text("spec: api.yaml\nrenderers: [mkdocs]\n")

    with pytest.raises(ValueError, match="Unknown renderer"):
        Config.load(str(config_path))


def test_config_json_spec_filename(tmp_path):
    """A JSON spec name cannot collide with the JSON copy of the spec."""
    config_path = tmp_path / "site.yaml"
    config_path.write_text("spec: api.yaml\noutput:\n  spec_filename: openapi.json\n")

    with pytest.raises(ValueError, match="would be overwritten"):
        Config.load(str(config_path))

    config_path.write_text(
        "spec: api.yaml\noutput:\n  spec_filename: openapi.json\n  write_json: false\n"
    )
    assert Config.load(str(config_path)).output.spec_filename == "openapi.json"


def test_config_missing_spec(tmp_path):
    """Test a configuration without a spec entry."""
    config_path = tmp_path / "site.yaml"
    config_path.write_text("renderers: [redoc]\n")

    with pytest.raises(ValueError, match="Invalid spec entry"):
        Config.load(str(config_path))


def test_config_unknown_snippet_language(tmp_path):
    """Test an unsupported example language is rejected."""
    config_path = tmp_path / "site.yaml"
    config_path.write_text("spec: api.yaml\nexamples:\n  languages: [cobol]\n")

    with pytest.raises(ValueError, match="Unknown snippet language"):
        Config.load(str(config_path))


def test_enabled_renderers():
    """Disabled renderers are left out of the build."""
    config = Config(
        spec={"source": "api.yaml"},
        renderers=[
            RendererConfig(name="redoc"),
            RendererConfig(name="rapidoc", enabled=False),
        ],
    )

    assert [r.name for r in config.get_enabled_renderers()] == ["redoc"]
    assert config.get_renderer_config("rapidoc").enabled is False
    assert config.get_renderer_config("swagger-ui") is None


def test_default_renderers():
    """All three renderers are enabled when none are configured."""
    config = Config(spec={"source": "api.yaml"})

    assert [r.name for r in config.get_enabled_renderers()] == [
        "redoc",
        "swagger-ui",
        "rapidoc",
    ]


def test_config_save_load_roundtrip(tmp_path):
    """Test saving and loading configuration."""
    config = Config.load("config/site.yaml")

    # Save to temporary file
    temp_config_path = tmp_path / "test_config.yaml"
    config.save(str(temp_config_path))

    # Load from temporary file
    loaded_config = Config.load(str(temp_config_path))

    # Compare
    assert loaded_config.spec.source == config.spec.source
    assert loaded_config.spec.validate_spec == config.spec.validate_spec
    assert [r.name for r in loaded_config.renderers] == [
        r.name for r in config.renderers
    ]
    assert loaded_config.site.title == config.site.title
