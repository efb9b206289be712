"""Test fixtures and configuration."""

import os
import tempfile
from pathlib import Path

import pytest

from mars_photos_docs.config import Config


@pytest.fixture(scope="session", autouse=True)
def test_environment():
    """Set up test environment."""
    # Ensure we're in the right directory
    original_cwd = os.getcwd()
    repo_root = Path(__file__).parent.parent
    os.chdir(repo_root)

    yield

    # Cleanup
    os.chdir(original_cwd)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config():
    """Load the repository configuration."""
    return Config.load("config/site.yaml")


@pytest.fixture
def sample_photo():
    """A photo record as returned by the API."""
    return {
        "id": 102693,
        "sol": 1000,
        "camera": {
            "id": 20,
            "name": "FHAZ",
            "rover_id": 5,
            "full_name": "Front Hazard Avoidance Camera",
        },
        "img_src": "http://mars.jpl.nasa.gov/msl-raw-images/proj/msl/redops/ods/surface/sol/01000/opgs/edr/fcam/FLB_486265257EDR_F0481570FHAZ00323M_.JPG",
        "earth_date": "2015-05-30",
        "rover": {
            "id": 5,
            "name": "Curiosity",
            "landing_date": "2012-08-06",
            "launch_date": "2011-11-26",
            "status": "active",
        },
    }


@pytest.fixture
def sample_manifest():
    """A trimmed photo_manifest payload."""
    return {
        "name": "Spirit",
        "landing_date": "2004-01-04",
        "launch_date": "2003-06-10",
        "status": "complete",
        "max_sol": 2208,
        "max_date": "2010-03-21",
        "total_photos": 124550,
        "photos": [
            {
                "sol": 1,
                "earth_date": "2004-01-05",
                "total_photos": 77,
                "cameras": ["ENTRY", "FHAZ", "NAVCAM", "PANCAM", "RHAZ"],
            },
            {
                "sol": 2,
                "earth_date": "2004-01-06",
                "total_photos": 125,
                "cameras": ["FHAZ", "NAVCAM", "PANCAM"],
            },
        ],
    }


@pytest.fixture
def mock_env_vars():
    """Mock environment variables for testing."""
    return {"NASA_API_KEY": "test_personal_key"}
