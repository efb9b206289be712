"""Package initialization for mars_photos_docs."""

__version__ = "0.1.0"
__description__ = "Static documentation builder for NASA's Mars Rover Photos API"

from .auth import ApiKeyManager
from .client import MarsPhotosClient
from .config import Config
from .publisher import BuildResult, Publisher
from .spec_loader import SpecLoader

__all__ = [
    "Config",
    "ApiKeyManager",
    "MarsPhotosClient",
    "SpecLoader",
    "Publisher",
    "BuildResult",
]
