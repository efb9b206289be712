"""API key handling for the Mars Rover Photos API."""

import logging
import os
from typing import Dict

from .config import Config

logger = logging.getLogger(__name__)

DEMO_KEY = "DEMO_KEY"
DEMO_HOURLY_LIMIT = 50
PERSONAL_HOURLY_LIMIT = 1000


class ApiKeyManager:
    """Supplies the api_key query parameter for API requests."""

    def __init__(self, config: Config):
        """Initialize with configuration."""
        self.config = config
        self.api_key = os.getenv(config.api.api_key_env)

        # Log key availability (without exposing the value)
        logger.info(f"ApiKeyManager initialized:")
        logger.info(f"  - {config.api.api_key_env} available: {bool(self.api_key)}")
        if self.api_key:
            logger.info(f"  - key length: {len(self.api_key)}")
        else:
            logger.warning(
                f"{config.api.api_key_env} is not set, using the shared "
                f"{DEMO_KEY} ({DEMO_HOURLY_LIMIT} requests/hour)"
            )

    @property
    def key(self) -> str:
        """The key to send; DEMO_KEY when none is configured."""
        return self.api_key or DEMO_KEY

    @property
    def uses_demo_key(self) -> bool:
        return not self.api_key or self.api_key == DEMO_KEY

    @property
    def hourly_limit(self) -> int:
        """Requests per hour the API allows this key."""
        return DEMO_HOURLY_LIMIT if self.uses_demo_key else PERSONAL_HOURLY_LIMIT

    def get_auth_params(self) -> Dict[str, str]:
        """Get the query parameters that authenticate a request."""
        return {"api_key": self.key}
