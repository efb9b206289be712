"""OpenAPI overlay functionality for modifying OpenAPI specifications.

This package provides utilities for loading, creating, and applying overlays
to OpenAPI specifications. Overlays adjust the published description (titles,
servers, logos, hidden operations) without editing the source document.
"""

from .overlay_manager import OverlayManager, deep_merge, parse_target

__all__ = ["OverlayManager", "deep_merge", "parse_target"]
