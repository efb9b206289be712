"""OpenAPI overlay management functionality."""

import collections.abc
import copy
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiofiles
import yaml

logger = logging.getLogger(__name__)

WILDCARD = "*"

_SEGMENT_RE = re.compile(
    r"""\.(?P<dot>[^.\[\]]+)            # .key or .*
      | \[\s*'(?P<single>[^']*)'\s*\]   # ['key']
      | \[\s*"(?P<double>[^"]*)"\s*\]   # ["key"]
      | \[\s*(?P<index>\d+|\*)\s*\]     # [0] or [*]
    """,
    re.VERBOSE,
)

Segment = Union[str, int]


def deep_merge(d: Dict[str, Any], u: collections.abc.Mapping) -> Dict[str, Any]:
    """
    Merge two dictionaries recursively.

    :param d: The dictionary to merge into.
    :param u: The dictionary to merge from.
    :return: The merged dictionary.
    """
    for k, v in u.items():
        if isinstance(v, collections.abc.Mapping) and isinstance(d.get(k), dict):
            d[k] = deep_merge(d[k], v)
        else:
            d[k] = copy.deepcopy(v)
    return d


def parse_target(target: str) -> List[Segment]:
    """Split a JSONPath-style overlay target into key/index segments.

    Supports ``$``, dotted keys, bracket-quoted keys (``$.paths['/rovers']``),
    list indexes and the ``*`` wildcard.
    """
    target = target.strip()
    if not target.startswith("$"):
        raise ValueError(f"Overlay target must start with '$': {target}")

    segments: List[Segment] = []
    pos = 1
    while pos < len(target):
        match = _SEGMENT_RE.match(target, pos)
        if not match:
            raise ValueError(f"Unsupported overlay target syntax: {target}")
        if match.group("dot") is not None:
            segments.append(match.group("dot"))
        elif match.group("single") is not None:
            segments.append(match.group("single"))
        elif match.group("double") is not None:
            segments.append(match.group("double"))
        else:
            index = match.group("index")
            segments.append(WILDCARD if index == WILDCARD else int(index))
        pos = match.end()
    return segments


class OverlayManager:
    """Manages OpenAPI overlay loading, creation, and application."""

    def __init__(self) -> None:
        """Initialize the overlay manager."""
        self.overlays_cache: Dict[str, Dict[str, Any]] = {}

    async def load_overlay(self, overlay_path: str) -> Optional[Dict[str, Any]]:
        """Load overlay file from disk.

        Args:
            overlay_path: Path to the overlay file

        Returns:
            Loaded overlay dictionary or None if file doesn't exist
        """
        path = Path(overlay_path)
        if not path.exists():
            logger.warning(f"Overlay file not found: {overlay_path}")
            return None

        async with aiofiles.open(path, "r") as f:
            content = await f.read()
            overlay = yaml.safe_load(content) or {}

        if not isinstance(overlay, dict):
            raise ValueError(f"Invalid overlay document: {overlay_path}")

        cache_key = str(path)
        self.overlays_cache[cache_key] = overlay
        return overlay

    async def create_overlay_template(
        self, overlay_path: str, title: str, server_url: str
    ) -> None:
        """Create a basic overlay template for the published spec.

        Args:
            overlay_path: Path where the overlay file should be created
            title: Title the published documentation should carry
            server_url: Server URL shown in the rendered pages
        """
        path = Path(overlay_path)

        overlay = {
            "overlay": "1.0.0",
            "info": {
                "title": f"Overlay for {title}",
                "version": "1.0.0",
                "description": f"Publishing adjustments for {title}",
            },
            "actions": [
                {"target": "$.info.title", "update": title},
                {
                    "target": "$.servers",
                    "update": [
                        {"url": server_url, "description": "NASA API gateway"}
                    ],
                },
                {
                    "target": "$.info",
                    "update": {"x-logo": {"url": "", "altText": title}},
                },
            ],
        }

        path.parent.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(path, "w") as f:
            await f.write(yaml.dump(overlay, default_flow_style=False, sort_keys=False))

    def apply(
        self, spec: Dict[str, Any], source_name: str, overlay: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Apply overlay actions to a spec and return the modified copy.

        Args:
            spec: The OpenAPI specification to modify (left untouched)
            source_name: Name used in log messages
            overlay: The overlay definition containing the actions

        Returns:
            Modified specification
        """
        modified_spec = copy.deepcopy(spec)
        actions = overlay.get("actions", []) or []

        for action in actions:
            if not isinstance(action, dict) or "target" not in action:
                raise ValueError(f"Invalid overlay action for {source_name}: {action}")

            segments = parse_target(action["target"])
            if action.get("remove"):
                removed = self._remove(modified_spec, segments)
                logger.debug(
                    f"Overlay for {source_name} removed {removed} node(s) at {action['target']}"
                )
            elif "update" in action:
                if not segments:
                    if not isinstance(action["update"], collections.abc.Mapping):
                        raise ValueError("Only a mapping can update the document root")
                    deep_merge(modified_spec, action["update"])
                    continue
                self._update(modified_spec, segments, action["update"])
                logger.debug(f"Overlay for {source_name} updated {action['target']}")

        return modified_spec

    def _update(self, node: Any, segments: List[Segment], value: Any) -> None:
        """Update the node(s) addressed by segments, creating missing mappings."""
        head, rest = segments[0], segments[1:]

        if head == WILDCARD:
            if not isinstance(node, (dict, list)):
                return
            keys = list(node.keys()) if isinstance(node, dict) else range(len(node))
            for key in keys:
                if rest:
                    self._update(node[key], rest, value)
                else:
                    node[key] = self._merged(node[key], value)
            return

        if isinstance(node, list):
            if not isinstance(head, int) or head >= len(node):
                return
            if rest:
                self._update(node[head], rest, value)
            else:
                node[head] = self._merged(node[head], value)
            return

        if not isinstance(node, dict):
            return

        if not rest:
            node[head] = self._merged(node.get(head), value)
            return

        if head not in node or node[head] is None:
            node[head] = {}
        self._update(node[head], rest, value)

    def _remove(self, node: Any, segments: List[Segment]) -> int:
        """Delete the node(s) addressed by segments. Missing nodes are ignored."""
        if not segments:
            return 0
        head, rest = segments[0], segments[1:]

        if head == WILDCARD:
            if isinstance(node, dict):
                if not rest:
                    count = len(node)
                    node.clear()
                    return count
                return sum(self._remove(child, rest) for child in node.values())
            if isinstance(node, list):
                if not rest:
                    count = len(node)
                    node.clear()
                    return count
                return sum(self._remove(child, rest) for child in node)
            return 0

        if isinstance(node, list):
            if not isinstance(head, int) or head >= len(node):
                return 0
            if rest:
                return self._remove(node[head], rest)
            del node[head]
            return 1

        if not isinstance(node, dict) or head not in node:
            return 0
        if rest:
            return self._remove(node[head], rest)
        del node[head]
        return 1

    @staticmethod
    def _merged(current: Any, value: Any) -> Any:
        if isinstance(current, dict) and isinstance(value, collections.abc.Mapping):
            return deep_merge(current, value)
        return copy.deepcopy(value)

    def get_cached_overlay(self, overlay_path: str) -> Optional[Dict[str, Any]]:
        """Get a cached overlay by path.

        Args:
            overlay_path: Path to the overlay file

        Returns:
            Cached overlay or None if not found
        """
        return self.overlays_cache.get(overlay_path)

    def clear_cache(self) -> None:
        """Clear the overlay cache."""
        self.overlays_cache.clear()
