"""Usage examples for every documented operation.

Builds a markdown page with ready-to-run calls in curl, JavaScript and
Python for each operation of the spec, using parameter examples from the
document itself.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

from .config import ExamplesConfig
from .spec_loader import iter_operations, operation_parameters, resolve_ref

logger = logging.getLogger(__name__)

API_KEY_PARAM = "api_key"

LANGUAGE_TITLES = {
    "curl": ("Shell (curl)", "bash"),
    "javascript": ("JavaScript", "javascript"),
    "python": ("Python", "python"),
}


def parameter_example(param: Dict[str, Any]) -> Optional[Any]:
    """Pick an example value for a parameter, or None if it has none."""
    if "example" in param:
        return param["example"]
    schema = param.get("schema") or {}
    if "example" in schema:
        return schema["example"]
    if schema.get("enum"):
        return schema["enum"][0]
    if "default" in schema:
        return schema["default"]
    examples = param.get("examples") or {}
    for example in examples.values():
        if isinstance(example, dict) and "value" in example:
            return example["value"]
    return None


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class SnippetGenerator:
    """Renders per-operation usage snippets for the configured languages."""

    def __init__(self, spec: Dict[str, Any], config: ExamplesConfig):
        self.spec = spec
        self.config = config
        servers = spec.get("servers") or [{}]
        self.base_url = str(servers[0].get("url", "")).rstrip("/")

    def build_request(
        self, path: str, operation: Dict[str, Any]
    ) -> Tuple[str, List[Tuple[str, str]]]:
        """Return the example URL path and query pairs for an operation."""
        url_path = path
        query: List[Tuple[str, str]] = []
        has_key = False

        for param in operation_parameters(self.spec, path, operation):
            location = param.get("in")
            name = param["name"]
            if location == "query" and name == API_KEY_PARAM:
                has_key = True
                continue
            value = parameter_example(param)
            if location == "path":
                placeholder = f"{{{name}}}"
                url_path = url_path.replace(
                    placeholder, _format_value(value) if value is not None else placeholder
                )
            elif location == "query" and value is not None:
                query.append((name, _format_value(value)))

        if has_key or self._uses_query_key(operation):
            query.append((API_KEY_PARAM, self.config.api_key))
        return url_path, query

    def _uses_query_key(self, operation: Dict[str, Any]) -> bool:
        security = operation.get("security", self.spec.get("security")) or []
        schemes = (self.spec.get("components") or {}).get("securitySchemes") or {}
        for requirement in security:
            for scheme_name in requirement:
                scheme = resolve_ref(self.spec, schemes.get(scheme_name) or {})
                if (
                    scheme.get("type") == "apiKey"
                    and scheme.get("in") == "query"
                    and scheme.get("name") == API_KEY_PARAM
                ):
                    return True
        return False

    def snippet(self, language: str, method: str, path: str, operation: Dict[str, Any]) -> str:
        """Render one snippet."""
        url_path, query = self.build_request(path, operation)
        url = f"{self.base_url}{url_path}"

        if language == "curl":
            full_url = f"{url}?{urlencode(query)}" if query else url
            flag = "" if method == "get" else f"-X {method.upper()} "
            return f'curl {flag}"{full_url}"'

        if language == "javascript":
            lines = [f"const url = new URL({json.dumps(url)});"]
            for name, value in query:
                lines.append(
                    f"url.searchParams.set({json.dumps(name)}, {json.dumps(value)});"
                )
            fetch_opts = "" if method == "get" else f', {{ method: "{method.upper()}" }}'
            lines.append(f"const response = await fetch(url{fetch_opts});")
            lines.append("const data = await response.json();")
            return "\n".join(lines)

        if language == "python":
            lines = ["import httpx", ""]
            if query:
                lines.append("params = {")
                for name, value in query:
                    lines.append(f"    {name!r}: {value!r},")
                lines.append("}")
                call = f"httpx.{method}({url!r}, params=params)"
            else:
                call = f"httpx.{method}({url!r})"
            lines.append(f"response = {call}")
            lines.append("response.raise_for_status()")
            lines.append("data = response.json()")
            return "\n".join(lines)

        raise ValueError(f"Unknown snippet language: {language}")

    def render_markdown(self, title: Optional[str] = None) -> str:
        """Render the examples page."""
        info = self.spec.get("info") or {}
        heading = title or f"{info.get('title', 'API')} usage examples"
        result = [f"# {heading}", ""]
        result.append(
            f"Replace `{self.config.api_key}` with your own key from "
            "https://api.nasa.gov for a higher hourly request allowance."
        )
        result.append("")

        count = 0
        for path, method, operation in iter_operations(self.spec):
            summary = operation.get("summary") or operation.get("operationId") or path
            result.append(f"## {summary}")
            result.append("")
            result.append(f"`{method.upper()} {path}`")
            result.append("")
            if operation.get("description"):
                result.append(operation["description"].strip())
                result.append("")
            for language in self.config.languages:
                label, fence = LANGUAGE_TITLES[language]
                result.append(f"### {label}")
                result.append("")
                result.append(f"```{fence}")
                result.append(self.snippet(language, method, path, operation))
                result.append("```")
                result.append("")
            count += 1

        logger.info(
            f"Generated usage examples for {count} operations in "
            f"{len(self.config.languages)} languages"
        )
        return "\n".join(result)
