"""Load the API description from a URL, local file, or stdin.

The generator reads the OpenAPI document exactly once per run. This module
turns the raw text into a Python dictionary (JSON or YAML, detected from
the extension, the response content type, or the content itself) and checks
that it declares an OpenAPI 3.x version.

* :func:`load_spec` -- Load and parse a document from any supported source.
* :func:`validate_openapi_version` -- Check and return the ``openapi`` version
  string, rejecting Swagger 2.x.
* :func:`load_api_description` -- Both of the above, as used by the
  ``generate`` command.

The returned dictionary is the explicit input of every later stage; nothing
keeps a global copy of it.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from infractl.exceptions import SpecParseError


def load_spec(source: str) -> dict[str, Any]:
    """Load an API description from a URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The parsed document as a dictionary.

    Raises:
        SpecParseError: If the source cannot be read or parsed.
    """
    if source == "-":
        content = sys.stdin.read()
        if not content.strip():
            raise SpecParseError("No input received from stdin")
        return _parse_content(content)
    if source.startswith(("http://", "https://")):
        return _load_from_url(source)
    return _load_from_file(source)


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch the document over HTTP, using the content type as a format hint."""
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching API description from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch API description from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = "json" if "json" in content_type else "yaml" if "yaml" in content_type else ""
    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Read a local ``.json``/``.yaml``/``.yml`` file."""
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"API description not found: {path}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read {path}: {exc}") from exc
    if not content.strip():
        raise SpecParseError(f"API description is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = "json" if suffix == ".json" else "yaml" if suffix in (".yaml", ".yml") else ""
    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON, falling back to YAML unless *hint* forbids it.

    Raises:
        SpecParseError: If the content is not a JSON/YAML object.
    """
    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
        else:
            return _require_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise SpecParseError(f"Failed to parse API description as JSON or YAML: {exc}") from exc
    return _require_mapping(result)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"API description must be a JSON/YAML object (got {kind})")
    return result


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Validate and return the OpenAPI version string.

    Args:
        spec: The parsed document.

    Returns:
        The OpenAPI version string (e.g., '3.0.3').

    Raises:
        SpecParseError: If the version is missing, is Swagger 2.x, or is not 3.x.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.0.x and 3.1.x are supported."
        )

    openapi_version = spec.get("openapi")
    if openapi_version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(openapi_version)
    if version_str.startswith("3."):
        return version_str

    raise SpecParseError(
        f"Unsupported OpenAPI version: {version_str}. "
        "Only OpenAPI 3.0.x and 3.1.x are supported."
    )


def load_api_description(source: str) -> dict[str, Any]:
    """Load *source* and check that it is an OpenAPI 3.x document with paths.

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The parsed document.

    Raises:
        SpecParseError: If loading, parsing, or validation fails.
    """
    document = load_spec(source)
    validate_openapi_version(document)
    if not isinstance(document.get("paths"), dict):
        raise SpecParseError("API description has no 'paths' object")
    return document
