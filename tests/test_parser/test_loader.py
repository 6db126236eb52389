"""Tests for infractl.parser.loader."""

from __future__ import annotations

import io
import json
import textwrap
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from infractl.exceptions import SpecParseError
from infractl.parser.loader import (
    _parse_content,
    load_api_description,
    load_spec,
    validate_openapi_version,
)

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


# ---------------------------------------------------------------------------
# load_spec dispatch
# ---------------------------------------------------------------------------


class TestLoadSpec:
    """load_spec routes to the file, URL, or stdin loader."""

    def test_loads_from_file_json(self) -> None:
        result = load_spec(str(FIXTURES_DIR / "infra_api.json"))
        assert result["openapi"] == "3.0.3"
        assert result["info"]["title"] == "Infrastructure API"

    def test_loads_from_file_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "api.yaml"
        yaml_file.write_text(
            textwrap.dedent("""\
                openapi: "3.0.3"
                info:
                  title: YAML Test
                  version: "1.0.0"
                paths: {}
            """),
            encoding="utf-8",
        )
        result = load_spec(str(yaml_file))
        assert result["info"]["title"] == "YAML Test"

    def test_loads_from_stdin(self) -> None:
        doc = json.dumps({"openapi": "3.0.3", "info": {"title": "stdin", "version": "1"}})
        with patch("infractl.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO(doc)
            result = load_spec("-")
        assert result["info"]["title"] == "stdin"

    def test_empty_stdin_raises(self) -> None:
        with patch("infractl.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO("  \n")
            with pytest.raises(SpecParseError, match="No input"):
                load_spec("-")

    def test_loads_from_url(self) -> None:
        doc = {"openapi": "3.0.3", "info": {"title": "URL test", "version": "1.0"}}
        response = httpx.Response(
            status_code=200,
            json=doc,
            request=httpx.Request("GET", "https://example.com/api.json"),
        )
        with patch("infractl.parser.loader.httpx.get", return_value=response):
            result = load_spec("https://example.com/api.json")
        assert result["info"]["title"] == "URL test"

    def test_url_http_error_raises(self) -> None:
        response = httpx.Response(
            status_code=404,
            request=httpx.Request("GET", "https://example.com/missing.json"),
        )
        with patch("infractl.parser.loader.httpx.get", return_value=response):
            with pytest.raises(SpecParseError, match="HTTP 404"):
                load_spec("https://example.com/missing.json")

    def test_url_connection_error_raises(self) -> None:
        with patch(
            "infractl.parser.loader.httpx.get",
            side_effect=httpx.ConnectError("Connection refused"),
        ):
            with pytest.raises(SpecParseError, match="Failed to fetch"):
                load_spec("https://unreachable.example.com/api.json")

    def test_missing_file_raises(self) -> None:
        with pytest.raises(SpecParseError, match="not found"):
            load_spec("/nonexistent/api.json")

    def test_empty_file_raises(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty.json"
        empty.write_text("", encoding="utf-8")
        with pytest.raises(SpecParseError, match="empty"):
            load_spec(str(empty))


# ---------------------------------------------------------------------------
# _parse_content
# ---------------------------------------------------------------------------


class TestParseContent:
    """Content parsing with format detection."""

    def test_parses_json(self) -> None:
        assert _parse_content('{"key": "value"}') == {"key": "value"}

    def test_falls_back_to_yaml(self) -> None:
        assert _parse_content("key: value\nnested:\n  a: 1") == {
            "key": "value",
            "nested": {"a": 1},
        }

    def test_json_hint_forces_json_only(self) -> None:
        with pytest.raises(SpecParseError, match="Invalid JSON"):
            _parse_content("key: value", hint="json")

    def test_non_object_raises(self) -> None:
        with pytest.raises(SpecParseError, match="must be a JSON/YAML object"):
            _parse_content("[1, 2, 3]")


# ---------------------------------------------------------------------------
# Version validation
# ---------------------------------------------------------------------------


class TestValidateOpenAPIVersion:
    def test_accepts_30(self) -> None:
        assert validate_openapi_version({"openapi": "3.0.3"}) == "3.0.3"

    def test_accepts_31(self) -> None:
        assert validate_openapi_version({"openapi": "3.1.0"}) == "3.1.0"

    def test_rejects_swagger(self) -> None:
        with pytest.raises(SpecParseError, match="Swagger 2.0 is not supported"):
            validate_openapi_version({"swagger": "2.0"})

    def test_rejects_missing_version(self) -> None:
        with pytest.raises(SpecParseError, match="Missing 'openapi'"):
            validate_openapi_version({"info": {}})

    def test_rejects_other_major(self) -> None:
        with pytest.raises(SpecParseError, match="Unsupported OpenAPI version"):
            validate_openapi_version({"openapi": "4.0.0"})


class TestLoadApiDescription:
    def test_loads_fixture(self) -> None:
        document = load_api_description(str(FIXTURES_DIR / "infra_api.json"))
        assert "/organizations" in document["paths"]

    def test_requires_paths(self, tmp_path: Path) -> None:
        path = tmp_path / "nopaths.json"
        path.write_text(json.dumps({"openapi": "3.0.3", "info": {}}), encoding="utf-8")
        with pytest.raises(SpecParseError, match="no 'paths'"):
            load_api_description(str(path))
