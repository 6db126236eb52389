"""Integration tests for the generated command line.

Runs ``infractl generate`` against the fixture API description into a
temporary commands directory, loads the result with :func:`create_app`,
and drives the generated commands through Typer's CliRunner. HTTP goes
through :class:`httpx.MockTransport` installed on the runtime context.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import httpx
import pytest
import typer
from typer.testing import CliRunner

from infractl.app import create_app
from infractl.runtime.context import Context, set_context


@pytest.fixture
def commands_dir(isolated_config: Path, infra_api_path: Path) -> Path:
    out = isolated_config / "commands"
    result = CliRunner().invoke(
        create_app(isolated_config / "empty"),
        ["--no-color", "generate", "--spec", str(infra_api_path), "--out", str(out)],
    )
    assert result.exit_code == 0, result.output
    return out


@pytest.fixture
def app(commands_dir: Path) -> typer.Typer:
    return create_app(commands_dir)


class Api:
    """Canned API: records requests and answers from a route table."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: dict[tuple[str, str], httpx.Response] = {}
        self.browser = Mock()

    def on(self, method: str, path: str, response: httpx.Response) -> None:
        self.responses[(method, path)] = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key in self.responses:
            return self.responses[key]
        return httpx.Response(404, json={"message": f"not found: {request.url.path}"})

    def install(self) -> None:
        set_context(
            Context(transport=httpx.MockTransport(self), interactive=False, browser=self.browser)
        )


@pytest.fixture
def api() -> Api:
    api = Api()
    api.install()
    return api


def _invoke(app: typer.Typer, *args: str) -> Any:
    return CliRunner().invoke(app, ["--no-color", "--host", "api.test", *args])


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------


class TestGenerate:
    def test_writes_one_module_per_resource(self, commands_dir: Path) -> None:
        names = sorted(p.name for p in commands_dir.glob("*.py"))
        assert names == [
            "disks.py",
            "images.py",
            "images_global.py",
            "instances.py",
            "organizations.py",
            "projects.py",
            "racks.py",
            "roles.py",
            "routers.py",
            "routes.py",
            "sleds.py",
            "snapshots.py",
            "subnets.py",
            "vpcs.py",
        ]

    def test_single_tag(self, isolated_config: Path, infra_api_path: Path) -> None:
        out = isolated_config / "only"
        result = CliRunner().invoke(
            create_app(isolated_config / "empty"),
            ["--no-color", "generate", "-s", str(infra_api_path), "--out", str(out), "-t", "disks"],
        )
        assert result.exit_code == 0, result.output
        assert "Generated 1 resource module(s)" in result.output
        assert [p.name for p in out.iterdir()] == ["disks.py"]

    def test_commands_dir_from_env(
        self, isolated_config: Path, infra_api_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        target = isolated_config / "from-env"
        monkeypatch.setenv("INFRACTL_COMMANDS_DIR", str(target))
        result = CliRunner().invoke(
            create_app(isolated_config / "empty"),
            ["--no-color", "generate", "--spec", str(infra_api_path), "--tag", "vpcs"],
        )
        assert result.exit_code == 0, result.output
        assert (target / "vpcs.py").is_file()

    def test_missing_description(self, isolated_config: Path) -> None:
        result = CliRunner().invoke(
            create_app(isolated_config / "empty"),
            ["--no-color", "generate", "--spec", str(isolated_config / "nope.json")],
        )
        assert result.exit_code == 7
        assert "API description not found" in result.output

    def test_broken_module_is_skipped(self, commands_dir: Path) -> None:
        (commands_dir / "broken.py").write_text("raise RuntimeError('boom')\n")
        result = CliRunner().invoke(create_app(commands_dir), ["--help"])
        assert result.exit_code == 0
        assert "disk" in result.output


# ---------------------------------------------------------------------------
# Command tree
# ---------------------------------------------------------------------------


class TestCommandTree:
    def test_groups(self, app: typer.Typer) -> None:
        result = CliRunner().invoke(app, ["--help"])
        assert result.exit_code == 0
        for group in (
            "organization",
            "project",
            "disk",
            "instance",
            "vpc",
            "subnet",
            "route",
            "router",
            "image",
            "image-global",
            "snapshot",
            "role",
            "rack",
            "sled",
        ):
            assert group in result.output

    def test_instance_variants(self, app: typer.Typer) -> None:
        result = CliRunner().invoke(app, ["instance", "--help"])
        for name in ("start", "stop", "reboot", "create", "list", "view", "delete"):
            assert name in result.output

    def test_create_help(self, app: typer.Typer) -> None:
        result = CliRunner().invoke(app, ["disk", "create", "--help"])
        assert result.exit_code == 0
        assert "Create a new disk." in result.output
        assert "--organization" in result.output
        assert "--disk-source" in result.output


# ---------------------------------------------------------------------------
# Running commands
# ---------------------------------------------------------------------------


DISKS = "/organizations/acme/projects/prod/disks"


class TestList:
    def test_json(self, app: typer.Typer, api: Api) -> None:
        api.on("GET", DISKS, httpx.Response(200, json={"items": [{"name": "d1"}], "next_page": None}))
        result = _invoke(app, "disk", "list", "-o", "acme", "-p", "prod", "--format", "json")
        assert result.exit_code == 0, result.output
        assert '"name": "d1"' in result.output
        assert api.requests[0].url.params["limit"] == "30"

    def test_org_from_env(self, app: typer.Typer, api: Api, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INFRACTL_ORG", "acme")
        api.on("GET", DISKS, httpx.Response(200, json={"items": []}))
        result = _invoke(app, "disk", "list", "-p", "prod", "--format", "json")
        assert result.exit_code == 0, result.output
        assert api.requests[0].url.path == DISKS

    def test_invalid_limit(self, app: typer.Typer, api: Api) -> None:
        result = _invoke(app, "disk", "list", "--limit", "0")
        assert result.exit_code == 2
        assert "--limit must be greater than 0" in result.output
        assert api.requests == []

    def test_missing_project(self, app: typer.Typer, api: Api) -> None:
        result = _invoke(app, "disk", "list", "-o", "acme")
        assert result.exit_code == 2
        assert "-p|--project is required" in result.output


class TestCreate:
    def test_non_interactive_missing_name(self, app: typer.Typer, api: Api) -> None:
        result = _invoke(app, "disk", "create", "-o", "acme", "-p", "prod")
        assert result.exit_code == 2
        assert "[disk] required in non-interactive mode" in result.output
        assert api.requests == []

    def test_full(self, app: typer.Typer, api: Api) -> None:
        api.on("POST", DISKS, httpx.Response(201, json={"name": "d1"}))
        result = _invoke(
            app,
            "disk", "create", "d1",
            "-o", "acme", "-p", "prod",
            "-D", "scratch space",
            "--size", "1024",
            "--disk-source", '{"type": "blank", "block_size": 512}',
        )
        assert result.exit_code == 0, result.output
        assert json.loads(api.requests[0].content) == {
            "description": "scratch space",
            "disk_source": {"type": "blank", "block_size": 512},
            "name": "d1",
            "size": 1024,
        }
        assert "Created disk d1 in acme/prod" in result.output

    def test_project_message(self, app: typer.Typer, api: Api) -> None:
        api.on("POST", "/organizations/acme/projects", httpx.Response(201, json={}))
        result = _invoke(app, "project", "create", "prod", "-o", "acme", "-D", "production")
        assert result.exit_code == 0, result.output
        assert "Created project acme/prod" in result.output


class TestViewEditDelete:
    def test_view_alias(self, app: typer.Typer, api: Api) -> None:
        api.on("GET", f"{DISKS}/d1", httpx.Response(200, json={"name": "d1"}))
        result = _invoke(app, "disk", "get", "d1", "-o", "acme", "-p", "prod", "--format", "json")
        assert result.exit_code == 0, result.output
        assert '"name": "d1"' in result.output

    def test_view_not_found(self, app: typer.Typer, api: Api) -> None:
        result = _invoke(app, "disk", "view", "gone", "-o", "acme", "-p", "prod")
        assert result.exit_code == 4
        assert f"not found: {DISKS}/gone" in result.output

    def test_view_web(self, app: typer.Typer, api: Api) -> None:
        result = _invoke(app, "disk", "view", "d1", "-o", "acme", "-p", "prod", "--web")
        assert result.exit_code == 0, result.output
        api.browser.assert_called_once_with("https://api.test/d1")
        assert api.requests == []

    def test_subnet_needs_vpc(self, app: typer.Typer, api: Api) -> None:
        result = _invoke(app, "subnet", "view", "s1", "-o", "acme", "-p", "prod")
        assert result.exit_code == 2
        assert "--vpc" in result.output

    def test_edit_nothing(self, app: typer.Typer, api: Api) -> None:
        result = _invoke(app, "vpc", "edit", "v1", "-o", "acme", "-p", "prod")
        assert result.exit_code == 2
        assert "nothing to edit" in result.output
        assert api.requests == []

    def test_edit_rename(self, app: typer.Typer, api: Api) -> None:
        api.on("PUT", "/organizations/acme/projects/prod/vpcs/v1", httpx.Response(200, json={}))
        result = _invoke(app, "vpc", "edit", "v1", "-o", "acme", "-p", "prod", "-n", "v2")
        assert result.exit_code == 0, result.output
        assert "Edited VPC v1 -> v2 in acme/prod" in result.output

    def test_delete_requires_confirm(self, app: typer.Typer, api: Api) -> None:
        result = _invoke(app, "disk", "delete", "d1")
        assert result.exit_code == 2
        assert "--confirm required when not running interactively" in result.output
        assert api.requests == []

    def test_delete(self, app: typer.Typer, api: Api) -> None:
        api.on("DELETE", f"{DISKS}/d1", httpx.Response(204))
        result = _invoke(app, "disk", "delete", "d1", "-o", "acme", "-p", "prod", "--confirm")
        assert result.exit_code == 0, result.output
        assert "Deleted disk d1 from acme/prod" in result.output

    def test_instance_start(self, app: typer.Typer, api: Api) -> None:
        path = "/organizations/acme/projects/prod/instances/web-1/start"
        api.on("POST", path, httpx.Response(202, json={}))
        result = _invoke(app, "instance", "start", "web-1", "-o", "acme", "-p", "prod")
        assert result.exit_code == 0, result.output
        assert "Started instance web-1 in acme/prod" in result.output


SLED_ID = "7f1c9a56-3d0e-4b8c-9f2a-1e6d5c4b3a21"


class TestUnscopedResources:
    def test_sled_has_no_create(self, app: typer.Typer) -> None:
        result = CliRunner().invoke(app, ["sled", "--help"])
        assert result.exit_code == 0
        assert "list" in result.output
        assert "view" in result.output
        assert "create" not in result.output
        assert "delete" not in result.output

    def test_sled_list(self, app: typer.Typer, api: Api) -> None:
        api.on("GET", "/hardware/sleds", httpx.Response(200, json={"items": [{"id": SLED_ID}]}))
        result = _invoke(app, "sled", "list", "--format", "json")
        assert result.exit_code == 0, result.output
        assert SLED_ID in result.output
        assert api.requests[0].url.params["limit"] == "30"
        assert "sort_by" not in api.requests[0].url.params

    def test_sled_view(self, app: typer.Typer, api: Api) -> None:
        path = f"/hardware/sleds/{SLED_ID}"
        api.on("GET", path, httpx.Response(200, json={"id": SLED_ID, "service_address": "[::1]:12345"}))
        result = _invoke(app, "sled", "view", SLED_ID, "--format", "yaml")
        assert result.exit_code == 0, result.output
        assert "service_address" in result.output
        assert api.requests[0].url.path == path

    def test_role_list_ignores_org(self, app: typer.Typer, api: Api, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INFRACTL_ORG", "acme")
        api.on("GET", "/roles", httpx.Response(200, json={"items": [{"name": "fleet.admin"}]}))
        result = _invoke(app, "role", "list", "--format", "json")
        assert result.exit_code == 0, result.output
        assert '"name": "fleet.admin"' in result.output


ROUTERS = "/organizations/acme/projects/prod/vpcs/v1/routers"


class TestRouters:
    def test_create(self, app: typer.Typer, api: Api) -> None:
        api.on("POST", ROUTERS, httpx.Response(201, json={"name": "r1"}))
        result = _invoke(
            app, "router", "create", "r1", "-o", "acme", "-p", "prod", "--vpc", "v1", "-D", "edge"
        )
        assert result.exit_code == 0, result.output
        assert json.loads(api.requests[0].content) == {"description": "edge", "name": "r1"}
        assert "Created router r1 in acme/prod" in result.output

    def test_edit_description(self, app: typer.Typer, api: Api) -> None:
        api.on("PUT", f"{ROUTERS}/r1", httpx.Response(200, json={}))
        result = _invoke(
            app, "router", "edit", "r1", "-o", "acme", "-p", "prod", "-v", "v1", "-D", "core"
        )
        assert result.exit_code == 0, result.output
        assert json.loads(api.requests[0].content) == {"description": "core"}
        assert "Edited router r1 in acme/prod" in result.output
