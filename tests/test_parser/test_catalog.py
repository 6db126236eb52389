"""Tests for infractl.parser.catalog -- operations of one resource tag."""

from __future__ import annotations

from typing import Any

from infractl.models import HTTPMethod
from infractl.parser.catalog import collect_operations, list_tags


class TestCollectOperations:
    def test_disks_in_path_then_method_order(self, infra_api: dict[str, Any]) -> None:
        ops = collect_operations(infra_api, "disks")
        assert [op.operation_id for op in ops] == [
            "project_disks_get",
            "project_disks_post",
            "project_disks_get_disk",
            "project_disks_delete_disk",
        ]

    def test_pagination_extension(self, infra_api: dict[str, Any]) -> None:
        ops = {op.operation_id: op for op in collect_operations(infra_api, "disks")}
        assert ops["project_disks_get"].paginated is True
        assert ops["project_disks_post"].paginated is False

    def test_global_tag_matches_exactly(self, infra_api: dict[str, Any]) -> None:
        ops = collect_operations(infra_api, "images:global")
        assert len(ops) == 4
        project_ops = collect_operations(infra_api, "images")
        assert [op.operation_id for op in project_ops] == [
            "project_images_get",
            "project_images_post",
            "project_images_get_image",
            "project_images_delete_image",
        ]

    def test_path_item_parameters_attached(self, infra_api: dict[str, Any]) -> None:
        view = next(
            op
            for op in collect_operations(infra_api, "disks")
            if op.method == HTTPMethod.GET and op.path.endswith("{disk_name}")
        )
        names = [p["name"] for p in view.raw["x-path-parameters"]]
        assert names == ["disk_name", "organization_name", "project_name"]

    def test_missing_operation_id_is_empty(self) -> None:
        doc = {"paths": {"/things": {"get": {"tags": ["things"]}}}}
        [op] = collect_operations(doc, "things")
        assert op.operation_id == ""

    def test_non_method_keys_ignored(self) -> None:
        doc = {
            "paths": {
                "/things": {
                    "summary": "Things",
                    "parameters": [],
                    "post": {"tags": ["things"], "operationId": "things_post"},
                }
            }
        }
        ops = collect_operations(doc, "things")
        assert [op.method for op in ops] == [HTTPMethod.POST]


class TestListTags:
    def test_sorted_unique(self, infra_api: dict[str, Any]) -> None:
        assert list_tags(infra_api) == [
            "disks",
            "images",
            "images:global",
            "instances",
            "organizations",
            "projects",
            "racks",
            "roles",
            "routers",
            "routes",
            "sleds",
            "snapshots",
            "subnets",
            "vpcs",
        ]
