"""Tests for infractl.generator.flags -- long/short flag derivation."""

from __future__ import annotations

import pytest

from infractl.exceptions import InvalidFieldName
from infractl.generator.flags import assign_flags, derive_flag, kebab_case, strip_edit_prefix
from infractl.models import FlagSpec


class TestDeriveFlag:
    @pytest.mark.parametrize(
        ("name", "long", "short"),
        [
            ("description", "description", "D"),
            ("new_description", "description", "D"),
            ("size", "size", None),
            ("disk_source", "disk-source", None),
            ("hostname", "hostname", None),
            ("ncpus", "ncpus", "c"),
            ("ipv4_block", "ipv4-block", "4"),
            ("ipv6Block", "ipv6-block", "6"),
            ("vpc_name", "vpc", "v"),
            ("router_name", "router", "r"),
            ("memory", "memory", "m"),
            ("sort_by", "sort-by", "s"),
        ],
    )
    def test_rules(self, name: str, long: str, short: str | None) -> None:
        spec = derive_flag(name)
        assert spec.long_name == long
        assert spec.short_name == short

    def test_edit_prefix_gives_same_flag(self) -> None:
        assert derive_flag("new_name") == derive_flag("name")

    def test_flags_carry_required_and_default(self) -> None:
        spec = derive_flag("memory", required=True, has_default=False)
        assert spec == FlagSpec(long_name="memory", short_name="m", required=True)

    def test_too_short_raises(self) -> None:
        with pytest.raises(InvalidFieldName):
            derive_flag("x")

    def test_render(self) -> None:
        assert derive_flag("description").render() == "-D|--description"
        assert derive_flag("size").render() == "--size"


class TestHelpers:
    def test_strip_edit_prefix(self) -> None:
        assert strip_edit_prefix("new_name") == "name"
        assert strip_edit_prefix("name") == "name"

    def test_kebab_case(self) -> None:
        assert kebab_case("sort_by") == "sort-by"
        assert kebab_case("dnsName") == "dns-name"


class TestAssignFlags:
    def test_collision_drops_later_short(self) -> None:
        flags = assign_flags([("name", False, True), ("ncpus", True, False), ("network", False, True)])
        assert flags["name"].short_name == "n"
        assert flags["ncpus"].short_name == "c"
        assert flags["network"].short_name is None

    def test_claimed_shorts_respected(self) -> None:
        flags = assign_flags([("project_id", False, True)], claimed_shorts={"p"})
        assert flags["project_id"].short_name is None

    def test_independent_of_input_order(self) -> None:
        fields = [("name", False, True), ("network", False, True)]
        assert assign_flags(fields) == assign_flags(list(reversed(fields)))

    def test_long_collision_falls_back_to_full_name(self) -> None:
        flags = assign_flags([("vpc_name", True, False)], claimed_longs={"vpc"})
        assert flags["vpc_name"].long_name == "vpc-name"

    def test_override_survives_taken_first_letter(self) -> None:
        flags = assign_flags([("id", False, True), ("ipv4_block", True, False)])
        assert flags["id"].short_name == "i"
        assert flags["ipv4_block"].short_name == "4"

    def test_taken_override_is_dropped(self) -> None:
        flags = assign_flags([("ipv4_block", True, False)], claimed_shorts={"4"})
        assert flags["ipv4_block"].short_name is None
