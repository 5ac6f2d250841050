"""Tests for the per-kind form schema."""

import pytest

from ovntopo.errors import UnknownResourceKind
from ovntopo.schema.resource_configs import (
    FIELD_TYPES,
    RESOURCE_CONFIGS,
    FieldSpec,
    get_cell_value,
    get_config,
    get_display_columns,
    parse_field_input,
    parse_specs,
    table_row,
    validate_create,
)


class TestConfigs:
    def test_core_kinds_present(self):
        for kind in ("vpcs", "subnets", "vpc-nat-gateways", "ips"):
            assert kind in RESOURCE_CONFIGS

    def test_field_types_valid(self):
        for cfg in RESOURCE_CONFIGS.values():
            for f in cfg.fields:
                assert f.type in FIELD_TYPES
                if f.type == "select":
                    assert f.options

    def test_invalid_field_type(self):
        with pytest.raises(ValueError):
            FieldSpec("x", "X", "radio")

    def test_get_config_unknown(self):
        with pytest.raises(UnknownResourceKind):
            get_config("routers")

    def test_to_dict(self):
        data = get_config("vpc-nat-gateways").to_dict()
        assert data["displayName"] == "VPC NAT Gateway"
        selector = [f for f in data["fields"] if f["key"] == "selector"][0]
        assert selector == {
            "key": "selector", "label": "Node Selector", "type": "textarea",
            "required": False, "isArray": True, "placeholder": "One selector per line", "rows": 3,
        }
        protocol = get_config("subnets").get_field("protocol").to_dict()
        assert protocol["options"] == ["IPv4", "IPv6", "Dual"]


class TestDisplay:
    def test_columns(self):
        assert get_display_columns("subnets") == [
            "Name", "CIDR Block", "Gateway", "VPC", "Created", "Actions",
        ]
        assert get_display_columns("unknown") == ["Name", "Created"]

    def test_cell_values(self):
        obj = {
            "spec": {"excludeIps": ["10.0.0.1", "10.0.0.2"], "natOutgoing": True, "cidrBlock": "10.0.0.0/24"},
            "status": {"gateway": "10.0.0.1"},
        }
        cfg = get_config("subnets")
        assert get_cell_value(obj, cfg.get_field("excludeIps")) == "10.0.0.1, 10.0.0.2"
        assert get_cell_value(obj, cfg.get_field("natOutgoing")) == "yes"
        assert get_cell_value(obj, cfg.get_field("gateway")) == "10.0.0.1"
        assert get_cell_value(obj, cfg.get_field("vpc")) == "N/A"
        assert get_cell_value({}, cfg.get_field("cidrBlock")) == "N/A"

    def test_checkbox_cell_false_renders_no(self):
        cfg = get_config("subnets")
        f = cfg.get_field("natOutgoing")
        assert get_cell_value({"spec": {"natOutgoing": False}}, f) == "no"
        assert get_cell_value({"spec": {}, "status": {"natOutgoing": True}}, f) == "yes"
        assert get_cell_value({"spec": {}}, f) == "N/A"

    def test_table_row(self):
        obj = {"metadata": {"name": "sub-1", "creationTimestamp": "2024-01-01T00:00:00Z"},
               "spec": {"cidrBlock": "10.0.0.0/24", "vpc": "vpc-a"}}
        row = table_row("subnets", obj)
        assert row == {
            "Name": "sub-1", "CIDR Block": "10.0.0.0/24", "Gateway": "N/A",
            "VPC": "vpc-a", "Created": "2024-01-01T00:00:00Z",
        }


class TestParsing:
    def test_comma_array(self):
        f = get_config("subnets").get_field("excludeIps")
        assert parse_field_input(f, " 10.0.0.1, ,10.0.0.2 ") == ["10.0.0.1", "10.0.0.2"]
        assert parse_field_input(f, ["a ", ""]) == ["a"]
        assert parse_field_input(f, None) == []

    def test_textarea_array(self):
        f = get_config("vpc-nat-gateways").get_field("selector")
        assert parse_field_input(f, "a=b\n\n c=d \n") == ["a=b", "c=d"]

    def test_number(self):
        f = get_config("vlans").get_field("id")
        assert parse_field_input(f, "100") == 100
        assert parse_field_input(f, "1.5") == 1.5
        assert parse_field_input(f, "") is None
        assert parse_field_input(f, "abc") == "abc"

    def test_number_exponent(self):
        f = get_config("vlans").get_field("id")
        assert parse_field_input(f, "1e5") == 100000.0
        assert parse_field_input(f, " 42 ") == 42
        assert isinstance(parse_field_input(f, "42"), int)

    def test_checkbox(self):
        f = get_config("subnets").get_field("private")
        assert parse_field_input(f, "true") is True
        assert parse_field_input(f, "off") is False
        assert parse_field_input(f, 1) is True

    def test_parse_specs_passes_unknown_keys(self):
        specs = parse_specs("vlans", {"id": "7", "custom": "x"})
        assert specs == {"id": 7, "custom": "x"}


class TestValidation:
    def test_valid(self):
        errors = validate_create("vpc-nat-gateways", "gw-1",
                                 {"lanIp": "10.0.1.1", "subnet": "sub-1", "vpc": "vpc-a"})
        assert errors == {}

    def test_missing_name_and_required(self):
        errors = validate_create("vpc-nat-gateways", "  ", {"lanIp": "10.0.1.1"})
        assert errors == {
            "name": "Name is required",
            "subnet": "Subnet is required",
            "vpc": "VPC is required",
        }

    def test_select_option(self):
        errors = validate_create("subnets", "s", {"cidrBlock": "10.0.0.0/24", "protocol": "IPX"})
        assert "protocol" in errors

    def test_number_type(self):
        errors = validate_create("vlans", "v", {"id": "abc", "provider": "net1"})
        assert errors == {"id": "VLAN ID must be a number"}

    def test_unknown_kind(self):
        with pytest.raises(UnknownResourceKind):
            validate_create("routers", "r", {})
