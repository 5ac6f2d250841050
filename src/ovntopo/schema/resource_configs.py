"""
Declarative form schema for Kube-OVN resource kinds.

Each resource kind maps to a list of FieldSpec descriptors. One generic
create/edit form consumes these, so adding a kind means adding a config
entry rather than a new form.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from ..errors import UnknownResourceKind
from ..ingest.resources import creation_timestamp, resource_name, spec_field, status_field

FIELD_TYPES = ("text", "number", "textarea", "select", "checkbox")

# Spec keys always shown as table columns, whether required or not
KEY_FIELDS = ("cidrBlock", "gateway", "vpc", "subnet", "lanIp", "type")


@dataclass(frozen=True)
class FieldSpec:
    key: str
    label: str
    type: str = "text"
    required: bool = False
    is_array: bool = False
    options: Optional[tuple] = None
    placeholder: Optional[str] = None
    rows: Optional[int] = None

    def __post_init__(self):
        if self.type not in FIELD_TYPES:
            raise ValueError(f"Unknown field type {self.type!r} for {self.key}")

    def to_dict(self) -> dict:
        d = {k: v for k, v in asdict(self).items() if v is not None}
        d["isArray"] = d.pop("is_array")
        if self.options is not None:
            d["options"] = list(self.options)
        return d


@dataclass(frozen=True)
class ResourceConfig:
    display_name: str
    icon: str
    fields: tuple = field(default_factory=tuple)

    def get_field(self, key: str) -> Optional[FieldSpec]:
        for f in self.fields:
            if f.key == key:
                return f
        return None

    def to_dict(self) -> dict:
        return {
            "displayName": self.display_name,
            "icon": self.icon,
            "fields": [f.to_dict() for f in self.fields],
        }


RESOURCE_CONFIGS = {
    "subnets": ResourceConfig("Subnet", "🌐", (
        FieldSpec("cidrBlock", "CIDR Block", placeholder="e.g., 10.0.1.0/24", required=True),
        FieldSpec("gateway", "Gateway", placeholder="e.g., 10.0.1.1"),
        FieldSpec("vpc", "VPC", placeholder="VPC name"),
        FieldSpec("protocol", "Protocol", "select", options=("IPv4", "IPv6", "Dual")),
        FieldSpec("excludeIps", "Exclude IPs", placeholder="Comma separated IPs or ranges", is_array=True),
        FieldSpec("gatewayType", "Gateway Type", "select", options=("distributed", "centralized")),
        FieldSpec("natOutgoing", "NAT Outgoing", "checkbox"),
        FieldSpec("enableLb", "Enable Load Balancer", "checkbox"),
        FieldSpec("private", "Private", "checkbox"),
    )),
    "vpc-nat-gateways": ResourceConfig("VPC NAT Gateway", "🛠️", (
        FieldSpec("lanIp", "LAN IP", placeholder="e.g., 10.0.1.1", required=True),
        FieldSpec("subnet", "Subnet", placeholder="Subnet name", required=True),
        FieldSpec("vpc", "VPC", placeholder="VPC name", required=True),
        FieldSpec("externalSubnets", "External Subnets", placeholder="Comma separated subnet names", is_array=True),
        FieldSpec("selector", "Node Selector", "textarea", placeholder="One selector per line", is_array=True, rows=3),
    )),
    "vpcs": ResourceConfig("VPC", "🏢", (
        FieldSpec("namespaces", "Namespaces", placeholder="Comma separated namespaces", is_array=True),
    )),
    "ips": ResourceConfig("IP", "📋", (
        FieldSpec("podName", "Pod Name", placeholder="Pod name", required=True),
        FieldSpec("namespace", "Namespace", placeholder="Namespace"),
        FieldSpec("subnet", "Subnet", placeholder="Subnet name"),
        FieldSpec("attachSubnets", "Attach Subnets", placeholder="Comma separated subnet names", is_array=True),
        FieldSpec("ipAddress", "IP Address", placeholder="e.g., 10.0.1.100", required=True),
        FieldSpec("macAddress", "MAC Address", placeholder="e.g., aa:bb:cc:dd:ee:ff"),
    )),
    "ippools": ResourceConfig("IP Pool", "🏊", (
        FieldSpec("subnet", "Subnet", placeholder="Subnet name", required=True),
        FieldSpec("ips", "IP Addresses", "textarea", placeholder="One IP per line", is_array=True, rows=5),
        FieldSpec("namespaces", "Namespaces", placeholder="Comma separated namespaces", is_array=True),
    )),
    "security-groups": ResourceConfig("Security Group", "🔒", (
        FieldSpec("ingressRules", "Ingress Rules", "textarea", placeholder="JSON array of ingress rules", rows=4),
        FieldSpec("egressRules", "Egress Rules", "textarea", placeholder="JSON array of egress rules", rows=4),
        FieldSpec("allowSameGroupTraffic", "Allow Same Group Traffic", "checkbox"),
    )),
    "qos-policies": ResourceConfig("QoS Policy", "⚡", (
        FieldSpec("bandwidthLimitRules", "Bandwidth Limit Rules", "textarea",
                  placeholder="JSON array of bandwidth rules", rows=3),
        FieldSpec("priority", "Priority", "number", placeholder="Priority level (0-255)"),
    )),
    "vips": ResourceConfig("Virtual IP", "🎯", (
        FieldSpec("subnet", "Subnet", placeholder="Subnet name", required=True),
        FieldSpec("type", "Type", "select", options=("", "ClusterIP", "NodePort", "LoadBalancer")),
        FieldSpec("attachSubnets", "Attach Subnets", placeholder="Comma separated subnet names", is_array=True),
    )),
    "provider-networks": ResourceConfig("Provider Network", "🌉", (
        FieldSpec("type", "Type", "select", options=("", "vlan", "vxlan", "geneve"), required=True),
        FieldSpec("defaultInterface", "Default Interface", placeholder="Interface name"),
        FieldSpec("customInterfaces", "Custom Interfaces", "textarea",
                  placeholder="JSON array of custom interfaces", rows=3),
        FieldSpec("excludeNodes", "Exclude Nodes", placeholder="Comma separated node names", is_array=True),
    )),
    "vlans": ResourceConfig("VLAN", "🔗", (
        FieldSpec("id", "VLAN ID", "number", placeholder="VLAN ID (1-4094)", required=True),
        FieldSpec("provider", "Provider", placeholder="Provider network name", required=True),
        FieldSpec("subnet", "Subnet", placeholder="Subnet name"),
    )),
    "vpc-dnses": ResourceConfig("VPC DNS", "🔍", (
        FieldSpec("vpc", "VPC", placeholder="VPC name", required=True),
        FieldSpec("dns", "DNS Servers", placeholder="Comma separated DNS servers", is_array=True),
    )),
}


def get_config(kind: str) -> ResourceConfig:
    try:
        return RESOURCE_CONFIGS[kind]
    except KeyError:
        raise UnknownResourceKind(kind) from None


def display_fields(kind: str) -> list:
    """Fields shown as table columns: required ones plus the common key fields."""
    config = RESOURCE_CONFIGS.get(kind)
    if config is None:
        return []
    return [f for f in config.fields if f.required or f.key in KEY_FIELDS]


def get_display_columns(kind: str) -> list:
    if kind not in RESOURCE_CONFIGS:
        return ["Name", "Created"]
    return ["Name"] + [f.label for f in display_fields(kind)] + ["Created", "Actions"]


def get_cell_value(obj: dict, spec_def: FieldSpec) -> str:
    """Render one field of a resource for a table cell (spec first, then status)."""
    if spec_def.type == "checkbox":
        value = spec_field(obj, spec_def.key)
        if value is None:
            value = status_field(obj, spec_def.key)
        if value is None:
            return "N/A"
        return "yes" if value else "no"
    value = spec_field(obj, spec_def.key) or status_field(obj, spec_def.key)
    if not value:
        return "N/A"
    if spec_def.is_array and isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def table_row(kind: str, obj: dict) -> dict:
    row = {"Name": resource_name(obj) or "N/A"}
    for f in display_fields(kind):
        row[f.label] = get_cell_value(obj, f)
    row["Created"] = creation_timestamp(obj) or "N/A"
    return row


def parse_field_input(spec_def: FieldSpec, raw: Any) -> Any:
    """
    Convert raw form input into the value stored in spec.

    Array fields split on commas (text) or newlines (textarea), trimmed,
    with empty entries dropped. Number fields become int or float; an
    unparseable number is returned unchanged for validation to reject.
    """
    if spec_def.is_array:
        if isinstance(raw, list):
            return [str(v).strip() for v in raw if str(v).strip()]
        sep = "\n" if spec_def.type == "textarea" else ","
        return [v.strip() for v in str(raw or "").split(sep) if v.strip()]
    if spec_def.type == "checkbox":
        if isinstance(raw, str):
            return raw.strip().lower() in ("1", "true", "yes", "on")
        return bool(raw)
    if spec_def.type == "number":
        if raw is None or raw == "":
            return None
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return raw
        text = str(raw).strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return raw
    return raw


def parse_specs(kind: str, raw_specs: dict) -> dict:
    """Apply parse_field_input to every known field; unknown keys pass through."""
    config = get_config(kind)
    parsed = {}
    for key, raw in (raw_specs or {}).items():
        f = config.get_field(key)
        parsed[key] = parse_field_input(f, raw) if f else raw
    return parsed


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value is False


def validate_create(kind: str, name: str, specs: dict) -> dict:
    """
    Validate a create request. Returns {field_key: message}; empty means valid.

    The resource name is reported under the "name" key.
    """
    config = get_config(kind)
    specs = specs or {}
    errors = {}
    if not (name or "").strip():
        errors["name"] = "Name is required"
    for f in config.fields:
        value = specs.get(f.key)
        if f.required and _is_empty(value):
            errors[f.key] = f"{f.label} is required"
            continue
        if _is_empty(value):
            continue
        if f.type == "select" and f.options and value not in f.options:
            errors[f.key] = f"{f.label} must be one of: {', '.join(o for o in f.options if o)}"
        elif f.type == "number" and (isinstance(value, bool) or not isinstance(value, (int, float))):
            errors[f.key] = f"{f.label} must be a number"
    return errors
