"""
Topology graph construction.

Transforms independently fetched VPC, subnet, NAT gateway and IP collections
into positioned node/edge graphs. Resources reference each other only by
name (spec.vpc, spec.subnet), so membership and edges are computed by exact
string joins against name-indexed lookups built once per call.

Two modes:
  - detail:   one VPC rendered alone, node ids "{kind}::{name}"
  - overview: one independent graph per VPC rendered side by side, node ids
              namespaced as "{vpc}::{kind}::{name}" so identically named
              resources in different VPCs never collide

IPs without a pod name, or whose subnet is not part of the VPC, are dropped
rather than shown disconnected. Every pod node therefore has exactly one
edge to its subnet.

The builder is pure: inputs are never mutated and identical inputs yield
identical graphs (ids, order and positions).
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Union

import networkx as nx

from ..errors import TopologyIntegrityError
from ..ingest.resources import resource_name, spec_field
from .events import EDITABLE_KINDS, GATEWAY, POD, SUBNET, ActivationEvent
from .layout import DETAIL_LAYOUT, OVERVIEW_LAYOUT, LayoutConfig, Position

logger = logging.getLogger(__name__)

ALL_VPCS = "all"
PLACEHOLDER = "N/A"
DEFAULT_NAMESPACE = "default"

# Edge roles
GATEWAY_LINK = "gateway"
POD_LINK = "pod"

ActivateCallback = Callable[[dict, str], None]


@dataclass
class TopologyNode:
    """A positioned node wrapping one original resource object."""
    id: str
    kind: str
    name: str
    label: str
    info: str
    position: Position
    resource: dict
    on_activate: Optional[ActivateCallback] = field(default=None, repr=False, compare=False)

    @property
    def editable(self) -> bool:
        return self.kind in EDITABLE_KINDS

    def activate(self) -> Optional[ActivationEvent]:
        """
        Emit an ActivationEvent for an editable node.

        The builder's on_activate callback, when given, receives
        (resource, kind). Pod nodes return None and never invoke it.
        """
        if not self.editable:
            return None
        event = ActivationEvent(kind=self.kind, resource=self.resource, node_id=self.id)
        if self.on_activate is not None:
            self.on_activate(self.resource, self.kind)
        return event

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind,
            "name": self.name,
            "label": self.label,
            "info": self.info,
            "position": {"x": self.position.x, "y": self.position.y},
            "editable": self.editable,
        }


@dataclass
class TopologyEdge:
    id: str
    source: str
    target: str
    role: str
    label: str
    animated: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "role": self.role,
            "label": self.label,
            "animated": self.animated,
        }


@dataclass
class TopologyGraph:
    """Nodes and edges for one VPC scope."""
    scope: Optional[str]
    nodes: list = field(default_factory=list)
    edges: list = field(default_factory=list)
    namespaced: bool = False

    def node(self, node_id: str) -> Optional[TopologyNode]:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def nodes_of_kind(self, kind: str) -> list:
        return [n for n in self.nodes if n.kind == kind]

    def counts(self) -> dict:
        kinds = Counter(n.kind for n in self.nodes)
        return {
            "subnets": kinds.get(SUBNET, 0),
            "gateways": kinds.get(GATEWAY, 0),
            "pods": kinds.get(POD, 0),
        }

    def validate(self):
        """Raise TopologyIntegrityError on duplicate ids or dangling edges."""
        dup_nodes = [i for i, c in Counter(n.id for n in self.nodes).items() if c > 1]
        if dup_nodes:
            raise TopologyIntegrityError(f"Duplicate node ids: {dup_nodes}")
        dup_edges = [i for i, c in Counter(e.id for e in self.edges).items() if c > 1]
        if dup_edges:
            raise TopologyIntegrityError(f"Duplicate edge ids: {dup_edges}")
        ids = {n.id for n in self.nodes}
        dangling = [e.id for e in self.edges if e.source not in ids or e.target not in ids]
        if dangling:
            raise TopologyIntegrityError(f"Dangling edges: {dangling}")

    def to_networkx(self) -> nx.DiGraph:
        """Directed graph with node/edge attributes, ids as node keys."""
        G = nx.DiGraph(scope=self.scope)
        for n in self.nodes:
            G.add_node(
                n.id, kind=n.kind, name=n.name, label=n.label, info=n.info,
                x=n.position.x, y=n.position.y,
            )
        for e in self.edges:
            G.add_edge(e.source, e.target, id=e.id, role=e.role, label=e.label)
        return G

    def to_dict(self) -> dict:
        return {
            "scope": self.scope,
            "namespaced": self.namespaced,
            "counts": self.counts(),
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


def node_id(kind: str, name: str, prefix: Optional[str] = None) -> str:
    """Synthesize "{prefix}::{kind}::{name}" (prefix omitted in detail mode)."""
    if prefix:
        return f"{prefix}::{kind}::{name}"
    return f"{kind}::{name}"


def edge_id(role: str, source_name: str, target_name: str, prefix: Optional[str] = None) -> str:
    base = f"edge::{role}::{source_name}::{target_name}"
    if prefix:
        return f"{prefix}::{base}"
    return base


def _index_by_name(resources: Iterable, kind: str) -> dict:
    """name -> resource, first occurrence wins. Unnamed resources are skipped."""
    index = {}
    for res in resources:
        name = resource_name(res)
        if name is None:
            continue
        if name in index:
            logger.debug("Skipping duplicate %s %r", kind, name)
            continue
        index[name] = res
    return index


def _ref(obj, key: str) -> Optional[str]:
    """A by-name reference from obj.spec; non-string values count as absent."""
    value = spec_field(obj, key)
    return value if isinstance(value, str) else None


def _display(value) -> str:
    if value is None or value == "":
        return PLACEHOLDER
    return str(value)


def scope_gateways(gateways: Iterable, vpc_name: str) -> dict:
    """Gateways whose spec.vpc equals vpc_name, keyed by name in input order."""
    return _index_by_name(
        (g for g in gateways if _ref(g, "vpc") == vpc_name), GATEWAY,
    )


def scope_subnets(subnets: Iterable, vpc_name: str) -> dict:
    return _index_by_name(
        (s for s in subnets if _ref(s, "vpc") == vpc_name), SUBNET,
    )


def scope_bindings(address_bindings: Iterable, scoped_subnets: dict) -> dict:
    """IPs with a pod name whose spec.subnet names one of scoped_subnets."""
    return _index_by_name(
        (
            ip for ip in address_bindings
            if spec_field(ip, "podName") and _ref(ip, "subnet") in scoped_subnets
        ),
        POD,
    )


def build_topology(
    scope: Union[dict, str],
    subnets: Iterable,
    gateways: Iterable,
    address_bindings: Optional[Iterable] = None,
    on_activate: Optional[ActivateCallback] = None,
    namespaced: bool = False,
    layout: Optional[LayoutConfig] = None,
) -> TopologyGraph:
    """
    Build the graph of a single VPC.

    Args:
        scope: VPC resource or VPC name.
        subnets: Subnet resources (any VPC).
        gateways: VPC NAT gateway resources (any VPC).
        address_bindings: IP resources, or None to omit the pod tier.
        on_activate: Called with (resource, kind) when an editable node is
            activated.
        namespaced: Prefix every id with the VPC name. Set when several
            VPC graphs are rendered in the same view.
        layout: Tier placement; defaults to the overview layout when
            namespaced, the detail layout otherwise.
    """
    vpc_name = scope if isinstance(scope, str) else resource_name(scope)
    graph = TopologyGraph(scope=vpc_name or None, namespaced=namespaced)
    if not vpc_name:
        return graph

    if layout is None:
        layout = OVERVIEW_LAYOUT if namespaced else DETAIL_LAYOUT
    prefix = vpc_name if namespaced else None

    vpc_gateways = scope_gateways(gateways, vpc_name)
    vpc_subnets = scope_subnets(subnets, vpc_name)
    vpc_pods = {}
    if address_bindings is not None:
        vpc_pods = scope_bindings(address_bindings, vpc_subnets)

    for i, (name, gw) in enumerate(vpc_gateways.items()):
        graph.nodes.append(TopologyNode(
            id=node_id(GATEWAY, name, prefix),
            kind=GATEWAY,
            name=name,
            label=f"NAT Gateway: {name}",
            info=f"LAN IP: {_display(spec_field(gw, 'lanIp'))}",
            position=layout.gateway.position(i),
            resource=gw,
            on_activate=on_activate,
        ))

    # subnet name -> gateways attached to it, in gateway order
    gateways_by_subnet = {}
    for name, gw in vpc_gateways.items():
        gateways_by_subnet.setdefault(_ref(gw, "subnet"), []).append(name)

    for i, (name, subnet) in enumerate(vpc_subnets.items()):
        subnet_node = node_id(SUBNET, name, prefix)
        graph.nodes.append(TopologyNode(
            id=subnet_node,
            kind=SUBNET,
            name=name,
            label=f"Subnet: {name}",
            info=f"CIDR: {_display(spec_field(subnet, 'cidrBlock'))}",
            position=layout.subnet.position(i),
            resource=subnet,
            on_activate=on_activate,
        ))
        for gw_name in gateways_by_subnet.get(name, []):
            graph.edges.append(TopologyEdge(
                id=edge_id(GATEWAY_LINK, gw_name, name, prefix),
                source=node_id(GATEWAY, gw_name, prefix),
                target=subnet_node,
                role=GATEWAY_LINK,
                label="Connected",
                animated=True,
            ))

    for i, (name, ip) in enumerate(vpc_pods.items()):
        pod_name = spec_field(ip, "podName")
        subnet_name = _ref(ip, "subnet")
        pod_node = node_id(POD, name, prefix)
        graph.nodes.append(TopologyNode(
            id=pod_node,
            kind=POD,
            name=name,
            label=str(pod_name),
            info=(
                f"IP: {_display(spec_field(ip, 'ipAddress'))}"
                f" | NS: {spec_field(ip, 'namespace') or DEFAULT_NAMESPACE}"
            ),
            position=layout.pod.position(i),
            resource=ip,
        ))
        graph.edges.append(TopologyEdge(
            id=edge_id(POD_LINK, subnet_name, name, prefix),
            source=node_id(SUBNET, subnet_name, prefix),
            target=pod_node,
            role=POD_LINK,
            label="Pod",
        ))

    logger.debug(
        "Built topology for %s: %d nodes, %d edges",
        vpc_name, len(graph.nodes), len(graph.edges),
    )
    return graph


def build_overview(
    vpcs: Iterable,
    subnets: Iterable,
    gateways: Iterable,
    on_activate: Optional[ActivateCallback] = None,
    layout: LayoutConfig = OVERVIEW_LAYOUT,
) -> list:
    """One namespaced graph per VPC, in VPC input order. Duplicate VPC names are skipped."""
    subnets = list(subnets)
    gateways = list(gateways)
    return [
        build_topology(vpc, subnets, gateways, on_activate=on_activate,
                       namespaced=True, layout=layout)
        for vpc in _index_by_name(vpcs, "vpc").values()
    ]


def build(
    scope: Union[dict, str],
    subnets: Iterable,
    gateways: Iterable,
    address_bindings: Optional[Iterable] = None,
    on_activate: Optional[ActivateCallback] = None,
    vpcs: Optional[Iterable] = None,
):
    """
    Dispatch between overview and detail mode.

    With scope == ALL_VPCS, returns a list of graphs (one per entry in
    vpcs); address_bindings are ignored. Otherwise returns a single
    TopologyGraph for the given VPC.

    Raises:
        ValueError: overview mode was requested without a vpcs collection.
    """
    if isinstance(scope, str) and scope == ALL_VPCS:
        if vpcs is None:
            raise ValueError("Overview mode requires the vpcs collection")
        return build_overview(vpcs, subnets, gateways, on_activate=on_activate)
    return build_topology(scope, subnets, gateways, address_bindings, on_activate)
