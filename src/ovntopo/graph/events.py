"""
Node activation events.

Selecting an editable node in a rendered graph produces an ActivationEvent
that the shell routes to the edit/delete flow for the underlying resource.
Pod nodes are read-only and never produce one.
"""

from dataclasses import dataclass

from ..ingest.resources import GATEWAYS, SUBNETS, resource_name

SUBNET = "subnet"
GATEWAY = "gateway"
POD = "pod"

EDITABLE_KINDS = frozenset({SUBNET, GATEWAY})

# node kind -> REST collection that owns the resource
KIND_COLLECTIONS = {
    SUBNET: SUBNETS,
    GATEWAY: GATEWAYS,
}


@dataclass(frozen=True)
class ActivationEvent:
    kind: str
    resource: dict
    node_id: str

    @property
    def collection(self) -> str:
        return KIND_COLLECTIONS[self.kind]

    @property
    def resource_name(self) -> str:
        return resource_name(self.resource) or ""


def route_activation(event: ActivationEvent) -> tuple:
    """Return (collection, name) addressing the activated resource in the API."""
    return event.collection, event.resource_name
