"""
Kube-OVN resource accessors and snapshots.

Resources arrive as Kubernetes-style JSON objects. Every accessor here is
total: a missing metadata block, spec block or field yields None rather
than an exception, so callers can treat stale or partial objects the same
as complete ones.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger(__name__)

# REST collection names exposed by the resource API
VPCS = "vpcs"
SUBNETS = "subnets"
GATEWAYS = "vpc-nat-gateways"
IPS = "ips"

TOPOLOGY_COLLECTIONS = (VPCS, SUBNETS, GATEWAYS, IPS)


def resource_name(obj: Any) -> Optional[str]:
    """Return metadata.name, falling back to a top-level name key."""
    if not isinstance(obj, dict):
        return None
    metadata = obj.get("metadata")
    if isinstance(metadata, dict):
        name = metadata.get("name")
        if isinstance(name, str) and name:
            return name
    name = obj.get("name")
    return name if isinstance(name, str) and name else None


def spec_field(obj: Any, key: str) -> Any:
    """Return obj.spec[key], or None when either is missing."""
    if not isinstance(obj, dict):
        return None
    spec = obj.get("spec")
    if not isinstance(spec, dict):
        return None
    return spec.get(key)


def status_field(obj: Any, key: str) -> Any:
    if not isinstance(obj, dict):
        return None
    status = obj.get("status")
    if not isinstance(status, dict):
        return None
    return status.get(key)


def creation_timestamp(obj: Any) -> str:
    if not isinstance(obj, dict):
        return ""
    metadata = obj.get("metadata")
    if not isinstance(metadata, dict):
        return ""
    return metadata.get("creationTimestamp") or ""


def as_list(value: Any) -> list:
    """Coerce a decoded collection payload to a list; anything else is empty."""
    return list(value) if isinstance(value, list) else []


@dataclass
class ResourceSnapshot:
    """One fetched snapshot of the four topology collections."""
    vpcs: list = field(default_factory=list)
    subnets: list = field(default_factory=list)
    gateways: list = field(default_factory=list)
    ips: list = field(default_factory=list)

    def find_vpc(self, name: str) -> Optional[dict]:
        for vpc in self.vpcs:
            if resource_name(vpc) == name:
                return vpc
        return None

    @classmethod
    def from_dict(cls, data: dict) -> "ResourceSnapshot":
        """
        Build a snapshot from a mapping keyed by collection name.

        Accepts both the REST names ("vpc-nat-gateways") and the short
        attribute names ("gateways"). Non-list values become empty lists.
        """
        if not isinstance(data, dict):
            data = {}
        gateways = data.get(GATEWAYS, data.get("gateways"))
        snapshot = cls(
            vpcs=as_list(data.get(VPCS)),
            subnets=as_list(data.get(SUBNETS)),
            gateways=as_list(gateways),
            ips=as_list(data.get(IPS)),
        )
        logger.debug(
            "Loaded snapshot: %d vpcs, %d subnets, %d gateways, %d ips",
            len(snapshot.vpcs), len(snapshot.subnets),
            len(snapshot.gateways), len(snapshot.ips),
        )
        return snapshot

    @classmethod
    def from_file(cls, filepath: str) -> "ResourceSnapshot":
        with open(filepath) as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> dict:
        return {
            VPCS: self.vpcs,
            SUBNETS: self.subnets,
            GATEWAYS: self.gateways,
            IPS: self.ips,
        }

    def collection(self, kind: str) -> list:
        """Return the list held for a REST collection name (empty if unknown)."""
        return self.to_dict().get(kind, [])
