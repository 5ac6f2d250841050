"""Shared fixtures: sample resources and an in-memory resource store."""

import copy

import pytest

from ovntopo.errors import ResourceStoreError


def vpc(name):
    return {"metadata": {"name": name}, "spec": {}}


def subnet(name, vpc_name, cidr="10.0.1.0/24", **extra):
    spec = {"vpc": vpc_name, "cidrBlock": cidr}
    spec.update(extra)
    return {"metadata": {"name": name, "creationTimestamp": "2024-01-01T00:00:00Z"}, "spec": spec}


def gateway(name, vpc_name, subnet_name, lan_ip="10.0.1.1"):
    return {
        "metadata": {"name": name},
        "spec": {"vpc": vpc_name, "subnet": subnet_name, "lanIp": lan_ip},
    }


def ip(name, pod_name, subnet_name, address="10.0.1.10", namespace="default"):
    return {
        "metadata": {"name": name},
        "spec": {
            "podName": pod_name,
            "namespace": namespace,
            "subnet": subnet_name,
            "ipAddress": address,
        },
    }


def sample_store():
    return {
        "vpcs": [vpc("vpc-a"), vpc("vpc-b")],
        "subnets": [
            subnet("sub-1", "vpc-a", "10.0.1.0/24"),
            subnet("sub-2", "vpc-a", "10.0.2.0/24"),
            subnet("sub-b", "vpc-b", "10.1.0.0/24"),
        ],
        "vpc-nat-gateways": [
            gateway("gw-1", "vpc-a", "sub-1"),
            gateway("gw-b", "vpc-b", "sub-b", "10.1.0.1"),
        ],
        "ips": [
            ip("pod-a.default", "pod-a", "sub-1", "10.0.1.10"),
            ip("pod-b.default", "pod-b", "sub-2", "10.0.2.10"),
            ip("pod-c.default", "pod-c", "sub-b", "10.1.0.10"),
            ip("node-ip", "", "sub-1", "10.0.1.2"),
        ],
    }


class FakeClient:
    """In-memory stand-in for ResourceStoreClient."""

    def __init__(self, store=None):
        self.base_url = "http://fake/api"
        self.store = store if store is not None else sample_store()
        self.failing = set()
        self.calls = []

    def _check(self, op, kind):
        self.calls.append((op, kind))
        if kind in self.failing or op in self.failing:
            raise ResourceStoreError(f"{op} {kind} failed: 500 Internal Server Error",
                                     status=500, body="boom")

    def list(self, kind):
        self._check("list", kind)
        return copy.deepcopy(self.store.get(kind, []))

    def create(self, kind, name, spec, namespace=None):
        self._check("create", kind)
        obj = {"metadata": {"name": name}, "spec": dict(spec)}
        if namespace:
            obj["metadata"]["namespace"] = namespace
        self.store.setdefault(kind, []).append(obj)
        return obj

    def patch(self, kind, name, spec):
        self._check("patch", kind)
        for obj in self.store.get(kind, []):
            if obj["metadata"]["name"] == name:
                obj["spec"] = dict(spec)
                return obj
        raise ResourceStoreError(f"PATCH {kind}/{name} failed: 404 Not Found", status=404)

    def delete(self, kind, name):
        self._check("delete", kind)
        before = len(self.store.get(kind, []))
        self.store[kind] = [o for o in self.store.get(kind, []) if o["metadata"]["name"] != name]
        if len(self.store[kind]) == before:
            raise ResourceStoreError(f"DELETE {kind}/{name} failed: 404 Not Found", status=404)
        return None


@pytest.fixture
def fake_client():
    return FakeClient()
