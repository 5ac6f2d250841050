"""Tests for REST API."""

import pytest
import json

try:
    from ovntopo.api.routes import TopologyAPI
    HAS_FLASK = True
except ImportError:
    HAS_FLASK = False

from ovntopo.api.service import TopologyService

from conftest import FakeClient


@pytest.fixture
def client_and_store():
    if not HAS_FLASK:
        pytest.skip("Flask not installed")
    fake = FakeClient()
    api = TopologyAPI(TopologyService(fake))
    app = api.create_app()
    app.config["TESTING"] = True
    return app.test_client(), fake


@pytest.fixture
def api_client(client_and_store):
    return client_and_store[0]


class TestTopologyAPI:
    def test_health(self, api_client):
        resp = api_client.get("/api/v1/health")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["status"] == "ok"
        assert data["api_base_url"] == "http://fake/api"

    def test_overview(self, api_client):
        resp = api_client.get("/api/v1/topology")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["count"] == 2
        vpc_a = data["vpcs"][0]
        assert vpc_a["scope"] == "vpc-a"
        assert vpc_a["counts"] == {"subnets": 2, "gateways": 1, "pods": 0}
        assert vpc_a["nodes"][0]["id"] == "vpc-a::gateway::gw-1"

    def test_vpc_detail(self, api_client):
        resp = api_client.get("/api/v1/topology/vpc/vpc-a")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["counts"]["pods"] == 2
        ids = {n["id"] for n in data["nodes"]}
        for e in data["edges"]:
            assert e["source"] in ids and e["target"] in ids

    def test_vpc_not_found(self, api_client):
        resp = api_client.get("/api/v1/topology/vpc/NONEXISTENT")
        assert resp.status_code == 404

    def test_fetch_failure_becomes_notification(self, client_and_store):
        api_client, fake = client_and_store
        fake.failing.add("vpcs")
        resp = api_client.get("/api/v1/topology")
        assert resp.status_code == 200
        assert resp.get_json()["count"] == 0
        notes = api_client.get("/api/v1/notifications").get_json()
        assert notes["count"] == 1
        note_id = notes["notifications"][0]["id"]
        assert api_client.delete(f"/api/v1/notifications/{note_id}").status_code == 200
        assert api_client.delete(f"/api/v1/notifications/{note_id}").status_code == 404


class TestSchemaAPI:
    def test_schema(self, api_client):
        resp = api_client.get("/api/v1/schema/subnets")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["displayName"] == "Subnet"
        assert "CIDR Block" in data["columns"]

    def test_schema_all(self, api_client):
        data = api_client.get("/api/v1/schema").get_json()
        assert "vpc-nat-gateways" in data

    def test_schema_unknown(self, api_client):
        assert api_client.get("/api/v1/schema/routers").status_code == 404


class TestResourceAPI:
    def test_list(self, api_client):
        resp = api_client.get("/api/v1/resources/subnets?search=vpc-a&order=desc")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["count"] == 2
        assert [r["Name"] for r in data["rows"]] == ["sub-2", "sub-1"]

    def test_list_unknown_kind(self, api_client):
        assert api_client.get("/api/v1/resources/routers").status_code == 404

    def test_list_upstream_failure(self, client_and_store):
        api_client, fake = client_and_store
        fake.failing.add("subnets")
        assert api_client.get("/api/v1/resources/subnets").status_code == 502

    def test_create_validation(self, api_client):
        resp = api_client.post(
            "/api/v1/resources/vpc-nat-gateways",
            data=json.dumps({"name": "gw-2", "spec": {"lanIp": "10.0.2.1"}}),
            content_type="application/json",
        )
        assert resp.status_code == 400
        assert set(resp.get_json()["fields"]) == {"subnet", "vpc"}

    def test_create(self, client_and_store):
        api_client, fake = client_and_store
        resp = api_client.post(
            "/api/v1/resources/subnets?scope=vpc-a",
            data=json.dumps({"name": "sub-9", "spec": {
                "cidrBlock": "10.0.9.0/24", "vpc": "vpc-a", "excludeIps": "10.0.9.1, 10.0.9.2",
            }}),
            content_type="application/json",
        )
        assert resp.status_code == 201
        created = fake.store["subnets"][-1]
        assert created["spec"]["excludeIps"] == ["10.0.9.1", "10.0.9.2"]

    def test_patch(self, client_and_store):
        api_client, fake = client_and_store
        resp = api_client.patch(
            "/api/v1/resources/vpc-nat-gateways/gw-1",
            data=json.dumps({"spec": {"vpc": "vpc-a", "subnet": "sub-2", "lanIp": "10.0.2.1"}}),
            content_type="application/json",
        )
        assert resp.status_code == 200
        detail = api_client.get("/api/v1/topology/vpc/vpc-a").get_json()
        gw_edges = [e for e in detail["edges"] if e["role"] == "gateway"]
        assert gw_edges[0]["target"] == "subnet::sub-2"

    def test_patch_requires_spec(self, api_client):
        resp = api_client.patch(
            "/api/v1/resources/subnets/sub-1",
            data=json.dumps({"cidrBlock": "x"}),
            content_type="application/json",
        )
        assert resp.status_code == 400

    def test_patch_spec_must_be_object(self, api_client):
        resp = api_client.patch(
            "/api/v1/resources/subnets/sub-1",
            data=json.dumps({"spec": "x"}),
            content_type="application/json",
        )
        assert resp.status_code == 400

    @pytest.mark.parametrize("body", [
        [1],
        {"name": 7, "spec": {"vpc": "vpc-a"}},
        {"name": "sub-9", "spec": "10.0.9.0/24"},
    ])
    def test_create_malformed_body(self, client_and_store, body):
        api_client, fake = client_and_store
        resp = api_client.post(
            "/api/v1/resources/subnets",
            data=json.dumps(body),
            content_type="application/json",
        )
        assert resp.status_code == 400
        assert len(fake.store["subnets"]) == 3

    def test_delete(self, client_and_store):
        api_client, fake = client_and_store
        resp = api_client.delete("/api/v1/resources/subnets/sub-2?scope=vpc-a")
        assert resp.status_code == 200
        assert "sub-2" not in [s["metadata"]["name"] for s in fake.store["subnets"]]

    def test_delete_missing(self, api_client):
        resp = api_client.delete("/api/v1/resources/subnets/nope")
        assert resp.status_code == 502
        assert resp.get_json()["error"].startswith("DELETE subnets/nope failed")
