"""Tests for activation events."""

from ovntopo.graph.events import EDITABLE_KINDS, ActivationEvent, route_activation


class TestActivationEvent:
    def test_route_subnet(self):
        event = ActivationEvent("subnet", {"metadata": {"name": "sub-1"}}, "subnet::sub-1")
        assert route_activation(event) == ("subnets", "sub-1")

    def test_route_gateway(self):
        event = ActivationEvent("gateway", {"metadata": {"name": "gw-1"}}, "vpc-a::gateway::gw-1")
        assert route_activation(event) == ("vpc-nat-gateways", "gw-1")

    def test_pods_not_editable(self):
        assert "pod" not in EDITABLE_KINDS
