"""
ovntopo — Kube-OVN network topology graph builder.

Turns flat VPC, subnet, NAT gateway and IP collections fetched from a
Kube-OVN resource API into positioned node/edge graphs, scoped globally or
to one VPC, and serves them alongside schema-driven resource editing.

License: MIT
"""

__version__ = "0.1.0"
