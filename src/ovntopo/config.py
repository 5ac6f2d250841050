"""
Runtime configuration for ovntopo.

Values that depend on the deployment (resource API location, timeouts,
fetch fan-out) live here. Override by constructing a new OvnTopoConfig or
by setting the OVNTOPO_* environment variables and calling from_env().
"""

import os
from dataclasses import dataclass


DEFAULT_API_URL = "http://localhost:8000/api"


@dataclass(frozen=True)
class OvnTopoConfig:
    """Immutable settings for the presentation shell."""

    api_base_url: str = DEFAULT_API_URL
    # Root of the Kube-OVN REST API. Collections live at {api_base_url}/{kind}.

    request_timeout: float = 30.0
    # Seconds before a single HTTP request is abandoned.

    max_fetch_workers: int = 4
    # Threads used to fetch vpcs/subnets/gateways/ips concurrently.

    @classmethod
    def from_env(cls) -> "OvnTopoConfig":
        """Build a config from OVNTOPO_API_URL, OVNTOPO_TIMEOUT and OVNTOPO_WORKERS."""
        return cls(
            api_base_url=os.environ.get("OVNTOPO_API_URL", DEFAULT_API_URL).rstrip("/"),
            request_timeout=float(os.environ.get("OVNTOPO_TIMEOUT", "30")),
            max_fetch_workers=int(os.environ.get("OVNTOPO_WORKERS", "4")),
        )


DEFAULT_CONFIG = OvnTopoConfig()
