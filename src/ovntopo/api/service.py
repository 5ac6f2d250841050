"""
Topology service: the fetch / build / mutate loop behind the API.

Collections are fetched concurrently and joined all-or-nothing before the
builder runs. Mutations follow "mutate, re-fetch the whole scope, rebuild"
with no optimistic patching. Fetch failures never propagate to the view:
they become dismissible notifications and the last good graph for the
scope keeps being served.
"""

import itertools
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

from ..errors import ResourceStoreError, VpcNotFound
from ..graph.builder import ALL_VPCS, TopologyGraph, build_overview, build_topology
from ..ingest.resources import GATEWAYS, IPS, SUBNETS, VPCS, ResourceSnapshot
from .client import ResourceStoreClient

logger = logging.getLogger(__name__)

OVERVIEW_COLLECTIONS = (VPCS, SUBNETS, GATEWAYS)
DETAIL_COLLECTIONS = (VPCS, SUBNETS, GATEWAYS, IPS)

# Collections whose fetch failure degrades to an empty list instead of
# failing the whole join
OPTIONAL_COLLECTIONS = frozenset({IPS})


@dataclass
class Notification:
    id: int
    level: str  # "error" | "success"
    message: str
    created: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {"id": self.id, "level": self.level, "message": self.message, "created": self.created}


class TopologyService:
    """
    Fetches resource collections and builds topology graphs on demand.

    The builder keeps no state between calls; this service only remembers
    the last successfully built result per scope so a failed refresh can
    fall back to it.
    """

    def __init__(self, client: ResourceStoreClient, max_workers: int = 4):
        self.client = client
        self.max_workers = max_workers
        self.selection: Optional[tuple] = None
        self._last: dict = {}
        self._notifications: list = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    # -- notifications ---------------------------------------------------

    def notify(self, level: str, message: str) -> Notification:
        with self._lock:
            note = Notification(next(self._ids), level, message)
            self._notifications.append(note)
        return note

    def notifications(self) -> list:
        with self._lock:
            return list(self._notifications)

    def dismiss(self, notification_id: int) -> bool:
        with self._lock:
            before = len(self._notifications)
            self._notifications = [n for n in self._notifications if n.id != notification_id]
            return len(self._notifications) < before

    # -- fetching --------------------------------------------------------

    def _fetch_one(self, kind: str) -> list:
        try:
            return self.client.list(kind)
        except ResourceStoreError as exc:
            if kind in OPTIONAL_COLLECTIONS:
                logger.warning("Fetching %s failed, continuing without it: %s", kind, exc)
                return []
            raise

    def fetch_snapshot(self, kinds: tuple = DETAIL_COLLECTIONS) -> ResourceSnapshot:
        """Fetch the given collections concurrently; any required failure raises."""
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {kind: executor.submit(self._fetch_one, kind) for kind in kinds}
            data = {kind: future.result() for kind, future in futures.items()}
        return ResourceSnapshot.from_dict(data)

    # -- building --------------------------------------------------------

    def _on_activate(self, resource: dict, kind: str):
        logger.debug("Activated %s", kind)
        self.selection = (kind, resource)

    def overview(self) -> list:
        """One graph per VPC. Falls back to the last good overview on fetch failure."""
        try:
            snapshot = self.fetch_snapshot(OVERVIEW_COLLECTIONS)
        except ResourceStoreError as exc:
            logger.error("Error fetching topology data: %s", exc)
            self.notify("error", f"Error fetching topology data: {exc}")
            return self._last.get(ALL_VPCS, [])

        graphs = build_overview(
            snapshot.vpcs, snapshot.subnets, snapshot.gateways, on_activate=self._on_activate,
        )
        self._last[ALL_VPCS] = graphs
        logger.info("Built overview: %d VPC(s)", len(graphs))
        return graphs

    def vpc_detail(self, name: str) -> TopologyGraph:
        """
        Graph of one VPC including its pods.

        Raises VpcNotFound when a fresh snapshot has no such VPC. On fetch
        failure returns the last good graph for the VPC (or an empty one).
        """
        try:
            snapshot = self.fetch_snapshot(DETAIL_COLLECTIONS)
        except ResourceStoreError as exc:
            logger.error("Error fetching VPC data for %s: %s", name, exc)
            self.notify("error", f"Error fetching VPC data: {exc}")
            return self._last.get(name, TopologyGraph(scope=name))

        vpc = snapshot.find_vpc(name)
        if vpc is None:
            self._last.pop(name, None)
            raise VpcNotFound(name)

        graph = build_topology(
            vpc, snapshot.subnets, snapshot.gateways, snapshot.ips,
            on_activate=self._on_activate,
        )
        self._last[name] = graph
        return graph

    def refresh(self, scope: str = ALL_VPCS):
        if scope == ALL_VPCS:
            return self.overview()
        return self.vpc_detail(scope)

    # -- mutations -------------------------------------------------------

    def _mutate(self, action: str, kind: str, name: str, call):
        try:
            result = call()
        except ResourceStoreError as exc:
            message = f"Failed to {action} {kind}: {exc}"
            if exc.body:
                message += f" - {exc.body}"
            self.notify("error", message)
            raise
        logger.info("%s %s/%s", action.capitalize(), kind, name)
        self.notify("success", f"{action.capitalize()}d {kind} {name}")
        return result

    def _refresh_after(self, scope: Optional[str]):
        if scope is None:
            return
        try:
            self.refresh(scope)
        except VpcNotFound:
            logger.info("VPC %s no longer exists after mutation", scope)

    def create(self, kind: str, name: str, spec: dict, namespace: Optional[str] = None, scope: Optional[str] = None):
        result = self._mutate("create", kind, name, lambda: self.client.create(kind, name, spec, namespace))
        self._refresh_after(scope)
        return result

    def update(self, kind: str, name: str, spec: dict, scope: Optional[str] = None):
        result = self._mutate("update", kind, name, lambda: self.client.patch(kind, name, spec))
        self._refresh_after(scope)
        return result

    def delete(self, kind: str, name: str, scope: Optional[str] = None):
        result = self._mutate("delete", kind, name, lambda: self.client.delete(kind, name))
        self._refresh_after(scope)
        return result

    def list_resources(self, kind: str) -> list:
        try:
            return self.client.list(kind)
        except ResourceStoreError as exc:
            self.notify("error", f"Failed to fetch {kind}: {exc}")
            raise
