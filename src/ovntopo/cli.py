"""
ovntopo CLI — Command-line interface for the Kube-OVN topology builder.

Commands:
  overview  — Summarize every VPC in a snapshot file
  vpc       — Build and export one VPC's topology
  resources — List a resource collection as a table
  fetch     — Fetch a live snapshot from the resource API
  serve     — Start the topology REST API
  demo      — Build and export a sample topology
"""

import json
import logging
import sys

try:
    import click
except ImportError:
    print("Click is required: pip install click")
    sys.exit(1)

from .config import OvnTopoConfig
from .errors import OvnTopoError
from .ingest.resources import GATEWAYS, IPS, SUBNETS, VPCS, ResourceSnapshot

logger = logging.getLogger("ovntopo.cli")


def _setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


@click.group()
@click.version_option(version="0.1.0", prog_name="ovntopo")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """ovntopo — Kube-OVN network topology graph builder."""
    _setup_logging(verbose)


@cli.command()
@click.argument("snapshot", type=click.Path(exists=True))
@click.option("--format", "-f", "fmt", type=click.Choice(["text", "json", "mermaid", "html"]), default="text")
@click.option("--output", "-o", default=None, help="Output file")
def overview(snapshot, fmt, output):
    """Build one topology graph per VPC in a snapshot file."""
    from .graph.builder import build_overview

    snap = ResourceSnapshot.from_file(snapshot)
    graphs = build_overview(snap.vpcs, snap.subnets, snap.gateways)

    if fmt == "text":
        if not graphs:
            click.echo("No VPCs found")
        for g in graphs:
            counts = g.counts()
            click.echo(f"VPC: {g.scope}  {counts['subnets']} subnet(s), {counts['gateways']} gateway(s)")
        return

    _emit(graphs, fmt, output, title="Kube-OVN Network Topology")


@cli.command()
@click.argument("snapshot", type=click.Path(exists=True))
@click.argument("name")
@click.option("--format", "-f", "fmt", type=click.Choice(["text", "json", "mermaid", "html"]), default="text")
@click.option("--output", "-o", default=None, help="Output file")
def vpc(snapshot, name, fmt, output):
    """Build the detail topology of one VPC, pods included."""
    from .graph.builder import build_topology

    snap = ResourceSnapshot.from_file(snapshot)
    target = snap.find_vpc(name)
    if target is None:
        click.echo(f'VPC "{name}" not found', err=True)
        sys.exit(1)

    graph = build_topology(target, snap.subnets, snap.gateways, snap.ips)

    if fmt == "text":
        counts = graph.counts()
        click.echo(f"VPC: {name}")
        click.echo(f"  {counts['subnets']} Subnet(s), {counts['gateways']} Gateway(s), {counts['pods']} Pod(s)")
        for n in graph.nodes:
            click.echo(f"  [{n.kind}] {n.label} ({n.info}) @ {n.position.x},{n.position.y}")
        for e in graph.edges:
            click.echo(f"  {e.source} -> {e.target} ({e.label})")
        return

    _emit(graph, fmt, output, title=f"VPC: {name}")


def _emit(graphs, fmt, output, title):
    from .graph.builder import TopologyGraph
    from .viz.export import HTMLExporter, MermaidExporter

    if fmt == "json":
        if isinstance(graphs, TopologyGraph):
            content = json.dumps(graphs.to_dict(), indent=2, default=str)
        else:
            content = json.dumps([g.to_dict() for g in graphs], indent=2, default=str)
    elif fmt == "mermaid":
        content = MermaidExporter.to_mermaid(graphs, title=title)
    else:
        content = HTMLExporter.to_html(graphs, title=title)

    if output:
        with open(output, "w") as f:
            f.write(content)
        click.echo(f"Exported to {output}")
    else:
        click.echo(content)


@cli.command()
@click.argument("snapshot", type=click.Path(exists=True))
@click.argument("kind", type=click.Choice([VPCS, SUBNETS, GATEWAYS, IPS]))
@click.option("--search", "-s", default="", help="Filter by name or spec value")
@click.option("--sort", "sort_field", default="name", help="name, created or a spec field")
@click.option("--desc", is_flag=True, help="Sort descending")
def resources(snapshot, kind, search, sort_field, desc):
    """List one resource collection from a snapshot file."""
    from .schema.resource_configs import get_display_columns, table_row
    from .schema.table import filter_and_sort

    snap = ResourceSnapshot.from_file(snapshot)
    items = filter_and_sort(snap.collection(kind), search, sort_field, desc)
    columns = [c for c in get_display_columns(kind) if c != "Actions"]

    click.echo("\t".join(columns))
    for obj in items:
        row = table_row(kind, obj)
        click.echo("\t".join(str(row.get(c, "")) for c in columns))
    click.echo(f"{len(items)} items")


@cli.command()
@click.option("--api-url", default=None, help="Resource API root (default: $OVNTOPO_API_URL)")
@click.option("--output", "-o", required=True, help="Snapshot file to write")
def fetch(api_url, output):
    """Fetch vpcs, subnets, gateways and ips into a snapshot file."""
    from .api.client import ResourceStoreClient
    from .api.service import TopologyService

    config = OvnTopoConfig.from_env()
    client = ResourceStoreClient(api_url or config.api_base_url, config.request_timeout)
    service = TopologyService(client, max_workers=config.max_fetch_workers)
    try:
        snap = service.fetch_snapshot()
    except OvnTopoError as exc:
        click.echo(f"Fetch failed: {exc}", err=True)
        sys.exit(1)

    with open(output, "w") as f:
        json.dump(snap.to_dict(), f, indent=2, default=str)
    click.echo(f"Saved {len(snap.vpcs)} VPC(s) to {output}")


@cli.command()
@click.option("--api-url", default=None, help="Resource API root (default: $OVNTOPO_API_URL)")
@click.option("--host", default="0.0.0.0", help="Listen host")
@click.option("--port", "-p", default=5000, help="Listen port")
@click.option("--debug", is_flag=True, help="Flask debug mode")
def serve(api_url, host, port, debug):
    """Start the topology REST API."""
    from .api.client import ResourceStoreClient
    from .api.routes import TopologyAPI
    from .api.service import TopologyService

    config = OvnTopoConfig.from_env()
    client = ResourceStoreClient(api_url or config.api_base_url, config.request_timeout)
    service = TopologyService(client, max_workers=config.max_fetch_workers)
    app = TopologyAPI(service).create_app()

    click.echo(f"Serving topology for {client.base_url} on {host}:{port}")
    app.run(host=host, port=port, debug=debug)


@cli.command()
@click.option("--output", "-o", default="/tmp/ovntopo-demo.html", help="HTML output file")
def demo(output):
    """Build a sample topology and export it to HTML."""
    from .graph.builder import build_overview, build_topology
    from .viz.export import HTMLExporter, MermaidExporter

    click.echo("=" * 60)
    click.echo("  ovntopo Demo — Kube-OVN Network Topology")
    click.echo("=" * 60)

    snap = _build_demo_snapshot()
    click.echo(f"\n[1/3] Sample snapshot: {len(snap.vpcs)} VPCs, {len(snap.subnets)} subnets, "
               f"{len(snap.gateways)} gateways, {len(snap.ips)} IPs")

    click.echo("\n[2/3] Building overview...")
    graphs = build_overview(snap.vpcs, snap.subnets, snap.gateways)
    for g in graphs:
        g.validate()
        counts = g.counts()
        click.echo(f"  {g.scope}: {counts['subnets']} subnet(s), {counts['gateways']} gateway(s), "
                   f"{len(g.edges)} edge(s)")

    click.echo("\n[3/3] Building detail view for vpc-a...")
    detail = build_topology(snap.find_vpc("vpc-a"), snap.subnets, snap.gateways, snap.ips)
    detail.validate()
    click.echo(f"  Nodes: {len(detail.nodes)}, Edges: {len(detail.edges)}")

    HTMLExporter.save(output, graphs, title="ovntopo Demo")
    click.echo(f"  HTML topology: {output}")
    mermaid = MermaidExporter.to_mermaid(detail, title="vpc-a")
    click.echo(f"  Mermaid diagram: {len(mermaid)} chars")


def _build_demo_snapshot() -> ResourceSnapshot:
    """Two VPCs that both own a subnet named "default", plus pods."""
    vpcs = [{"metadata": {"name": "vpc-a"}}, {"metadata": {"name": "vpc-b"}}]
    subnets = []
    gateways = []
    ips = []
    for v, octet in (("vpc-a", 10), ("vpc-b", 20)):
        for i, sub in enumerate(("default", "app", "db")):
            subnets.append({
                "metadata": {"name": sub if sub == "default" else f"{v}-{sub}"},
                "spec": {"vpc": v, "cidrBlock": f"10.{octet}.{i}.0/24"},
            })
        gateways.append({
            "metadata": {"name": f"{v}-gw"},
            "spec": {"vpc": v, "subnet": f"{v}-app", "lanIp": f"10.{octet}.1.254"},
        })

    for i in range(8):
        sub = "vpc-a-app" if i % 2 else "vpc-a-db"
        ips.append({
            "metadata": {"name": f"web-{i}.default"},
            "spec": {"podName": f"web-{i}", "namespace": "default",
                     "subnet": sub, "ipAddress": f"10.10.{1 if i % 2 else 2}.{10 + i}"},
        })
    # Node IP without a pod name never shows up
    ips.append({"metadata": {"name": "node-1"}, "spec": {"subnet": "vpc-a-app", "ipAddress": "10.10.1.2"}})

    return ResourceSnapshot(vpcs=vpcs, subnets=subnets, gateways=gateways, ips=ips)


if __name__ == "__main__":
    cli()
