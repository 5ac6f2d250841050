"""
Visualization export for topology graphs.

Exports built graphs to D3.js JSON, Mermaid diagram syntax and a
standalone HTML page. Positions come from the builder's tiered layout;
nothing here re-lays out nodes.
"""

import json
import html
from typing import Iterable, Union

from ..graph.builder import TopologyGraph
from ..graph.events import GATEWAY, POD, SUBNET

# kind -> (fill, stroke), matching the node styles of the web view
NODE_COLORS = {
    GATEWAY: ("#f0f9ff", "#38bdf8"),
    SUBNET: ("#fefce8", "#facc15"),
    POD: ("#f0fdf4", "#22c55e"),
}

EDGE_COLORS = {
    "gateway": "#38bdf8",
    "pod": "#22c55e",
}


def _as_list(graphs: Union[TopologyGraph, Iterable]) -> list:
    if isinstance(graphs, TopologyGraph):
        return [graphs]
    return list(graphs)


class D3Exporter:
    """Export topology graphs to D3.js JSON with fixed positions."""

    @staticmethod
    def to_d3_json(graph: TopologyGraph) -> dict:
        """
        Convert a graph to D3.js JSON.

        Returns dict with 'scope', 'nodes' and 'links' arrays. Nodes carry
        fx/fy so a force simulation keeps them pinned.
        """
        nodes = []
        for n in graph.nodes:
            fill, stroke = NODE_COLORS.get(n.kind, ("#ffffff", "#dddddd"))
            nodes.append({
                "id": n.id,
                "kind": n.kind,
                "name": n.name,
                "label": n.label,
                "info": n.info,
                "editable": n.editable,
                "fx": n.position.x,
                "fy": n.position.y,
                "fill": fill,
                "stroke": stroke,
            })

        links = []
        for e in graph.edges:
            links.append({
                "id": e.id,
                "source": e.source,
                "target": e.target,
                "role": e.role,
                "label": e.label,
                "animated": e.animated,
            })

        return {"scope": graph.scope, "nodes": nodes, "links": links}

    @staticmethod
    def save(filepath: str, graphs, **kwargs):
        """Save D3.js JSON to file. Several graphs are written as a list."""
        items = [D3Exporter.to_d3_json(g) for g in _as_list(graphs)]
        data = items[0] if isinstance(graphs, TopologyGraph) else items
        with open(filepath, "w") as f:
            json.dump(data, f, indent=2, default=str)


class MermaidExporter:
    """Export topology graphs to Mermaid diagram syntax."""

    @staticmethod
    def to_mermaid(graphs, direction: str = "TB", title: str = "") -> str:
        """Convert one graph, or several as subgraphs, to Mermaid syntax."""
        lines = [f"graph {direction}"]
        if title:
            lines.insert(0, f"---\ntitle: {title}\n---")

        items = _as_list(graphs)
        # node id -> mermaid id, numbered across all graphs in the diagram
        ids = {}
        for g_index, graph in enumerate(items):
            indent = "    "
            if len(items) > 1:
                lines.append(f"    subgraph vpc{g_index}[\"VPC: {graph.scope}\"]")
                indent = "        "

            for n in graph.nodes:
                name = ids.setdefault(n.id, f"n{len(ids)}")
                label = n.label.replace('"', "'")
                if n.kind == GATEWAY:
                    lines.append(f"{indent}{name}{{{{\"{label}\"}}}}")
                elif n.kind == SUBNET:
                    lines.append(f"{indent}{name}[\"{label}\"]")
                else:
                    lines.append(f"{indent}{name}(\"{label}\")")

            for e in graph.edges:
                src, dst = ids[e.source], ids[e.target]
                if e.role == "pod":
                    lines.append(f"{indent}{src} -.-> {dst}")
                else:
                    lines.append(f"{indent}{src} -- \"{e.label}\" --> {dst}")

            if len(items) > 1:
                lines.append("    end")

        return "\n".join(lines)

    @staticmethod
    def save(filepath: str, graphs, **kwargs):
        """Save Mermaid diagram to file."""
        content = MermaidExporter.to_mermaid(graphs, **kwargs)
        with open(filepath, "w") as f:
            f.write(content)


class HTMLExporter:
    """Generate a static HTML topology page, one panel per VPC."""

    @staticmethod
    def to_html(graphs, title: str = "Kube-OVN Network Topology", height: int = 450) -> str:
        """Generate a standalone HTML page drawing each graph with D3.js."""
        data_json = _script_safe(json.dumps([D3Exporter.to_d3_json(g) for g in _as_list(graphs)], default=str))

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(title)}</title>
    <script src="https://d3js.org/d3.v7.min.js"></script>
    <style>
        body {{ margin: 0; background: #f8fafc; color: #1e293b; font-family: sans-serif; }}
        h1 {{ text-align: center; padding: 10px; margin: 0; }}
        .cards {{ display: flex; flex-wrap: wrap; gap: 16px; padding: 16px; }}
        .card {{ background: #fff; border-radius: 6px; box-shadow: 0 2px 4px rgba(0,0,0,0.1);
            flex: 1 1 480px; }}
        .card header {{ background: #0d6efd; color: #fff; padding: 8px 12px;
            display: flex; justify-content: space-between; }}
        .node rect {{ stroke-width: 2; rx: 12; }}
        .node text {{ font-size: 11px; text-anchor: middle; }}
        .node .info {{ fill: #666; font-size: 10px; }}
        .link {{ stroke-width: 2; }}
        .link.pod {{ stroke-width: 1; stroke-dasharray: 2,2; }}
    </style>
</head>
<body>
    <h1>{html.escape(title)}</h1>
    <div class="cards" id="cards"></div>
    <script>
    const graphs = {data_json};
    const height = {height};
    const edgeColors = {json.dumps(EDGE_COLORS)};

    graphs.forEach((g) => {{
        const card = d3.select("#cards").append("div").attr("class", "card");
        const counts = g.nodes.reduce((acc, n) => {{ acc[n.kind] = (acc[n.kind] || 0) + 1; return acc; }}, {{}});
        const header = card.append("header");
        header.append("strong").text(`VPC: ${{g.scope}}`);
        header.append("small").text(`${{counts.subnet || 0}} subnet(s), ${{counts.gateway || 0}} gateway(s)`);

        const xs = g.nodes.map(n => n.fx), ys = g.nodes.map(n => n.fy);
        const minX = Math.min(0, ...xs) - 100, maxX = Math.max(400, ...xs) + 100;
        const minY = Math.min(0, ...ys) - 40, maxY = Math.max(300, ...ys) + 60;
        const svg = card.append("svg")
            .attr("width", "100%").attr("height", height)
            .attr("viewBox", [minX, minY, maxX - minX, maxY - minY]);
        const root = svg.append("g");
        svg.call(d3.zoom().scaleExtent([0.5, 2]).on("zoom", (event) => {{
            root.attr("transform", event.transform);
        }}));

        const byId = Object.fromEntries(g.nodes.map(n => [n.id, n]));
        root.append("g").selectAll("line")
            .data(g.links).enter().append("line")
            .attr("class", d => `link ${{d.role}}`)
            .attr("stroke", d => edgeColors[d.role] || "#999")
            .attr("x1", d => byId[d.source].fx).attr("y1", d => byId[d.source].fy)
            .attr("x2", d => byId[d.target].fx).attr("y2", d => byId[d.target].fy);

        const node = root.append("g").selectAll("g")
            .data(g.nodes).enter().append("g")
            .attr("class", "node")
            .attr("transform", d => `translate(${{d.fx}},${{d.fy}})`);
        node.append("rect")
            .attr("x", -85).attr("y", -20).attr("width", 170).attr("height", 40)
            .attr("fill", d => d.fill).attr("stroke", d => d.stroke);
        node.append("text").attr("dy", -3).text(d => d.label);
        node.append("text").attr("class", "info").attr("dy", 12).text(d => d.info);
    }});
    </script>
</body>
</html>"""

    @staticmethod
    def save(filepath: str, graphs, **kwargs):
        """Save the HTML topology page."""
        content = HTMLExporter.to_html(graphs, **kwargs)
        with open(filepath, "w") as f:
            f.write(content)


def _script_safe(data_json: str) -> str:
    """Escape JSON so it cannot close or comment out an inline <script> block."""
    return data_json.replace("<", "\\u003c").replace(">", "\\u003e").replace("&", "\\u0026")
