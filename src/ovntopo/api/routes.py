"""
REST API for ovntopo.

Serves overview and per-VPC topology graphs, the per-kind form schema,
and proxies resource create/patch/delete to the Kube-OVN resource API.
"""

import logging
from typing import Optional

try:
    from flask import Flask, Blueprint, jsonify, request, abort
except ImportError:
    Flask = None
    Blueprint = None

from ..errors import ResourceStoreError, UnknownResourceKind, VpcNotFound
from ..graph.builder import ALL_VPCS
from ..schema.resource_configs import (
    RESOURCE_CONFIGS,
    get_config,
    get_display_columns,
    parse_specs,
    table_row,
    validate_create,
)
from ..schema.table import filter_and_sort
from .service import TopologyService

logger = logging.getLogger(__name__)


class TopologyAPI:
    """
    REST API server for Kube-OVN topology and resource management.

    Endpoints:
      GET    /api/v1/health                    — API health check
      GET    /api/v1/topology                  — One graph per VPC
      GET    /api/v1/topology/vpc/<name>       — Single VPC with pods
      GET    /api/v1/schema                    — All resource form schemas
      GET    /api/v1/schema/<kind>             — Form schema for one kind
      GET    /api/v1/resources/<kind>          — List (search, sort, order)
      POST   /api/v1/resources/<kind>          — Create (validated)
      PATCH  /api/v1/resources/<kind>/<name>   — Replace spec fields
      DELETE /api/v1/resources/<kind>/<name>   — Delete
      GET    /api/v1/notifications             — Pending notifications
      DELETE /api/v1/notifications/<id>        — Dismiss a notification
    """

    def __init__(self, service: TopologyService):
        self.service = service

    def create_app(self) -> "Flask":
        """Create and configure the Flask application."""
        if Flask is None:
            raise ImportError("Flask is required: pip install flask")

        app = Flask(__name__)
        api = Blueprint("api", __name__, url_prefix="/api/v1")
        service = self.service

        def _require_kind(kind: str):
            if kind not in RESOURCE_CONFIGS:
                abort(404, f"Unknown resource type: {kind}")

        def _scope_arg() -> Optional[str]:
            return request.args.get("scope") or None

        @api.route("/health")
        def health():
            return jsonify({
                "status": "ok",
                "api_base_url": service.client.base_url,
                "notifications": len(service.notifications()),
            })

        @api.route("/topology")
        def topology():
            graphs = service.overview()
            return jsonify({
                "scope": ALL_VPCS,
                "vpcs": [g.to_dict() for g in graphs],
                "count": len(graphs),
            })

        @api.route("/topology/vpc/<name>")
        def topology_vpc(name):
            try:
                graph = service.vpc_detail(name)
            except VpcNotFound as exc:
                abort(404, str(exc))
            return jsonify(graph.to_dict())

        @api.route("/schema")
        def schema_all():
            return jsonify({kind: cfg.to_dict() for kind, cfg in RESOURCE_CONFIGS.items()})

        @api.route("/schema/<kind>")
        def schema(kind):
            try:
                cfg = get_config(kind)
            except UnknownResourceKind as exc:
                abort(404, str(exc))
            data = cfg.to_dict()
            data["columns"] = get_display_columns(kind)
            return jsonify(data)

        @api.route("/resources/<kind>", methods=["GET"])
        def list_resources(kind):
            _require_kind(kind)
            try:
                items = service.list_resources(kind)
            except ResourceStoreError as exc:
                abort(502, str(exc))
            items = filter_and_sort(
                items,
                search=request.args.get("search", ""),
                sort_field=request.args.get("sort", "name"),
                descending=request.args.get("order", "asc") == "desc",
            )
            return jsonify({
                "columns": get_display_columns(kind),
                "rows": [table_row(kind, obj) for obj in items],
                "items": items,
                "count": len(items),
            })

        @api.route("/resources/<kind>", methods=["POST"])
        def create_resource(kind):
            _require_kind(kind)
            data = request.get_json(silent=True)
            if not isinstance(data, dict) or not data:
                abort(400, "Request must include a JSON object body")

            name = data.get("name", "")
            raw_spec = data.get("spec") or {}
            if not isinstance(name, str):
                abort(400, "'name' must be a string")
            if not isinstance(raw_spec, dict):
                abort(400, "'spec' must be an object")
            specs = parse_specs(kind, raw_spec)
            errors = validate_create(kind, name, specs)
            if errors:
                return jsonify({"error": "Please fill in all required fields", "fields": errors}), 400

            namespace = data.get("namespace")
            if not isinstance(namespace, str) or not namespace:
                namespace = None

            try:
                result = service.create(kind, name.strip(), specs, namespace, scope=_scope_arg())
            except ResourceStoreError as exc:
                return jsonify({"error": str(exc), "detail": exc.body}), 502
            return jsonify({"status": "created", "result": result}), 201

        @api.route("/resources/<kind>/<name>", methods=["PATCH"])
        def patch_resource(kind, name):
            _require_kind(kind)
            data = request.get_json(silent=True)
            if not isinstance(data, dict) or "spec" not in data:
                abort(400, "Request must include 'spec' field")
            if not isinstance(data["spec"], dict):
                abort(400, "'spec' must be an object")

            specs = parse_specs(kind, data["spec"])
            try:
                result = service.update(kind, name, specs, scope=_scope_arg())
            except ResourceStoreError as exc:
                return jsonify({"error": str(exc), "detail": exc.body}), 502
            return jsonify({"status": "updated", "result": result})

        @api.route("/resources/<kind>/<name>", methods=["DELETE"])
        def delete_resource(kind, name):
            _require_kind(kind)
            try:
                service.delete(kind, name, scope=_scope_arg())
            except ResourceStoreError as exc:
                return jsonify({"error": str(exc), "detail": exc.body}), 502
            return jsonify({"status": "deleted", "name": name})

        @api.route("/notifications", methods=["GET"])
        def notifications():
            notes = service.notifications()
            return jsonify({"notifications": [n.to_dict() for n in notes], "count": len(notes)})

        @api.route("/notifications/<int:notification_id>", methods=["DELETE"])
        def dismiss(notification_id):
            if not service.dismiss(notification_id):
                abort(404, f"Notification {notification_id} not found")
            return jsonify({"status": "dismissed", "id": notification_id})

        app.register_blueprint(api)
        return app
