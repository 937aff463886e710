"""Routes for reading the structured logging system."""
from __future__ import annotations

from flask import jsonify, request

from ..logging_service import log_manager
from . import bp


@bp.route("/feed")
def feed():
    """Return filtered logs as JSON data."""
    level = request.args.get("level")
    component = request.args.get("component")
    search = request.args.get("search")
    limit = request.args.get("limit", type=int) or 50
    logs = log_manager.fetch_logs(level=level, component=component, search=search, limit=limit)
    return jsonify(
        {
            "logs": logs,
            "latest": log_manager.latest_timestamp(),
            "levels": log_manager.available_levels,
            "components": log_manager.available_components,
        }
    )
