# Overview: Flask API routes for read-side reports; every report is scoped by store_id.

# backend/shopledger/routes/reports.py
from flask import Blueprint, current_app, jsonify, request

from ..services import ledger_service, profit_loss_service, reporting_service
from ..services.errors import LedgerError
from ..services.store_service import get_store
from ..validation import require_store_id


reports_bp = Blueprint("reports", __name__, url_prefix="/api")


def _report(builder, name: str):
    try:
        store_id = require_store_id(request.args)
        return jsonify(builder(store_id)), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), 400
    except Exception:
        current_app.logger.exception("Failed to build %s report", name)
        return jsonify({"error": "Internal server error"}), 500


def _profit_loss(store_id: int):
    get_store(store_id)
    return profit_loss_service.list_profit_loss(store_id)


def _ledger_events(store_id: int):
    get_store(store_id)
    events = ledger_service.list_ledger_events(
        store_id=store_id,
        entity_type=request.args.get("entity_type"),
        entity_id=request.args.get("entity_id", type=int),
        limit=min(request.args.get("limit", 200, type=int), 500),
    )
    return [e.to_dict() for e in events]


@reports_bp.get("/profit-loss")
def profit_loss_route():
    return _report(_profit_loss, "profit/loss")


@reports_bp.get("/dashboard/stats")
def dashboard_stats_route():
    return _report(reporting_service.dashboard_stats, "dashboard")


@reports_bp.get("/charts/sales-trends")
def sales_trends_route():
    return _report(reporting_service.sales_trends, "sales trends")


@reports_bp.get("/charts/revenue-by-type")
def revenue_by_type_route():
    return _report(reporting_service.revenue_by_item, "revenue by item")


@reports_bp.get("/ledger")
def ledger_route():
    return _report(_ledger_events, "ledger")
