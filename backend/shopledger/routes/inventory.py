# backend/shopledger/routes/inventory.py
"""
Inventory routes: restocking, restock history and deletion.

Money fields are integer cents. A restock recomputes the item's cost price
under the requested cost strategy (keep, last, weighted, override).
"""
from flask import Blueprint, current_app, jsonify, request

from ..services import archive_service, inventory_service, restock_service
from ..services.errors import LedgerError, NotFoundError
from ..validation import parse_restock_payload


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.post("/<int:inventory_id>/restock")
def restock_route(inventory_id: int):
    try:
        params = parse_restock_payload(request.get_json(silent=True))
        item, event = restock_service.apply_restock(inventory_id=inventory_id, **params)
        return jsonify({"item": item.to_dict(), "restock_event": event.to_dict()}), 201

    except NotFoundError as e:
        return jsonify(e.to_dict()), 404
    except LedgerError as e:
        current_app.logger.info("Restock of inventory %s rejected: %s", inventory_id, e.code)
        return jsonify(e.to_dict()), 400
    except Exception:
        current_app.logger.exception("Failed to restock inventory %s", inventory_id)
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.get("/<int:inventory_id>/restocks")
def list_restocks_route(inventory_id: int):
    try:
        limit = min(request.args.get("limit", 200, type=int), 500)
        events = inventory_service.list_restock_events(inventory_id=inventory_id, limit=limit)
        return jsonify([e.to_dict() for e in events]), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to list restocks of inventory %s", inventory_id)
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.delete("/<int:inventory_id>")
def delete_item_route(inventory_id: int):
    try:
        archive_service.delete_inventory_item(inventory_id)
        return "", 204

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to delete inventory %s", inventory_id)
        return jsonify({"error": "Internal server error"}), 500
