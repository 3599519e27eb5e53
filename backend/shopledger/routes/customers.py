# backend/shopledger/routes/customers.py
"""
Customer routes.

DELETE archives (soft delete); permanent deletion is a separate route and
is refused while the customer has purchase history.
"""
from flask import Blueprint, current_app, jsonify, request

from ..services import archive_service, customer_service
from ..services.errors import LedgerError
from ..validation import parse_customer_payload


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.post("")
def create_customer_route():
    try:
        params = parse_customer_payload(request.get_json(silent=True))
        customer = customer_service.create_customer(**params)
        return jsonify(customer.to_dict()), 201

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.delete("/<int:customer_id>")
def archive_customer_route(customer_id: int):
    try:
        archive_service.archive_customer(customer_id)
        return "", 204
    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to archive customer %s", customer_id)
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.post("/<int:customer_id>/restore")
def restore_customer_route(customer_id: int):
    try:
        customer = archive_service.restore_customer(customer_id)
        return jsonify(customer.to_dict()), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to restore customer %s", customer_id)
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.delete("/<int:customer_id>/permanent")
def delete_customer_route(customer_id: int):
    try:
        archive_service.delete_customer_permanently(customer_id)
        return "", 204

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to delete customer %s", customer_id)
        return jsonify({"error": "Internal server error"}), 500
