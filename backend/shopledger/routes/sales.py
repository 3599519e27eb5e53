# Overview: Flask API routes for sales; parses input and returns JSON responses.

# backend/shopledger/routes/sales.py
"""Sales API routes: checkout and transaction history"""

from flask import Blueprint, current_app, jsonify, request

from ..services import checkout_service, reporting_service
from ..services.errors import LedgerError
from ..validation import parse_checkout_payload, require_store_id


sales_bp = Blueprint("sales", __name__, url_prefix="/api")


@sales_bp.post("/sales/checkout")
def checkout_route():
    """
    Record a sale of one or more line items.

    All line items are committed together or not at all.
    """
    try:
        params = parse_checkout_payload(request.get_json(silent=True))
        result = checkout_service.checkout(**params)
        if not result.success:
            current_app.logger.warning(
                "Checkout rejected for store %s: %s", params["store_id"], result.error_code
            )
            return jsonify(result.to_dict()), 400
        return jsonify(result.to_dict()), 201

    except LedgerError as e:
        return jsonify(e.to_dict()), 400
    except Exception:
        current_app.logger.exception("Failed to process checkout")
        return jsonify({"error": "Something went wrong while completing the sale. Please try again."}), 500


@sales_bp.get("/transactions")
def list_transactions_route():
    try:
        store_id = require_store_id(request.args)
        rows = reporting_service.list_transactions(
            store_id,
            start=request.args.get("start"),
            end=request.args.get("end"),
        )
        return jsonify(rows), 200

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to list transactions")
        return jsonify({"error": "Internal server error"}), 500
