# backend/shopledger/routes/staff.py
from flask import Blueprint, current_app, jsonify, request

from ..services import archive_service, staff_service
from ..services.errors import LedgerError
from ..services.store_service import get_store
from ..validation import coerce_bool, require_store_id


staff_bp = Blueprint("staff", __name__, url_prefix="/api/staff")


@staff_bp.get("")
def list_staff_route():
    try:
        store_id = require_store_id(request.args)
        get_store(store_id)
        include_archived = coerce_bool("include_archived", request.args.get("include_archived", "false"))
        staff = staff_service.list_staff(store_id, include_archived=include_archived)
        return jsonify([s.to_dict() for s in staff]), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to list staff")
        return jsonify({"error": "Internal server error"}), 500


@staff_bp.delete("/<int:staff_id>")
def archive_staff_route(staff_id: int):
    try:
        archive_service.archive_staff(staff_id)
        return "", 204
    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to archive staff %s", staff_id)
        return jsonify({"error": "Internal server error"}), 500


@staff_bp.post("/<int:staff_id>/restore")
def restore_staff_route(staff_id: int):
    try:
        staff = archive_service.restore_staff(staff_id)
        return jsonify(staff.to_dict()), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to restore staff %s", staff_id)
        return jsonify({"error": "Internal server error"}), 500


@staff_bp.delete("/<int:staff_id>/permanent")
def delete_staff_route(staff_id: int):
    try:
        archive_service.delete_staff_permanently(staff_id)
        return "", 204

    except LedgerError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to delete staff %s", staff_id)
        return jsonify({"error": "Internal server error"}), 500
