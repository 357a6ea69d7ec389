from flask import Blueprint, jsonify

from services import qr
from services.directory import get_center, center_to_dict
from utils.auth_context import login_required

center_bp = Blueprint("center", __name__, url_prefix="/centers")


@center_bp.get("/<center_id>")
@login_required
def center_detail(center_id: str):
    return jsonify(center_to_dict(get_center(center_id))), 200


@center_bp.get("/<center_id>/qr")
def center_qr(center_id: str):
    # printed at the front desk; no user context needed
    center = get_center(center_id)
    return jsonify(center_id=center.id, payload=qr.generate(center.id)), 200
