from flask import Blueprint, current_app, request, jsonify, g

from models.booking import CONFIRMED
from services import booking_store, lifecycle, time_window
from utils.auth_context import login_required

checkin_bp = Blueprint("checkin", __name__)


@checkin_bp.get("/bookings/<booking_code>/check-in-window")
@login_required
def check_in_window(booking_code: str):
    now = lifecycle.current_time()
    booking = booking_store.get(booking_code, g.user.id)
    open_now = booking.status == CONFIRMED and lifecycle.check_in_window_open(booking, now)
    return jsonify(
        booking_id=booking.booking_id,
        can_scan=open_now,
        starts_in=time_window.time_until(booking.date, booking.time_slot, now),
    ), 200


@checkin_bp.post("/bookings/<booking_code>/attendance")
@login_required
def mark_attendance(booking_code: str):
    data = request.get_json(silent=True) or {}
    scanner = current_app.extensions["qr_scanner"]
    booking = lifecycle.check_in(g.user.id, booking_code, data, scanner)
    return jsonify(
        message="Attendance marked successfully!",
        booking=booking_store.booking_to_dict(booking),
    ), 200
