from flask import Blueprint, request, jsonify, g

from models.booking import CONFIRMED
from services import booking_store, lifecycle, time_window
from services.directory import get_center
from utils.auth_context import login_required

booking_bp = Blueprint("booking", __name__)


def _now():
    return lifecycle.current_time()


def _text(data, key):
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""


# ---------- PLAYERS: book a session (wallet-paid) ----------
@booking_bp.post("/bookings")
@login_required
def create_booking():
    data = request.get_json(silent=True) or {}
    center_id = _text(data, "center_id")
    booking_date = data.get("date")
    time_slot = data.get("time_slot")
    session_type = _text(data, "session_type")
    price = data.get("price")

    if not center_id or not booking_date or not time_slot or not session_type or price is None:
        return jsonify(error="center_id, date, time_slot, session_type, price are required"), 400
    # bool is an int subclass; strings and floats are never coerced
    if isinstance(price, bool) or not isinstance(price, int):
        return jsonify(error="price must be a whole number"), 400

    # name comes from the directory, not the client
    center = get_center(center_id)

    booking = lifecycle.create_booking(
        g.user.id, center.id, booking_date, time_slot, session_type, price, center.name, now=_now()
    )
    return jsonify(booking_store.booking_to_dict(booking, _now())), 201


# ---------- PLAYERS: view my bookings ----------
@booking_bp.get("/bookings")
@login_required
def my_bookings():
    view = request.args.get("view", "all")  # all/upcoming/past
    now = _now()
    rows = booking_store.list_for_user(g.user.id, now, view=view)
    return jsonify([booking_store.booking_to_dict(b, now) for b in rows]), 200


@booking_bp.get("/bookings/<booking_code>")
@login_required
def booking_detail(booking_code: str):
    now = _now()
    booking = booking_store.get(booking_code, g.user.id)
    out = booking_store.booking_to_dict(booking, now)
    out["can_cancel"] = booking.status == CONFIRMED and lifecycle.cancel_window_open(booking, now)
    out["starts_in"] = time_window.time_until(booking.date, booking.time_slot, now)
    return jsonify(out), 200


# ---------- PLAYERS: cancel booking (policy window, full refund) ----------
@booking_bp.post("/bookings/<booking_code>/cancel")
@login_required
def cancel_booking(booking_code: str):
    refund = lifecycle.cancel_booking(g.user.id, booking_code, now=_now())
    return jsonify(message="Booking cancelled successfully. Refund processed.", refund=refund), 200
