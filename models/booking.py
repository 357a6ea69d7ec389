from datetime import datetime
from models.db import db

CONFIRMED = "confirmed"
COMPLETED = "completed"
CANCELLED = "cancelled"

BOOKING_STATUSES = (CONFIRMED, COMPLETED, CANCELLED)

class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.String(36), unique=True, nullable=False, index=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    center_id = db.Column(db.String(64), nullable=False, index=True)
    center_name = db.Column(db.String(120), nullable=False)

    date = db.Column(db.Date, nullable=False, index=True)
    time_slot = db.Column(db.String(5), nullable=False)  # canonical "HH:MM"
    session_type = db.Column(db.String(80), nullable=False)
    price = db.Column(db.Integer, nullable=False)

    status = db.Column(db.String(20), nullable=False, default=CONFIRMED)
    # status values: confirmed, completed, cancelled

    user_display_name = db.Column(db.String(120), nullable=True)
    user_email = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    completed_at = db.Column(db.DateTime, nullable=True)
    cancelled_at = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        db.CheckConstraint("price > 0", name="ck_bookings_price_positive"),
        db.CheckConstraint(
            "status IN ('confirmed', 'completed', 'cancelled')",
            name="ck_bookings_status",
        ),
    )
