"""
Booking lifecycle: create, cancel, mark attendance.

    confirmed --cancel (window open, refund)--> cancelled
    confirmed --QR scan on the booking date--> completed

Both terminal. Every operation runs its booking write and its wallet write in
one database transaction, so a booking is never left unpaid and a refund is
never issued for a booking that stays confirmed.
"""

import logging

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.booking import CONFIRMED, COMPLETED, CANCELLED
from models.wallet_transaction import BOOKING, REFUND
from services import booking_store, time_window, wallet
from services.directory import get_profile
from services.errors import (
    AlreadyCancelled,
    AlreadyCompleted,
    BookingError,
    CenterMismatch,
    DuplicateTransaction,
    InsufficientBalance,
    InvalidState,
    InvalidTransition,
    NotToday,
    PersistenceError,
    ValidationError,
    WindowClosed,
)
from utils.audit import log_event

logger = logging.getLogger(__name__)


def _config(key, default):
    return current_app.config.get(key, default)


def current_time():
    return time_window.local_now(_config("TIMEZONE", "Asia/Kolkata"))


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Lifecycle commit failed")
        raise PersistenceError() from exc


def cancel_window_open(booking, now) -> bool:
    return time_window.can_cancel(
        booking.date, booking.time_slot, now,
        cutoff_minutes=_config("CANCEL_CUTOFF_MINUTES", time_window.CANCEL_CUTOFF_MINUTES),
    )


def check_in_window_open(booking, now) -> bool:
    """Gate for the scan button only; attendance itself uses the same-day rule."""
    return time_window.can_check_in(
        booking.date, booking.time_slot, now,
        opens_before=_config("CHECKIN_OPENS_MINUTES_BEFORE", time_window.CHECKIN_OPENS_MINUTES_BEFORE),
        closes_after=_config("CHECKIN_CLOSES_MINUTES_AFTER", time_window.CHECKIN_CLOSES_MINUTES_AFTER),
    )


def create_booking(user_id, center_id, date, time_slot, session_type, price, center_name, now=None):
    now = now or current_time()
    user = get_profile(user_id)

    if isinstance(price, bool) or not isinstance(price, int) or price <= 0:
        raise ValidationError("Price must be a positive whole number")
    if not center_id or not center_name:
        raise ValidationError("center_id and center_name are required")
    if not session_type:
        raise ValidationError("session_type is required")

    day = time_window.parse_date(date)
    slot = time_window.normalize_time_slot(time_slot)
    if time_window.is_past(day, slot, now):
        raise WindowClosed("Cannot book a session that has already started")

    # advisory: a concurrent debit elsewhere can still slip in before ours
    balance = wallet.get_balance(user.id)
    if balance < price:
        raise InsufficientBalance(details={"balance": balance, "price": price})

    try:
        booking = booking_store.create(
            user.id, center_id, day, slot, session_type, price, center_name, commit=False
        )
        wallet.debit(
            user.id,
            price,
            BOOKING,
            f"Booking at {center_name} on {day.isoformat()} - {slot}",
            reference=booking.booking_id,
            commit=False,
        )
    except BookingError:
        db.session.rollback()
        raise
    _commit()

    log_event("BOOKING_CREATE", user_id=user.id, entity="booking", entity_id=booking.booking_id,
              metadata={"center_id": center_id, "date": day.isoformat(), "time_slot": slot, "price": price})
    return booking


def cancel_booking(user_id, booking_code, now=None) -> int:
    """Cancel and refund the full price. Returns the refunded amount."""
    now = now or current_time()
    get_profile(user_id)

    booking = booking_store.get(booking_code, user_id)
    if booking.status != CONFIRMED:
        raise InvalidState(details={"status": booking.status})

    if not cancel_window_open(booking, now):
        starts_in = time_window.time_until(booking.date, booking.time_slot, now)
        if starts_in:
            message = (f"Cancellation is not available as your session starts {starts_in}. "
                       "Only bookings more than 1 hour before the session can be cancelled.")
        else:
            message = "Cancellation is not available as your session has already started."
        raise WindowClosed(message)

    price = booking.price
    center_name = booking.center_name

    try:
        booking_store.set_status(booking_code, user_id, CONFIRMED, CANCELLED, commit=False)
        wallet.credit(
            user_id,
            price,
            REFUND,
            f"Refund for cancelled booking at {center_name}",
            reference=booking_code,
            commit=False,
        )
    except (InvalidTransition, DuplicateTransaction):
        # another request got there first; its refund stands
        db.session.rollback()
        raise InvalidState("This booking was already cancelled or completed")
    except BookingError:
        db.session.rollback()
        raise
    _commit()

    log_event("BOOKING_CANCEL", user_id=user_id, entity="booking", entity_id=booking_code,
              metadata={"refund": price})
    return price


def mark_attendance(user_id, booking_code, scanned_center_id, now=None):
    now = now or current_time()
    get_profile(user_id)

    booking = booking_store.get(booking_code, user_id)
    if scanned_center_id != booking.center_id:
        raise CenterMismatch(details={"scanned_center_id": scanned_center_id})
    if booking.status == COMPLETED:
        raise AlreadyCompleted()
    if booking.status == CANCELLED:
        raise AlreadyCancelled()
    if not time_window.is_today(booking.date, now):
        raise NotToday()

    try:
        booking_store.set_status(booking_code, user_id, CONFIRMED, COMPLETED)
    except InvalidTransition as exc:
        if exc.details.get("status") == CANCELLED:
            raise AlreadyCancelled() from exc
        raise AlreadyCompleted() from exc

    log_event("ATTENDANCE_MARK", user_id=user_id, entity="booking", entity_id=booking_code,
              metadata={"center_id": scanned_center_id})
    return booking


def check_in(user_id, booking_code, submission, scanner, now=None):
    """Read the scanner submission, then mark attendance for that center."""
    center_id = scanner.scan_center_id(submission)
    return mark_attendance(user_id, booking_code, center_id, now=now)
