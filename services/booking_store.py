"""Persistence and retrieval of booking rows."""

import logging
import uuid
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.booking import Booking, CONFIRMED, COMPLETED, CANCELLED
from services import time_window
from services.directory import get_profile
from services.errors import NotFound, InvalidTransition, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

# allowed stored-status transitions; completed and cancelled are terminal
TRANSITIONS = {
    CONFIRMED: {COMPLETED, CANCELLED},
    COMPLETED: set(),
    CANCELLED: set(),
}

VIEWS = ("all", "upcoming", "past")


def _commit_or_flush(commit: bool):
    try:
        if commit:
            db.session.commit()
        else:
            db.session.flush()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Booking write failed")
        raise PersistenceError() from exc


def create(user_id, center_id, date, time_slot, session_type, price, center_name, commit=True) -> Booking:
    user = get_profile(user_id)

    booking = Booking(
        booking_id=str(uuid.uuid4()),
        user_id=user.id,
        center_id=center_id,
        center_name=center_name,
        date=time_window.parse_date(date),
        time_slot=time_window.normalize_time_slot(time_slot),
        session_type=session_type,
        price=price,
        status=CONFIRMED,
        user_display_name=user.display_name,
        user_email=user.email,
    )
    db.session.add(booking)
    _commit_or_flush(commit)
    return booking


def get(booking_code, user_id) -> Booking:
    booking = Booking.query.filter_by(booking_id=booking_code, user_id=user_id).first()
    if not booking:
        raise NotFound()
    return booking


def set_status(booking_code, user_id, from_status, to_status, commit=True):
    """
    Conditional update: only succeeds if the stored status still equals
    ``from_status``. Of two concurrent callers only one sees rowcount 1.
    """
    if to_status not in TRANSITIONS.get(from_status, set()):
        raise InvalidTransition(f"Cannot move a booking from {from_status} to {to_status}")

    values = {Booking.status: to_status}
    now = datetime.utcnow()
    if to_status == CANCELLED:
        values[Booking.cancelled_at] = now
    elif to_status == COMPLETED:
        values[Booking.completed_at] = now

    try:
        updated = (
            Booking.query
            .filter_by(booking_id=booking_code, user_id=user_id, status=from_status)
            .update(values, synchronize_session=False)
        )
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Status update for booking %s failed", booking_code)
        raise PersistenceError() from exc

    if updated == 0:
        current = (
            Booking.query
            .filter_by(booking_id=booking_code, user_id=user_id)
            .populate_existing()
            .first()
        )
        if not current:
            raise NotFound()
        raise InvalidTransition(details={"status": current.status})

    _commit_or_flush(commit)


def display_view(booking: Booking, now) -> dict:
    """
    Derived state for listings. A confirmed booking whose session already
    started shows as completed here; the stored status is left alone.
    """
    past = time_window.is_past(booking.date, booking.time_slot, now)
    shown = booking.status
    if booking.status == CONFIRMED and past:
        shown = COMPLETED
    return {"phase": "past" if past else "upcoming", "display_status": shown}


def _instant_key(booking: Booking):
    try:
        return time_window.session_instant(booking.date, booking.time_slot)
    except ValidationError:
        return time_window.session_instant(booking.date, "00:00")


def list_for_user(user_id, now, view="all"):
    if view not in VIEWS:
        raise ValidationError(f"view must be one of {', '.join(VIEWS)}")
    get_profile(user_id)

    rows = Booking.query.filter_by(user_id=user_id).all()

    upcoming = []
    past = []
    for b in rows:
        if b.status == CONFIRMED and not time_window.is_past(b.date, b.time_slot, now):
            upcoming.append(b)
        else:
            past.append(b)

    upcoming.sort(key=_instant_key)
    past.sort(key=_instant_key, reverse=True)

    if view == "upcoming":
        return upcoming
    if view == "past":
        return past
    return upcoming + past


def booking_to_dict(b: Booking, now=None) -> dict:
    out = {
        "id": b.id,
        "booking_id": b.booking_id,
        "user_id": b.user_id,
        "center_id": b.center_id,
        "center_name": b.center_name,
        "date": b.date.isoformat(),
        "time_slot": b.time_slot,
        "session_type": b.session_type,
        "price": b.price,
        "status": b.status,
        "user_display_name": b.user_display_name,
        "user_email": b.user_email,
        "created_at": b.created_at.isoformat() if b.created_at else None,
        "cancelled_at": b.cancelled_at.isoformat() if b.cancelled_at else None,
        "completed_at": b.completed_at.isoformat() if b.completed_at else None,
    }
    if now is not None:
        out.update(display_view(b, now))
    return out
