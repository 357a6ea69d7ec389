"""Read-only lookups for user profiles and centers."""

import logging
from urllib.parse import urlencode

from models.user import User
from models.center import Center
from services.errors import UserNotFound, CenterNotFound

logger = logging.getLogger(__name__)

DIRECTIONS_BASE_URL = "https://www.google.com/maps/dir/"


def resolve_profile(auth_uid: str) -> User:
    """Map the auth provider's identity to the internal profile row."""
    if not auth_uid:
        raise UserNotFound()
    user = User.query.filter_by(auth_uid=auth_uid).first()
    if not user:
        logger.info("No profile for auth uid %s", auth_uid)
        raise UserNotFound()
    return user


def get_profile(user_id: int) -> User:
    user = User.query.get(user_id) if user_id is not None else None
    if not user:
        raise UserNotFound()
    return user


def get_center(center_id: str) -> Center:
    center = Center.query.get(center_id) if center_id else None
    if not center or not center.is_active:
        raise CenterNotFound()
    return center


def directions_url(center: Center):
    if center.latitude is None or center.longitude is None:
        return None
    query = urlencode({"api": 1, "destination": f"{center.latitude},{center.longitude}"})
    return f"{DIRECTIONS_BASE_URL}?{query}"


def center_to_dict(center: Center) -> dict:
    return {
        "id": center.id,
        "name": center.name,
        "address": center.address,
        "latitude": center.latitude,
        "longitude": center.longitude,
        "directions_url": directions_url(center),
    }
