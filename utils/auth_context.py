from functools import wraps
from flask import current_app, g, jsonify, request
from models.user import User

def load_current_user():
    # identity is asserted by the upstream authenticator; we only map it to a profile
    header = current_app.config.get("AUTH_UID_HEADER", "X-Auth-Uid")
    auth_uid = (request.headers.get(header) or "").strip()
    g.auth_uid = auth_uid or None
    if not auth_uid:
        g.user = None
        return
    g.user = User.query.filter_by(auth_uid=auth_uid).first()

def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "auth_uid", None) is None:
            return jsonify(error="Authentication required"), 401
        if getattr(g, "user", None) is None:
            return jsonify(error="User not found", code="UserNotFound"), 404
        return fn(*args, **kwargs)
    return wrapper
