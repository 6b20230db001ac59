from functools import wraps

from flask import g, jsonify, request

from utils.tokens import decode_jwt


def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = request.cookies.get("access_token")
        if not token:
            return jsonify({"error": "Unauthorized"}), 401

        decoded = decode_jwt(token)
        if not decoded:
            return jsonify({"error": "Invalid token"}), 401
        g.user = decoded

        return f(*args, **kwargs)

    return decorated_function


def admin_required(f):
    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        if g.user.get("role") != "admin":
            return jsonify({"error": "Forbidden"}), 403
        return f(*args, **kwargs)

    return decorated_function


def current_user_id():
    user = getattr(g, "user", None) or {}
    return user.get("user_id")
