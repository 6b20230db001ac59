from flask import Blueprint, request, jsonify, make_response, current_app
from models.users import User
from models import db
from utils.tokens import get_jwt_token, decode_jwt

auth_bp = Blueprint('auth_bp', __name__)


# CORS for Blueprint
@auth_bp.after_request
def after_request(response):
    origin = request.headers.get('Origin')
    if origin in current_app.config.get("CORS_ORIGINS", []):
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"

    return response


# Login
@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json() or {}
    username_or_email = data.get("username_or_email")
    password = data.get("password")

    user = User.query.filter(
        (User.username == username_or_email) | (User.email == username_or_email)
    ).first()

    if not user or not user.check_password(password or ""):
        return jsonify({"error": "Invalid credentials"}), 401

    token = get_jwt_token({
        "user_id": user.id,
        "email": user.email,
        "role": user.role,
    })

    response = make_response(jsonify({
        "message": "Login successful",
        "user": {
            "id": user.id,
            "role": user.role,
            "username": user.username,
            "email": user.email
        }
    }))

    response.set_cookie(
        "access_token", token,
        httponly=True,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite="Lax",
        path="/",
        max_age=current_app.config.get("JWT_EXPIRATION_HOURS", 24) * 3600
    )

    return response


# Logout
@auth_bp.route('/logout', methods=['POST'])
def logout():
    response = make_response(jsonify({"message": "Logout successful"}))
    response.set_cookie("access_token", "", httponly=True, path="/", max_age=0)
    return response


# Register
@auth_bp.route('/register', methods=['POST'])
def register():
    data = request.get_json() or {}

    username = data.get('username')
    email = data.get('email')
    password = data.get('password')

    if not username or not email or not password:
        return jsonify({"error": "All fields are required"}), 400

    existing_user = User.query.filter(
        (User.username == username) | (User.email == email)
    ).first()

    if existing_user:
        return jsonify({"error": "User already exists"}), 409

    # admins are provisioned out of band; self-registration is always a challenger
    new_user = User(username=username, email=email, role="challenger")
    new_user.set_password(password)

    db.session.add(new_user)
    db.session.commit()

    return jsonify({"message": "User registered successfully!", "user": new_user.to_dict()}), 201


# Auth Check
@auth_bp.route('/check-auth', methods=['GET'])
def check_auth():
    token = request.cookies.get("access_token")

    if not token:
        return jsonify({"error": "Not authenticated"}), 401

    decoded_token = decode_jwt(token)
    if not decoded_token:
        return jsonify({"error": "Invalid or expired token"}), 401

    return jsonify({
        "message": "Authenticated",
        "user": {
            "id": decoded_token.get("user_id"),
            "role": decoded_token.get("role"),
            "email": decoded_token.get("email"),
        }
    }), 200
