"""
Authentication service route handlers.

Provides routes for:
- User registration
- User login

All JWT logic is delegated to `auth_service.utils`.
"""

import logging
from datetime import datetime, timezone
from typing import Tuple, Dict, Any

from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError
from flask import Blueprint, request, jsonify, Response
from pymongo.errors import DuplicateKeyError, PyMongoError

from petwiki.database.db_connection import get_db
from petwiki.auth_service.utils import create_token, user_view

auth_bp = Blueprint("auth", __name__)
ph = PasswordHasher()

DUPLICATE_EMAIL_MESSAGE = "Email already exists"


# --- REQUEST LOGGING ---
@auth_bp.before_request
def before_request() -> None:
    """
    Log method and path of every request to the authentication service.
    Headers are left out so bearer tokens never reach the logs.
    """
    logging.info(f"[Auth] Incoming {request.method} {request.path}")


@auth_bp.after_request
def after_request(response: Response) -> Response:
    """
    Log the response status code for every request.

    Args:
        response (Response): The Flask response object.

    Returns:
        Response: The passed-through response object.
    """
    logging.info(f"[Auth] Response {response.status}")
    return response


# --- REGISTER ---
@auth_bp.route("/register", methods=["POST"])
def register() -> Tuple[Response, int]:
    """
    Register a new user in the system.

    Expects a JSON body with:
    - firstName (str)
    - lastName (str)
    - email (str): Unique email address.
    - password (str)

    Returns:
        201: JSON with a new JWT token and the user view.
        400: Missing fields, email already exists, or store rejected the insert.
        500: Password hashing failed.
    """
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    email: str = str(data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    first_name = data.get("firstName")
    last_name = data.get("lastName")

    # Validate input
    if not email or not password:
        return jsonify({"error": "Email and password required"}), 400
    if not first_name or not last_name:
        return jsonify({"error": "First and last name required"}), 400
    if not isinstance(first_name, str) or not isinstance(last_name, str):
        return jsonify({"error": "First and last name must be strings"}), 400
    if not isinstance(password, str):
        return jsonify({"error": "Password must be a string"}), 400

    try:
        db = get_db()
        if db.users.find_one({"email": email}):
            return jsonify({"error": DUPLICATE_EMAIL_MESSAGE}), 400
    except PyMongoError as e:
        logging.error(f"[Auth] Lookup failed during registration: {e}")
        return jsonify({"error": str(e)}), 400

    # Hash password using Argon2
    try:
        pw_hash = ph.hash(password)
    except Exception:
        logging.exception("[Auth] Password hashing failed")
        return jsonify({"error": "Password hashing failed"}), 500

    user = {
        "firstName": first_name,
        "lastName": last_name,
        "email": email,
        "password": pw_hash,
        "joinedAt": datetime.now(timezone.utc),
    }

    # The unique index on email settles concurrent registrations that both
    # passed the lookup above.
    try:
        result = db.users.insert_one(user)
    except DuplicateKeyError:
        return jsonify({"error": DUPLICATE_EMAIL_MESSAGE}), 400
    except PyMongoError as e:
        logging.error(f"[Auth] Registration insert failed: {e}")
        return jsonify({"error": str(e)}), 400

    user["_id"] = result.inserted_id

    # Generate initial token for immediate login
    token = create_token(user)

    return jsonify({"token": token, "user": user_view(user)}), 201


# --- LOGIN ---
@auth_bp.route("/login", methods=["POST"])
def login() -> Tuple[Response, int]:
    """
    Authenticate a user and return a JWT.

    Expects a JSON body with:
    - email (str)
    - password (str)

    Returns:
        200: JSON with JWT token and the user view.
        400: Missing credentials, unknown email, or wrong password.
        500: Database error.
    """
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    email: str = str(data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not email or not password:
        return jsonify({"error": "Email and password required"}), 400
    if not isinstance(password, str):
        return jsonify({"error": "Password must be a string"}), 400

    try:
        user = get_db().users.find_one({"email": email})
    except PyMongoError as e:
        logging.error(f"[Auth] Login lookup failed: {e}")
        return jsonify({"error": str(e)}), 500

    if not user:
        return jsonify({"error": "User not found"}), 400

    # Verify password against hash
    try:
        ph.verify(user.get("password") or "", password)
    except (VerificationError, InvalidHashError):
        return jsonify({"error": "Invalid credentials"}), 400

    token = create_token(user)

    return jsonify({"token": token, "user": user_view(user)}), 200
