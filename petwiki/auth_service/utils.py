"""
Shared authentication helpers.
Provides token creation, verification, and the request-level auth guard.
"""

import os
import logging
import jwt
from datetime import datetime, timedelta, timezone
from typing import Tuple, Optional, Dict, Any
from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import PyMongoError
from flask import g, jsonify, request, Response
from dotenv import load_dotenv

from petwiki.database.db_connection import get_db

# Load .env only once here
load_dotenv()

# Load secrets & configs
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    raise RuntimeError("JWT_SECRET is missing. Set it in .env")

JWT_ALGORITHM = "HS256"
TOKEN_EXPIRATION_DAYS = 7

AUTH_FAILED_MESSAGE = "Please authenticate"


class InvalidToken(Exception):
    """Raised when a token is malformed, forged, or expired."""


def user_view(user: Dict[str, Any]) -> Dict[str, Any]:
    """
    Client-safe projection of a user document (never includes the password hash).
    """
    return {
        "id": str(user["_id"]),
        "firstName": user.get("firstName"),
        "lastName": user.get("lastName"),
        "email": user.get("email"),
    }


def display_name(user: Dict[str, Any]) -> str:
    """
    "First Last" as shown next to centers and comments.
    """
    return f"{user.get('firstName')} {user.get('lastName')}"


# --- JWT CREATION ---
def create_token(user: Dict[str, Any]) -> str:
    """
    Generates a new JWT for a given user.

    Args:
        user (dict): User document; only _id, firstName and lastName are embedded.

    Returns:
        str: Encoded JWT string, valid for TOKEN_EXPIRATION_DAYS.
    """
    now = datetime.now(timezone.utc)

    payload = {
        "id": str(user["_id"]),
        "firstName": user.get("firstName"),
        "lastName": user.get("lastName"),
        "exp": now + timedelta(days=TOKEN_EXPIRATION_DAYS),
        "iat": now
    }

    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


# --- JWT VALIDATION ---
def decode_token(token: str) -> Dict[str, Any]:
    """
    Verify a JWT and return its identity claims.

    Args:
        token (str): JWT string.

    Returns:
        dict: {"id", "firstName", "lastName"} from the token.

    Raises:
        InvalidToken: Bad signature, malformed token, missing id claim, or expired.
    """
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError as e:
        raise InvalidToken(str(e)) from e

    if not payload.get("id"):
        raise InvalidToken("token has no id claim")

    return {
        "id": payload["id"],
        "firstName": payload.get("firstName"),
        "lastName": payload.get("lastName"),
    }


def _unauthenticated() -> Tuple[None, Response, int]:
    return None, jsonify({"error": AUTH_FAILED_MESSAGE}), 401


def authenticate_request() -> Tuple[Optional[Dict[str, Any]], Optional[Response], Optional[int]]:
    """
    Resolve the bearer token on the current request to a stored user.

    Every failure (no header, bad token, expired token, user no longer
    exists) produces the same 401 body so callers cannot tell them apart.

    Returns:
        tuple: (user, error_response, status_code)
               On success the user document is also stored on flask.g.user
               and error_response/status_code are None.
    """
    auth = request.headers.get("Authorization", "")

    if not auth.startswith("Bearer "):
        return _unauthenticated()

    token = auth.split(" ", 1)[1].strip()
    if not token:
        return _unauthenticated()

    try:
        claims = decode_token(token)
        user = get_db().users.find_one({"_id": ObjectId(claims["id"])})
    except (InvalidToken, InvalidId, TypeError) as e:
        logging.info(f"[Auth] Rejected token: {e}")
        return _unauthenticated()
    except PyMongoError as e:
        logging.error(f"[Auth] Could not load user: {e}")
        return _unauthenticated()

    if not user:
        logging.info("[Auth] Token references a user that no longer exists")
        return _unauthenticated()

    g.user = user
    return user, None, None
