"""
Comments service route handlers.
Breed pages list and post user comments here.
"""

import logging
from datetime import datetime, timezone
from typing import Tuple, Dict, Any

from flask import Blueprint, request, jsonify, Response
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from petwiki.database.db_connection import get_db
from petwiki.database.serializers import to_json
from petwiki.auth_service.utils import authenticate_request, display_name

comments_bp = Blueprint("comments", __name__)


@comments_bp.before_request
def before_request() -> None:
    """Log method and path of every request to the comments service."""
    logging.info(f"[Comments] Incoming {request.method} {request.path}")


@comments_bp.after_request
def after_request(response: Response) -> Response:
    """Log the response status code for every request."""
    logging.info(f"[Comments] Response {response.status}")
    return response


@comments_bp.route("", methods=["GET"])
def list_comments() -> Tuple[Response, int]:
    """
    Return the comments posted on one breed, newest first.

    Query:
    - ?breedId=<id> (required)

    Returns:
        200: List of comment objects ordered by createdAt descending.
        400: breedId missing.
        500: Database error.
    """
    breed_id = request.args.get("breedId")
    if not breed_id:
        return jsonify({"error": "Breed ID is required"}), 400

    try:
        cursor = get_db().comments.find({"breedId": breed_id}).sort([("createdAt", DESCENDING)])
        comments = [to_json(c) for c in cursor]
    except PyMongoError as e:
        logging.error(f"Database error listing comments: {e}")
        return jsonify({"error": str(e)}), 500

    return jsonify(comments), 200


@comments_bp.route("", methods=["POST"])
def create_comment() -> Tuple[Response, int]:
    """
    Post a comment on a breed. Requires Authorization: Bearer <token>.

    Expects JSON:
        { "breedId": str, "content": str }

    userId and userName come from the signed-in user. userName is copied
    now so the comment keeps showing the name the author had when posting.

    Returns:
        201: The stored comment.
        400: Validation error or the store rejected the insert.
        401: Not authenticated.
    """
    user, err, code = authenticate_request()
    if err:
        return err, code

    data: Dict[str, Any] = request.get_json(silent=True) or {}
    breed_id = data.get("breedId")
    content = data.get("content")

    if not breed_id or not isinstance(breed_id, str):
        return jsonify({"error": "breedId is required"}), 400
    if not content or not isinstance(content, str):
        return jsonify({"error": "content is required"}), 400

    comment = {
        "breedId": breed_id,
        "content": content,
        "userId": user["_id"],
        "userName": display_name(user),
        "createdAt": datetime.now(timezone.utc),
    }

    try:
        result = get_db().comments.insert_one(comment)
    except PyMongoError as e:
        logging.error(f"Error creating comment: {e}")
        return jsonify({"error": str(e)}), 400

    comment["_id"] = result.inserted_id
    return jsonify(to_json(comment)), 201
