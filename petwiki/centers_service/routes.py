"""
Adoption centers service route handlers.

Anyone can browse centers (optionally filtered by state and city);
signed-in users can add new ones.
"""

import logging
from datetime import datetime, timezone
from typing import Tuple, Dict, Any, List, Optional

from flask import Blueprint, request, jsonify, Response
from pymongo.errors import PyMongoError

from petwiki.database.db_connection import get_db
from petwiki.database.serializers import to_json
from petwiki.auth_service.utils import authenticate_request, display_name

centers_bp = Blueprint("centers", __name__)

# --- CONSTANTS FOR VALIDATION ---
STRING_FIELDS = ["name", "address", "city", "state", "phone"]


@centers_bp.before_request
def before_request() -> None:
    """Log method and path of every request to the centers service."""
    logging.info(f"[Centers] Incoming {request.method} {request.path}")


@centers_bp.after_request
def after_request(response: Response) -> Response:
    """Log the response status code for every request."""
    logging.info(f"[Centers] Response {response.status}")
    return response


def clean_breeds(value: Any) -> Optional[List[str]]:
    """
    Validate a breeds list and drop repeats, keeping first-seen order.

    Returns:
        list: The cleaned list, or None if value is not a list of strings.
    """
    if not isinstance(value, list) or not all(isinstance(b, str) for b in value):
        return None
    seen = set()
    breeds = []
    for breed in value:
        if breed not in seen:
            seen.add(breed)
            breeds.append(breed)
    return breeds


def resolve_creator_names(db, centers: List[Dict[str, Any]]) -> Dict[Any, str]:
    """
    Look up display names for every distinct addedBy in one query.

    Returns:
        dict: user _id -> "First Last". Ids with no matching user are absent.
    """
    creator_ids = list({c["addedBy"] for c in centers if c.get("addedBy") is not None})
    if not creator_ids:
        return {}
    users = db.users.find(
        {"_id": {"$in": creator_ids}}, {"firstName": 1, "lastName": 1}
    )
    return {u["_id"]: display_name(u) for u in users}


@centers_bp.route("", methods=["GET"])
def list_centers() -> Tuple[Response, int]:
    """
    Return adoption centers.

    Filters (both optional, combined with AND):
    - ?state=<state>
    - ?city=<city>

    Each center's addedBy is replaced by {"name": "First Last"}, or null when
    the creator can no longer be found.

    Returns:
        200: List of center objects in store order.
        500: Database error.
    """
    query: Dict[str, Any] = {}
    state = request.args.get("state")
    city = request.args.get("city")
    if state:
        query["state"] = state
    if city:
        query["city"] = city

    try:
        db = get_db()
        centers = list(db.adoptioncenters.find(query))
        names = resolve_creator_names(db, centers)
    except PyMongoError as e:
        logging.error(f"Database error listing centers: {e}")
        return jsonify({"error": str(e)}), 500

    rows = []
    for center in centers:
        name = names.get(center.get("addedBy"))
        row = to_json(center)
        row["addedBy"] = {"name": name} if name else None
        rows.append(row)

    return jsonify(rows), 200


@centers_bp.route("", methods=["POST"])
def create_center() -> Tuple[Response, int]:
    """
    Add an adoption center. Requires Authorization: Bearer <token>.

    Accepted fields: name (required), address, city, state, phone, breeds.
    Anything else in the body, including addedBy, is ignored; addedBy is
    always the caller.

    Returns:
        201: The stored center.
        400: Validation error or the store rejected the insert.
        401: Not authenticated.
    """
    user, err, code = authenticate_request()
    if err:
        return err, code

    data: Dict[str, Any] = request.get_json(silent=True) or {}

    # --- START VALIDATION ---
    if not data.get("name") or not isinstance(data.get("name"), str):
        return jsonify({"error": "name is required"}), 400

    center: Dict[str, Any] = {}
    for field in STRING_FIELDS:
        value = data.get(field)
        if value is None:
            continue
        if not isinstance(value, str):
            return jsonify({"error": f"{field} must be a string"}), 400
        center[field] = value

    raw_breeds = data.get("breeds")
    breeds = [] if raw_breeds is None else clean_breeds(raw_breeds)
    if breeds is None:
        return jsonify({"error": "breeds must be a list of strings"}), 400
    # --- END VALIDATION ---

    center["breeds"] = breeds
    center["addedBy"] = user["_id"]
    center["createdAt"] = datetime.now(timezone.utc)

    try:
        result = get_db().adoptioncenters.insert_one(center)
    except PyMongoError as e:
        logging.error(f"Error creating center: {e}")
        return jsonify({"error": str(e)}), 400

    center["_id"] = result.inserted_id
    return jsonify(to_json(center)), 201
