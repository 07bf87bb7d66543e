"""
Frontend page routes.

Serves the static site and falls back to index.html for any GET path that
is not a real file, so client-side routing keeps working on reload.
Register this blueprint last.
"""

import os
import logging

from flask import Blueprint, send_from_directory, Response
from werkzeug.security import safe_join
from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
STATIC_DIR = os.path.abspath(os.getenv("STATIC_DIR", os.path.join(PROJECT_ROOT, "frontend")))
INDEX_PAGE = "index.html"

pages_bp = Blueprint("pages", __name__)

if not os.path.isfile(os.path.join(STATIC_DIR, INDEX_PAGE)):
    logging.warning(f"[Pages] {INDEX_PAGE} not found in {STATIC_DIR}")


@pages_bp.route("/", methods=["GET"])
def index() -> Response:
    return send_from_directory(STATIC_DIR, INDEX_PAGE)


@pages_bp.route("/home.html", methods=["GET"])
def home() -> Response:
    return send_from_directory(STATIC_DIR, "home.html")


@pages_bp.route("/info.html", methods=["GET"])
def info() -> Response:
    return send_from_directory(STATIC_DIR, "info.html")


@pages_bp.route("/<path:path>", methods=["GET"])
def catch_all(path: str) -> Response:
    """
    Serve a static asset if one exists at path, otherwise index.html.
    """
    candidate = safe_join(STATIC_DIR, path)
    if candidate and os.path.isfile(candidate):
        return send_from_directory(STATIC_DIR, path)
    return send_from_directory(STATIC_DIR, INDEX_PAGE)
