import os

# Ensure JWT_SECRET is set before any petwiki module is imported
os.environ["JWT_SECRET"] = "test_secret"

import pytest
from bson import ObjectId
from unittest.mock import MagicMock

from petwiki.gateway.server import create_app


@pytest.fixture
def app():
    app = create_app({"TESTING": True, "ENSURE_INDEXES": False})
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def mock_db(mocker):
    """
    Mocks the MongoDB database handed out by get_db().

    Collections are plain attributes on the mock (db.users, db.comments, ...)
    and every service module sees the same object.
    """
    db = MagicMock()
    for target in (
        "petwiki.auth_service.routes.get_db",
        "petwiki.auth_service.utils.get_db",
        "petwiki.centers_service.routes.get_db",
        "petwiki.comments_service.routes.get_db",
    ):
        mocker.patch(target, return_value=db)
    return db


@pytest.fixture
def user():
    return {
        "_id": ObjectId(),
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "password": "hashed_secret",
    }


@pytest.fixture
def auth_header(user, mock_db):
    """
    Authorization header for `user`, with the store returning that user.
    """
    from petwiki.auth_service.utils import create_token

    mock_db.users.find_one.return_value = user
    return {"Authorization": f"Bearer {create_token(user)}"}
