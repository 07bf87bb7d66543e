import pytest
from unittest.mock import MagicMock
from bson import ObjectId
from argon2 import PasswordHasher
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from petwiki.auth_service.utils import decode_token


@pytest.fixture
def stored_user():
    return {
        "_id": ObjectId(),
        "firstName": "A",
        "lastName": "B",
        "email": "a@b.com",
        "password": PasswordHasher().hash("pw"),
    }


def register_payload(**overrides):
    payload = {"firstName": "A", "lastName": "B", "email": "a@b.com", "password": "pw"}
    payload.update(overrides)
    return payload


def test_register_success(client, mock_db, mocker):
    new_id = ObjectId()
    mock_db.users.find_one.return_value = None
    mock_db.users.insert_one.return_value.inserted_id = new_id

    # Mock PasswordHasher instance
    mock_ph = mocker.patch("petwiki.auth_service.routes.ph")
    mock_ph.hash.return_value = "hashed_secret"

    response = client.post("/register", json=register_payload(email="  A@B.com "))

    assert response.status_code == 201
    data = response.get_json()
    assert decode_token(data["token"])["id"] == str(new_id)
    assert data["user"] == {
        "id": str(new_id),
        "firstName": "A",
        "lastName": "B",
        "email": "a@b.com",
    }

    # Verify DB interaction
    mock_ph.hash.assert_called_once_with("pw")
    inserted = mock_db.users.insert_one.call_args[0][0]
    assert inserted["email"] == "a@b.com"
    assert inserted["password"] == "hashed_secret"
    assert "joinedAt" in inserted


def test_register_missing_fields(client, mock_db):
    response = client.post("/register", json={})
    assert response.status_code == 400
    assert "Email and password required" in response.get_json()["error"]

    response = client.post("/register", json=register_payload(firstName=""))
    assert response.status_code == 400
    assert "First and last name required" in response.get_json()["error"]
    mock_db.users.insert_one.assert_not_called()


def test_register_duplicate_email(client, mock_db):
    mock_db.users.find_one.side_effect = [None, {"_id": ObjectId(), "email": "a@b.com"}]
    mock_db.users.insert_one.return_value.inserted_id = ObjectId()

    first = client.post("/register", json=register_payload())
    second = client.post("/register", json=register_payload())

    assert first.status_code == 201
    assert "token" in first.get_json()
    assert second.status_code == 400
    assert second.get_json() == {"error": "Email already exists"}
    assert mock_db.users.insert_one.call_count == 1


def test_register_concurrent_duplicate_caught_by_unique_index(client, mock_db):
    # Both requests pass the lookup; the store's unique index rejects the second insert
    mock_db.users.find_one.return_value = None
    first_insert = MagicMock(inserted_id=ObjectId())
    mock_db.users.insert_one.side_effect = [
        first_insert,
        DuplicateKeyError("E11000 duplicate key error collection: users index: email_unique"),
    ]

    responses = [client.post("/register", json=register_payload()) for _ in range(2)]

    statuses = sorted(r.status_code for r in responses)
    assert statuses == [201, 400]
    failed = next(r for r in responses if r.status_code == 400)
    assert failed.get_json() == {"error": "Email already exists"}


def test_register_store_error(client, mock_db):
    mock_db.users.find_one.return_value = None
    mock_db.users.insert_one.side_effect = ServerSelectionTimeoutError("no servers available")

    response = client.post("/register", json=register_payload())

    assert response.status_code == 400
    assert "no servers available" in response.get_json()["error"]


def test_login_success(client, mock_db, stored_user):
    mock_db.users.find_one.return_value = stored_user

    response = client.post("/login", json={"email": "a@b.com", "password": "pw"})

    assert response.status_code == 200
    data = response.get_json()
    assert decode_token(data["token"])["id"] == str(stored_user["_id"])
    assert data["user"]["email"] == "a@b.com"
    assert "password" not in data["user"]
    mock_db.users.find_one.assert_called_once_with({"email": "a@b.com"})


def test_login_missing_credentials(client, mock_db):
    response = client.post("/login", json={"email": "a@b.com"})
    assert response.status_code == 400
    assert "Email and password required" in response.get_json()["error"]


def test_login_user_not_found(client, mock_db):
    mock_db.users.find_one.return_value = None

    response = client.post("/login", json={"email": "nobody@b.com", "password": "pw"})

    assert response.status_code == 400
    assert response.get_json() == {"error": "User not found"}


@pytest.mark.parametrize("password", ["wrong", "PW", "pw ", "x" * 64])
def test_login_wrong_password_is_invalid_credentials(client, mock_db, stored_user, password):
    mock_db.users.find_one.return_value = stored_user

    response = client.post("/login", json={"email": "a@b.com", "password": password})

    assert response.status_code == 400
    assert response.get_json() == {"error": "Invalid credentials"}


def test_login_store_error(client, mock_db):
    mock_db.users.find_one.side_effect = ServerSelectionTimeoutError("no servers available")

    response = client.post("/login", json={"email": "a@b.com", "password": "pw"})

    assert response.status_code == 500
    assert "no servers available" in response.get_json()["error"]


@pytest.mark.parametrize("password", [123, ["pw"], {"pw": 1}, True])
def test_login_non_string_password(client, mock_db, stored_user, password):
    mock_db.users.find_one.return_value = stored_user

    response = client.post("/login", json={"email": "a@b.com", "password": password})

    assert response.status_code == 400
    assert response.get_json() == {"error": "Password must be a string"}


@pytest.mark.parametrize(
    "overrides",
    [
        {"firstName": {"first": "A"}},
        {"lastName": ["B"]},
        {"firstName": 7},
    ],
)
def test_register_non_string_names(client, mock_db, overrides):
    mock_db.users.find_one.return_value = None

    response = client.post("/register", json=register_payload(**overrides))

    assert response.status_code == 400
    assert response.get_json() == {"error": "First and last name must be strings"}
    mock_db.users.insert_one.assert_not_called()
