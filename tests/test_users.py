"""
User and session route tests.

Validates:
- Sign up, sign in and sign out manage the session cookie
- Username collisions and malformed credentials
- Profile edits are partial
- A session pointing at a deleted account is cleared (500, then 403)
"""

from fastapi.testclient import TestClient
from sqlmodel import Session

from foodshare.models.user import User
from tests.helpers import sign_in, sign_out, sign_up


def test_sign_up_logs_in(client: TestClient):
    user = sign_up(
        client,
        "alice",
        homeCommunity="Maseeh",
        contactInfo="a@x.com",
        allergies="",
        otherDietaryRestrictions="vegan",
    )

    assert user["username"] == "alice"
    assert user["homeCommunity"] == "Maseeh"
    assert user["contactInfo"] == "a@x.com"
    assert user["allergies"] == ""
    assert user["otherDietaryRestrictions"] == "vegan"
    assert "passwordHash" not in user

    session_info = client.get("/api/users/session").json()
    assert session_info["user"]["id"] == user["id"]


def test_session_info_when_signed_out(client: TestClient):
    response = client.get("/api/users/session")

    assert response.status_code == 200
    assert response.json()["user"] is None


def test_sign_up_rejects_bad_input(client: TestClient):
    assert client.post("/api/users", json={"username": "bad name", "password": "secret"}).status_code == 400
    assert client.post("/api/users", json={"username": "alice", "password": "has space"}).status_code == 400
    assert client.post("/api/users", json={"password": "secret"}).status_code == 400

    response = client.post(
        "/api/users", json={"username": "alice", "password": "secret", "homeCommunity": "Atlantis"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Home Community must be a valid living community at or near MIT."}

    response = client.post("/api/users", json={"username": "alice", "password": "secret", "contactInfo": ""})
    assert response.json() == {"error": "You must provide contact info."}

    response = client.post("/api/users", json={"username": "alice", "password": "secret", "allergies": None})
    assert response.status_code == 400


def test_non_object_body_is_malformed(client: TestClient):
    response = client.post("/api/users", json=["alice", "secret"])

    assert response.status_code == 400
    assert "error" in response.json()


def test_sign_up_duplicate_username_is_case_insensitive(client: TestClient):
    sign_up(client, "alice")
    sign_out(client)

    response = client.post("/api/users", json={"username": "ALICE", "password": "secret"})

    assert response.status_code == 409
    assert response.json() == {"error": "An account with this username already exists."}


def test_sign_up_while_signed_in_is_forbidden(client: TestClient):
    sign_up(client, "alice")

    response = client.post("/api/users", json={"username": "bob", "password": "secret"})

    assert response.status_code == 403
    assert response.json() == {"error": "You are already signed in."}


def test_sign_in_and_out(client: TestClient):
    sign_up(client, "alice", password="secret")
    sign_out(client)
    assert client.get("/api/users/session").json()["user"] is None

    user = sign_in(client, "alice", password="secret")
    assert user["username"] == "alice"
    assert client.get("/api/users/session").json()["user"]["username"] == "alice"


def test_sign_in_failures(client: TestClient):
    sign_up(client, "alice", password="secret")
    sign_out(client)

    response = client.post("/api/users/session", json={"username": "alice", "password": "wrong"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid user login credentials provided."}

    response = client.post("/api/users/session", json={"username": "nobody", "password": "secret"})
    assert response.status_code == 401

    response = client.post("/api/users/session", json={"username": "alice", "password": ""})
    assert response.status_code == 400


def test_sign_out_requires_sign_in(client: TestClient):
    response = client.delete("/api/users/session")

    assert response.status_code == 403


def test_update_profile_is_partial(client: TestClient):
    sign_up(client, "alice", homeCommunity="Maseeh", contactInfo="a@x.com")

    response = client.patch("/api/users", json={"homeCommunity": "Simmons"})

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["homeCommunity"] == "Simmons"
    assert user["contactInfo"] == "a@x.com"
    assert user["username"] == "alice"


def test_update_username_and_password(client: TestClient):
    sign_up(client, "alice", password="secret")

    response = client.patch("/api/users", json={"username": "alice2", "password": "newsecret"})
    assert response.status_code == 200
    sign_out(client)

    assert client.post("/api/users/session", json={"username": "alice2", "password": "secret"}).status_code == 401
    sign_in(client, "alice2", password="newsecret")


def test_update_own_username_casing_is_allowed(client: TestClient):
    sign_up(client, "alice")

    response = client.patch("/api/users", json={"username": "Alice"})

    assert response.status_code == 200
    assert response.json()["user"]["username"] == "Alice"


def test_update_to_taken_username_conflicts(client: TestClient):
    sign_up(client, "alice")
    sign_out(client)
    sign_up(client, "bob")

    response = client.patch("/api/users", json={"username": "alice"})

    assert response.status_code == 409


def test_update_rejects_malformed_fields(client: TestClient):
    sign_up(client, "alice")

    assert client.patch("/api/users", json={"username": ""}).status_code == 400
    assert client.patch("/api/users", json={"password": "two words"}).status_code == 400
    assert client.patch("/api/users", json={"otherDietaryRestrictions": None}).status_code == 400


def test_delete_account_cascades_and_signs_out(client: TestClient):
    sign_up(client, "alice")
    client.put("/api/follows/Maseeh")
    client.post(
        "/api/listings",
        json={"name": "Bread", "quantity": 2, "expiration": "2024-01-01", "price": "1.00", "email": "a@x.com"},
    )

    response = client.delete("/api/users")

    assert response.status_code == 200
    assert client.get("/api/users/session").json()["user"] is None
    assert client.get("/api/listings").json() == []
    assert client.post("/api/users/session", json={"username": "alice", "password": "secret123"}).status_code == 401


def test_stale_session_is_cleared(client: TestClient, session: Session):
    """An account deleted elsewhere leaves a dangling session id behind"""
    user = sign_up(client, "alice")

    session.delete(session.get(User, user["id"]))
    session.commit()

    response = client.get("/api/follows/session")
    assert response.status_code == 500
    assert response.json() == {"error": "User session was not recognized."}

    # The session was cleared, so the same client is now anonymous
    response = client.get("/api/follows/session")
    assert response.status_code == 403
    assert response.json() == {"error": "You must be logged in to complete this action."}


def test_profile_syntax_checked_before_username_lookup(client: TestClient):
    sign_up(client, "alice")
    sign_out(client)

    response = client.post("/api/users", json={"username": "alice", "password": "secret", "homeCommunity": "Atlantis"})

    assert response.status_code == 400
    assert response.json() == {"error": "Home Community must be a valid living community at or near MIT."}
